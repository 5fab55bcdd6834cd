from __future__ import annotations

import pytest

from furi.features import IpadicFeatures, UnidicFeatures
from furi.ruby import RubySegment, build_ruby_segments, ruby_for_token


def _pairs(segments: list[RubySegment]) -> list[tuple[str, str]]:
    return [(segment.text, segment.ruby) for segment in segments]


@pytest.mark.parametrize("surface", ["食べた", "東京", "ひらがな", "カタカナ", "a"])
def test_identity_reading_yields_single_plain_segment(surface: str) -> None:
    assert _pairs(build_ruby_segments(surface, surface)) == [(surface, "")]


@pytest.mark.parametrize("surface", ["食べた", "東京", "ひらがな"])
def test_no_reading_sentinel_yields_single_plain_segment(surface: str) -> None:
    assert _pairs(build_ruby_segments(surface, "*")) == [(surface, "")]


def test_kana_anchors_split_kanji_runs() -> None:
    segments = build_ruby_segments("食べた", "タベタ")
    assert _pairs(segments) == [("食", "タ"), ("べ", ""), ("た", "")]


def test_kanji_between_anchors_gets_exact_slice() -> None:
    segments = build_ruby_segments("お茶を飲む", "オチャヲノム")
    assert _pairs(segments) == [
        ("お", ""),
        ("茶", "チャ"),
        ("を", ""),
        ("飲", "ノ"),
        ("む", ""),
    ]


def test_trailing_kanji_run_takes_remaining_reading() -> None:
    assert _pairs(build_ruby_segments("東京", "トウキョウ")) == [("東京", "トウキョウ")]
    assert _pairs(build_ruby_segments("お父さん", "オトウサン")) == [
        ("お", ""),
        ("父", "トウ"),
        ("さ", ""),
        ("ん", ""),
    ]


def test_katakana_in_surface_is_not_an_anchor() -> None:
    segments = build_ruby_segments("ノート型", "ノートガタ")
    assert _pairs(segments) == [("ノート型", "ノートガタ")]


def test_unmatched_kana_joins_the_pending_run() -> None:
    # は never appears as ハ in the reading, so it stays with the kanji run.
    segments = build_ruby_segments("今日は", "キョウワ")
    assert _pairs(segments) == [("今日は", "キョウワ")]


def test_exhausted_reading_does_not_drop_text() -> None:
    segments = build_ruby_segments("見た目", "ミタ")
    assert _pairs(segments) == [("見", "ミ"), ("た", ""), ("目", "")]
    assert "".join(segment.text for segment in segments) == "見た目"


def test_short_reading_degrades_without_error() -> None:
    segments = build_ruby_segments("食べ物", "タ")
    assert "".join(segment.text for segment in segments) == "食べ物"
    assert _pairs(segments) == [("食べ物", "タ")]


def test_empty_reading() -> None:
    segments = build_ruby_segments("食べた", "")
    assert _pairs(segments) == [("食べた", "")]


@pytest.mark.parametrize(
    ("surface", "reading"),
    [
        ("食べた", "タベタ"),
        ("行こう", "イコウ"),
        ("お茶を飲む", "オチャヲノム"),
        ("取り扱い", "トリアツカイ"),
        ("見た目", "ミタ"),
        ("今日は", "キョウワ"),
        ("あいうえお", "カキクケコ"),
        ("漢字かな交じり", "カンジカナマジリ"),
    ],
)
def test_segments_cover_surface(surface: str, reading: str) -> None:
    segments = build_ruby_segments(surface, reading)
    assert "".join(segment.text for segment in segments) == surface
    assert all(segment.text for segment in segments)


def test_ruby_for_token_suppresses_kana_only_words() -> None:
    features = UnidicFeatures(pos1="助詞", lemma_reading="ガ", pronunciation="ガ")
    assert _pairs(ruby_for_token("が", features)) == [("が", "")]
    noisy = IpadicFeatures(pos="名詞", reading="ゼンゼンチガウ")
    assert _pairs(ruby_for_token("ノート", noisy)) == [("ノート", "")]


def test_ruby_for_token_reconstructs_inflected_unidic() -> None:
    features = UnidicFeatures(
        pos1="動詞",
        conjugation_type="五段-カ行",
        conjugation_form="意志推量形",
        lemma_reading="イク",
        pronunciation="イコー",
    )
    assert _pairs(ruby_for_token("行こう", features)) == [("行", "イ"), ("こ", ""), ("う", "")]


def test_ruby_for_token_uses_lemma_reading_for_nouns() -> None:
    features = UnidicFeatures(pos1="名詞", lemma_reading="トウキョウ", pronunciation="トーキョー")
    assert _pairs(ruby_for_token("東京", features)) == [("東京", "トウキョウ")]


def test_ruby_for_token_without_reading() -> None:
    assert _pairs(ruby_for_token("𠮷", UnidicFeatures(pos1="名詞"))) == [("𠮷", "")]
