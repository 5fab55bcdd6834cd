from __future__ import annotations

from dataclasses import dataclass

from .features import NOT_APPLICABLE, IpadicFeatures, TokenFeatures, UnidicFeatures
from .script import LONG_VOWEL_MARK, is_hiragana, is_kanji, to_katakana

__all__ = [
    "NO_READING",
    "ReadingChoice",
    "reconstruct_orthography",
    "select_reading",
]

NO_READING = NOT_APPLICABLE


@dataclass(frozen=True)
class ReadingChoice:
    """Reading picked from a token's features and whether its tail needs repair."""

    reading: str = NO_READING
    reconstruct: bool = False

    @property
    def present(self) -> bool:
        return self.reading != NO_READING


def select_reading(features: TokenFeatures) -> ReadingChoice:
    """
    Choose the reading field to align against the surface.

    IPADIC entries carry a single reading column which is used as is. For
    UniDic, inflected words (``conjugation_type`` set) prefer the
    pronunciation column because it spells the conjugated form, and get
    flagged for orthography reconstruction. Uninflected words keep the
    lemma reading. A missing preferred column falls back to the lemma
    reading.
    """
    if isinstance(features, IpadicFeatures):
        return ReadingChoice(reading=features.reading)
    if not isinstance(features, UnidicFeatures):
        raise TypeError(f"Unsupported feature schema: {type(features).__name__}")

    conjugated = features.is_conjugated
    preferred = features.pronunciation if conjugated else features.lemma_reading
    if preferred == NOT_APPLICABLE:
        preferred = features.lemma_reading
    return ReadingChoice(reading=preferred, reconstruct=conjugated)


def reconstruct_orthography(surface: str, phonetic: str) -> str:
    """
    Rewrite the kana tail of ``phonetic`` so it matches the surface spelling.

    Both strings are walked from the end. Trailing surface kana replace the
    phonetic characters they line up with, where a long vowel mark lines up
    with any hiragana. The walk stops at the first kanji or mismatch and the
    untouched phonetic head is kept in front.
    """
    s_idx = len(surface) - 1
    p_idx = len(phonetic) - 1
    tail: list[str] = []

    while s_idx >= 0 and p_idx >= 0:
        s_char = surface[s_idx]
        if is_kanji(s_char):
            break
        p_char = phonetic[p_idx]
        s_kata = to_katakana(s_char)
        if s_kata == p_char or (p_char == LONG_VOWEL_MARK and is_hiragana(s_char)):
            tail.append(s_kata)
            s_idx -= 1
            p_idx -= 1
        else:
            break

    tail.reverse()
    return phonetic[: p_idx + 1] + "".join(tail)
