from __future__ import annotations

from dataclasses import dataclass

from .features import TokenFeatures
from .logging_utils import debug_log
from .reading import NO_READING, reconstruct_orthography, select_reading
from .script import contains_kanji, to_katakana

__all__ = [
    "RubySegment",
    "build_ruby_segments",
    "ruby_for_token",
]


@dataclass(frozen=True)
class RubySegment:
    """A run of surface text and the reading rendered above it (empty for none)."""

    text: str
    ruby: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"text": self.text, "ruby": self.ruby}


def build_ruby_segments(surface: str, reading: str) -> list[RubySegment]:
    """
    Split ``surface`` into segments carrying the part of ``reading`` they own.

    Hiragana in the surface act as anchors: the first occurrence of their
    katakana form in the unread reading closes the pending kanji run, which
    receives the reading consumed up to that point. The anchor itself is
    emitted without ruby. Whatever reading is left over goes to a trailing
    run.
    """
    if reading == NO_READING or surface == reading:
        return [RubySegment(surface)]

    segments: list[RubySegment] = []
    pending: list[str] = []
    cursor = 0

    for s_char in surface:
        s_kata = to_katakana(s_char)
        if s_kata != s_char and cursor < len(reading):
            offset = reading.find(s_kata, cursor)
            if offset != -1:
                if pending:
                    segments.append(RubySegment("".join(pending), reading[cursor:offset]))
                    pending.clear()
                segments.append(RubySegment(s_char))
                cursor = offset + 1
                continue
        pending.append(s_char)

    if pending:
        segments.append(RubySegment("".join(pending), reading[cursor:]))
    return segments


def ruby_for_token(surface: str, features: TokenFeatures) -> list[RubySegment]:
    """Run the reading pipeline for one token and segment the result."""
    if not contains_kanji(surface):
        return [RubySegment(surface)]

    choice = select_reading(features)
    reading = choice.reading
    if choice.present and choice.reconstruct:
        repaired = reconstruct_orthography(surface, reading)
        if repaired != reading:
            debug_log(f"reconstructed {surface}: {reading} -> {repaired}")
        reading = repaired
    return build_ruby_segments(surface, reading)
