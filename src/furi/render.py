from __future__ import annotations

from html import escape
from typing import Iterable

from .ruby import RubySegment
from .script import katakana_to_hiragana
from .tokens import TokenAnnotation

__all__ = ["iter_segments", "render_brackets", "render_html"]


def iter_segments(annotations: Iterable[TokenAnnotation]) -> Iterable[RubySegment]:
    for annotation in annotations:
        yield from annotation.ruby_segments


def _ruby_text(segment: RubySegment, hiragana: bool) -> str:
    return katakana_to_hiragana(segment.ruby) if hiragana else segment.ruby


def render_html(annotations: Iterable[TokenAnnotation], *, hiragana: bool = False) -> str:
    """Render annotations as HTML with ``<ruby>`` markup over annotated runs."""
    pieces: list[str] = []
    for segment in iter_segments(annotations):
        if not segment.ruby:
            pieces.append(escape(segment.text))
            continue
        ruby = escape(_ruby_text(segment, hiragana))
        pieces.append(f"<ruby>{escape(segment.text)}<rt>{ruby}</rt></ruby>")
    return "".join(pieces)


def render_brackets(annotations: Iterable[TokenAnnotation], *, hiragana: bool = False) -> str:
    """Render annotations in ``食[た]べた`` notation."""
    pieces: list[str] = []
    for segment in iter_segments(annotations):
        pieces.append(segment.text)
        if segment.ruby:
            pieces.append(f"[{_ruby_text(segment, hiragana)}]")
    return "".join(pieces)
