from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .features import (
    NOT_APPLICABLE,
    DictionaryKind,
    IpadicFeatures,
    TokenFeatures,
    features_from_fields,
    whitespace_features,
)
from .ruby import RubySegment

__all__ = [
    "TokenAnnotation",
    "gap_annotation",
    "serialize_annotations",
    "deserialize_annotations",
]


@dataclass(frozen=True)
class TokenAnnotation:
    """
    One emitted unit of an analyzed document.

    Tokenizer tokens carry their dictionary features through untouched;
    gap annotations stand in for text the tokenizer skipped (usually
    whitespace) so that the surfaces of a document's annotations always
    concatenate back to the input.
    """

    surface: str
    features: TokenFeatures
    ruby_segments: tuple[RubySegment, ...]

    @property
    def is_gap(self) -> bool:
        return self.features.is_whitespace

    def to_dict(self) -> dict[str, object]:
        segments = [segment.to_dict() for segment in self.ruby_segments]
        features = self.features
        if isinstance(features, IpadicFeatures):
            return {
                "surface": self.surface,
                "pos": features.pos,
                "sub_pos": features.pos_detail1,
                "reading": features.reading,
                "base": features.base_form,
                "ruby_segments": segments,
            }
        return {
            "surface": self.surface,
            "details": features.to_fields(),
            "ruby_segments": segments,
        }


def gap_annotation(text: str, kind: DictionaryKind) -> TokenAnnotation:
    return TokenAnnotation(
        surface=text,
        features=whitespace_features(kind),
        ruby_segments=(RubySegment(text),),
    )


def serialize_annotations(annotations: Iterable[TokenAnnotation]) -> list[dict[str, object]]:
    return [annotation.to_dict() for annotation in annotations]


def _deserialize_segments(raw: object) -> tuple[RubySegment, ...]:
    segments: list[RubySegment] = []
    if not isinstance(raw, list):
        return ()
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        text = entry.get("text")
        if not isinstance(text, str) or not text:
            continue
        ruby = entry.get("ruby")
        if not isinstance(ruby, str):
            ruby = ""
        segments.append(RubySegment(text, ruby))
    return tuple(segments)


def _string_field(entry: Mapping[str, object], key: str) -> str:
    value = entry.get(key)
    if isinstance(value, str) and value:
        return value
    return NOT_APPLICABLE


def deserialize_annotations(
    data: Iterable[Mapping[str, object]],
    kind: DictionaryKind,
) -> list[TokenAnnotation]:
    kind = DictionaryKind(kind)
    annotations: list[TokenAnnotation] = []
    for entry in data:
        if not isinstance(entry, Mapping):
            continue
        surface = entry.get("surface")
        if not isinstance(surface, str):
            continue
        features: TokenFeatures
        if kind is DictionaryKind.IPADIC:
            features = IpadicFeatures(
                pos=_string_field(entry, "pos"),
                pos_detail1=_string_field(entry, "sub_pos"),
                reading=_string_field(entry, "reading"),
                base_form=_string_field(entry, "base"),
            )
        else:
            details = entry.get("details")
            if not isinstance(details, list):
                details = []
            features = features_from_fields(
                kind, [item if isinstance(item, str) else NOT_APPLICABLE for item in details]
            )
        segments = _deserialize_segments(entry.get("ruby_segments"))
        if not segments:
            segments = (RubySegment(surface),) if surface else ()
        annotations.append(TokenAnnotation(surface=surface, features=features, ruby_segments=segments))
    return annotations
