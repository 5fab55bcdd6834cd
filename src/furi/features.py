from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import ClassVar, Sequence, Union

__all__ = [
    "NOT_APPLICABLE",
    "WHITESPACE_MARKER",
    "DictionaryKind",
    "IpadicFeatures",
    "UnidicFeatures",
    "TokenFeatures",
    "features_from_fields",
    "whitespace_features",
]

NOT_APPLICABLE = "*"
WHITESPACE_MARKER = "Whitespace"


class DictionaryKind(str, Enum):
    IPADIC = "ipadic"
    UNIDIC = "unidic"


def _field_at(values: Sequence[str], index: int) -> str:
    if index >= len(values):
        return NOT_APPLICABLE
    value = values[index]
    if value is None:
        return NOT_APPLICABLE
    value = str(value)
    return value if value else NOT_APPLICABLE


@dataclass(frozen=True)
class IpadicFeatures:
    """
    Part-of-speech fields of an IPADIC entry (9 columns).

    Column order follows the MeCab IPADIC CSV layout after the surface and
    connection ids: four POS levels, conjugation type and form, base form,
    reading and pronunciation.
    """

    kind: ClassVar[DictionaryKind] = DictionaryKind.IPADIC
    FIELD_COUNT: ClassVar[int] = 9

    pos: str = NOT_APPLICABLE
    pos_detail1: str = NOT_APPLICABLE
    pos_detail2: str = NOT_APPLICABLE
    pos_detail3: str = NOT_APPLICABLE
    conjugation_type: str = NOT_APPLICABLE
    conjugation_form: str = NOT_APPLICABLE
    base_form: str = NOT_APPLICABLE
    reading: str = NOT_APPLICABLE
    pronunciation: str = NOT_APPLICABLE

    @classmethod
    def from_fields(cls, values: Sequence[str]) -> "IpadicFeatures":
        names = [f.name for f in fields(cls)]
        return cls(**{name: _field_at(values, idx) for idx, name in enumerate(names)})

    def to_fields(self) -> list[str]:
        return [getattr(self, f.name) for f in fields(self)]

    @property
    def is_whitespace(self) -> bool:
        return self.pos == WHITESPACE_MARKER


@dataclass(frozen=True)
class UnidicFeatures:
    """
    Part-of-speech fields of a UniDic entry.

    The first 17 columns are shared by every UniDic release (2.1.2 through
    3.1). Builds that emit more columns (unidic-lite, UniDic 3.1 full) keep
    the remainder in ``extra`` so the feature list survives unchanged.
    """

    kind: ClassVar[DictionaryKind] = DictionaryKind.UNIDIC
    FIELD_COUNT: ClassVar[int] = 17

    pos1: str = NOT_APPLICABLE
    pos2: str = NOT_APPLICABLE
    pos3: str = NOT_APPLICABLE
    pos4: str = NOT_APPLICABLE
    conjugation_type: str = NOT_APPLICABLE
    conjugation_form: str = NOT_APPLICABLE
    lemma_reading: str = NOT_APPLICABLE
    lemma: str = NOT_APPLICABLE
    orthography: str = NOT_APPLICABLE
    pronunciation: str = NOT_APPLICABLE
    orthography_base: str = NOT_APPLICABLE
    pronunciation_base: str = NOT_APPLICABLE
    word_origin: str = NOT_APPLICABLE
    initial_change_type: str = NOT_APPLICABLE
    initial_change_form: str = NOT_APPLICABLE
    final_change_type: str = NOT_APPLICABLE
    final_change_form: str = NOT_APPLICABLE
    extra: tuple[str, ...] = ()

    @classmethod
    def from_fields(cls, values: Sequence[str]) -> "UnidicFeatures":
        names = [f.name for f in fields(cls) if f.name != "extra"]
        named = {name: _field_at(values, idx) for idx, name in enumerate(names)}
        extra = tuple(_field_at(values, idx) for idx in range(len(names), len(values)))
        return cls(**named, extra=extra)

    def to_fields(self) -> list[str]:
        values = [getattr(self, f.name) for f in fields(self) if f.name != "extra"]
        values.extend(self.extra)
        return values

    @property
    def is_conjugated(self) -> bool:
        return self.conjugation_type != NOT_APPLICABLE

    @property
    def is_whitespace(self) -> bool:
        return self.pos1 == WHITESPACE_MARKER


TokenFeatures = Union[IpadicFeatures, UnidicFeatures]

_SCHEMAS: dict[DictionaryKind, type] = {
    DictionaryKind.IPADIC: IpadicFeatures,
    DictionaryKind.UNIDIC: UnidicFeatures,
}


def features_from_fields(kind: DictionaryKind, values: Sequence[str]) -> TokenFeatures:
    return _SCHEMAS[DictionaryKind(kind)].from_fields(values)


def whitespace_features(kind: DictionaryKind) -> TokenFeatures:
    """Features for a synthesized gap token: all ``*`` except the POS marker."""
    schema = _SCHEMAS[DictionaryKind(kind)]
    values = [NOT_APPLICABLE] * schema.FIELD_COUNT
    values[0] = WHITESPACE_MARKER
    return schema.from_fields(values)
