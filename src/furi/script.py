from __future__ import annotations

__all__ = [
    "LONG_VOWEL_MARK",
    "contains_kanji",
    "hiragana_to_katakana",
    "is_hiragana",
    "is_kanji",
    "katakana_to_hiragana",
    "to_katakana",
]

LONG_VOWEL_MARK = "ー"

_KANA_OFFSET = 0x60


def is_hiragana(ch: str) -> bool:
    return "\u3040" <= ch <= "\u309f"


def to_katakana(ch: str) -> str:
    """Shift a hiragana letter into the katakana block.

    Only U+3041..U+3096 is mapped; iteration marks and punctuation in the
    hiragana block come back unchanged.
    """
    code = ord(ch)
    if 0x3041 <= code <= 0x3096:
        return chr(code + _KANA_OFFSET)
    return ch


def is_kanji(ch: str) -> bool:
    if not ch:
        return False
    code = ord(ch)
    return (
        0x4E00 <= code <= 0x9FFF
        or 0x3400 <= code <= 0x4DBF
        or 0x20000 <= code <= 0x2A6DF
    )


def contains_kanji(text: str) -> bool:
    return any(is_kanji(ch) for ch in text)


def hiragana_to_katakana(text: str) -> str:
    return "".join(to_katakana(ch) for ch in text)


def katakana_to_hiragana(text: str) -> str:
    result = []
    for ch in text:
        code = ord(ch)
        if 0x30A1 <= code <= 0x30F6:
            result.append(chr(code - _KANA_OFFSET))
        else:
            result.append(ch)
    return "".join(result)
