from __future__ import annotations

import os
import shlex
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from .errors import TokenizationError, UserDictionaryError
from .features import DictionaryKind
from .logging_utils import debug_log
from .tools import find_mecab_dict_index, get_unidic_dicdir, missing_user_dict_sources

__all__ = [
    "BackendConfig",
    "FugashiBackend",
    "JanomeBackend",
    "NLPBackendUnavailableError",
    "RawToken",
    "TokenizerBackend",
    "create_backend",
    "locate_tokens",
]

DICTIONARY_ENV = "FURI_DICTIONARY"


class NLPBackendUnavailableError(RuntimeError):
    """Raised when a tokenizer backend or its dictionary cannot be initialized."""


@dataclass(frozen=True)
class RawToken:
    """A tokenizer token with its character span in the analyzed text."""

    surface: str
    start: int
    end: int
    fields: tuple[str, ...]


class TokenizerBackend(Protocol):
    kind: DictionaryKind

    def tokenize(self, text: str, *, user_dict_csv: str | None = None) -> list[RawToken]:
        ...


def locate_tokens(text: str, pieces: Iterable[tuple[str, Sequence[str]]]) -> list[RawToken]:
    """
    Attach character offsets to ``(surface, fields)`` pairs.

    MeCab-style taggers drop whitespace and do not report offsets, so each
    surface is searched for from the end of the previous token.
    """
    tokens: list[RawToken] = []
    pos = 0
    for surface, fields in pieces:
        if not surface:
            continue
        start = text.find(surface, pos)
        if start == -1:
            raise TokenizationError(f"token {surface!r} not found after offset {pos}")
        end = start + len(surface)
        tokens.append(RawToken(surface=surface, start=start, end=end, fields=tuple(fields)))
        pos = end
    return tokens


class FugashiBackend:
    """MeCab (via fugashi) with a UniDic dictionary."""

    kind = DictionaryKind.UNIDIC

    def __init__(self, dicdir: Path | None = None) -> None:
        try:
            from fugashi import GenericTagger  # type: ignore
        except ImportError as exc:
            raise NLPBackendUnavailableError(
                "The UniDic backend requires 'fugashi' (MeCab) to be installed."
            ) from exc

        resolved = dicdir or get_unidic_dicdir()
        if resolved is None:
            raise NLPBackendUnavailableError(
                "No UniDic dictionary found. Install 'unidic-lite' or set FURI_UNIDIC_DIR."
            )
        self.dicdir = Path(resolved)
        self._tagger_cls = GenericTagger
        self._tagger = self._create_tagger()

    def _tagger_args(self, user_dic: Path | None = None) -> str:
        mecabrc = self.dicdir / "mecabrc"
        rcfile = mecabrc if mecabrc.exists() else Path(os.devnull)
        args = [
            f"-r {shlex.quote(str(rcfile))}",
            f"-d {shlex.quote(str(self.dicdir))}",
        ]
        if user_dic is not None:
            args.append(f"-u {shlex.quote(str(user_dic))}")
        return " ".join(args)

    def _create_tagger(self, user_dic: Path | None = None):
        try:
            return self._tagger_cls(self._tagger_args(user_dic))
        except RuntimeError as exc:
            if user_dic is not None:
                raise UserDictionaryError(exc) from exc
            raise NLPBackendUnavailableError(
                f"Failed to initialize UniDic dictionary at '{self.dicdir}': {exc}"
            ) from exc

    def _compile_user_dictionary(self, csv_data: str, workdir: Path) -> Path:
        binary = find_mecab_dict_index()
        if binary is None:
            raise UserDictionaryError(
                "mecab-dict-index not found; set FURI_MECAB_DICT_INDEX to its path."
            )
        missing = missing_user_dict_sources(self.dicdir)
        if missing:
            raise UserDictionaryError(
                f"dictionary at {self.dicdir} lacks compilation sources: {', '.join(missing)}"
            )
        csv_path = workdir / "user.csv"
        csv_path.write_text(csv_data, encoding="utf-8")
        dic_path = workdir / "user.dic"
        cmd = [
            str(binary),
            "-d",
            str(self.dicdir),
            "-u",
            str(dic_path),
            "-f",
            "utf-8",
            "-t",
            "utf-8",
            str(csv_path),
        ]
        debug_log(f"compiling user dictionary: {' '.join(cmd)}")
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip() or str(exc)
            raise UserDictionaryError(detail) from exc
        except OSError as exc:
            raise UserDictionaryError(exc) from exc
        return dic_path

    def tokenize(self, text: str, *, user_dict_csv: str | None = None) -> list[RawToken]:
        if not text:
            return []
        if not user_dict_csv:
            return self._run(self._tagger, text)
        with tempfile.TemporaryDirectory(prefix="furi-udic-") as tmpdir:
            user_dic = self._compile_user_dictionary(user_dict_csv, Path(tmpdir))
            tagger = self._create_tagger(user_dic)
            return self._run(tagger, text)

    @staticmethod
    def _run(tagger, text: str) -> list[RawToken]:
        try:
            pieces = [(node.surface, tuple(node.feature)) for node in tagger(text)]
        except (RuntimeError, UnicodeError) as exc:
            raise TokenizationError(exc) from exc
        return locate_tokens(text, pieces)


def _janome_fields(token) -> tuple[str, ...]:
    pos = str(token.part_of_speech).split(",")
    pos.extend(["*"] * (4 - len(pos)))
    return (
        *pos[:4],
        token.infl_type,
        token.infl_form,
        token.base_form,
        token.reading,
        token.phonetic,
    )


class JanomeBackend:
    """Janome with its bundled IPADIC; user dictionaries are read from MeCab CSV."""

    kind = DictionaryKind.IPADIC

    def __init__(self) -> None:
        try:
            from janome.tokenizer import Tokenizer  # type: ignore
        except ImportError as exc:
            raise NLPBackendUnavailableError(
                "The IPADIC backend requires 'janome' to be installed."
            ) from exc
        self._tokenizer_cls = Tokenizer
        self._tokenizer = Tokenizer()

    def tokenize(self, text: str, *, user_dict_csv: str | None = None) -> list[RawToken]:
        if not text:
            return []
        if not user_dict_csv:
            return self._run(self._tokenizer, text)
        with tempfile.TemporaryDirectory(prefix="furi-udic-") as tmpdir:
            csv_path = Path(tmpdir) / "user.csv"
            csv_path.write_text(user_dict_csv, encoding="utf-8")
            try:
                tokenizer = self._tokenizer_cls(udic=str(csv_path), udic_enc="utf8")
            except Exception as exc:  # janome reports malformed rows with assorted errors
                raise UserDictionaryError(exc) from exc
            return self._run(tokenizer, text)

    @staticmethod
    def _run(tokenizer, text: str) -> list[RawToken]:
        try:
            pieces = [(token.surface, _janome_fields(token)) for token in tokenizer.tokenize(text)]
        except Exception as exc:
            raise TokenizationError(exc) from exc
        return locate_tokens(text, pieces)


@dataclass(slots=True)
class BackendConfig:
    dictionary: DictionaryKind = DictionaryKind.UNIDIC
    dicdir: Path | None = None

    @classmethod
    def from_env(cls) -> "BackendConfig":
        raw = os.environ.get(DICTIONARY_ENV)
        if not raw:
            return cls()
        try:
            dictionary = DictionaryKind(raw.strip().lower())
        except ValueError as exc:
            choices = ", ".join(kind.value for kind in DictionaryKind)
            raise ValueError(f"{DICTIONARY_ENV} must be one of: {choices} (got {raw!r})") from exc
        return cls(dictionary=dictionary)


def create_backend(config: BackendConfig | None = None) -> TokenizerBackend:
    config = config or BackendConfig.from_env()
    if config.dictionary is DictionaryKind.IPADIC:
        return JanomeBackend()
    return FugashiBackend(dicdir=config.dicdir)
