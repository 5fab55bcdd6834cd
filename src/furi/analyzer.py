from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable

from .errors import AnalysisError, InvalidRequestError, ResponseEncodingError
from .features import DictionaryKind, features_from_fields
from .logging_utils import debug_log
from .nlp import RawToken, TokenizerBackend
from .ruby import ruby_for_token
from .tokens import TokenAnnotation, deserialize_annotations, gap_annotation, serialize_annotations

__all__ = [
    "ERROR_PREFIX",
    "AnalysisRequest",
    "analyze",
    "analyze_text",
    "annotate_tokens",
    "decode_response",
    "encode_annotations",
    "parse_request",
    "run_analysis",
]

ERROR_PREFIX = "Error: "


@dataclass(frozen=True)
class AnalysisRequest:
    text: str
    user_dict_csv: str | None = None


def parse_request(payload: bytes) -> AnalysisRequest:
    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidRequestError(exc) from exc
    if not isinstance(data, dict):
        raise InvalidRequestError("expected a JSON object")
    text = data.get("text")
    if not isinstance(text, str):
        raise InvalidRequestError("missing field `text`")
    user_dict_csv = data.get("user_dict_csv")
    if user_dict_csv is not None and not isinstance(user_dict_csv, str):
        raise InvalidRequestError("`user_dict_csv` must be a string")
    for value in (text, user_dict_csv or ""):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidRequestError(exc) from exc
    return AnalysisRequest(text=text, user_dict_csv=user_dict_csv)


def annotate_tokens(
    text: str,
    tokens: Iterable[RawToken],
    kind: DictionaryKind,
) -> list[TokenAnnotation]:
    """
    Build annotations for ``tokens`` and fill the spans between them.

    Any part of ``text`` not covered by a token becomes a gap annotation, so
    the emitted surfaces always concatenate back to ``text``.
    """
    annotations: list[TokenAnnotation] = []
    cursor = 0
    for token in tokens:
        if token.start > cursor:
            annotations.append(gap_annotation(text[cursor:token.start], kind))
        features = features_from_fields(kind, token.fields)
        segments = ruby_for_token(token.surface, features)
        annotations.append(
            TokenAnnotation(
                surface=token.surface,
                features=features,
                ruby_segments=tuple(segments),
            )
        )
        cursor = max(cursor, token.end)
    if cursor < len(text):
        annotations.append(gap_annotation(text[cursor:], kind))
    return annotations


def analyze_text(
    text: str,
    backend: TokenizerBackend,
    user_dict_csv: str | None = None,
) -> list[TokenAnnotation]:
    tokens = backend.tokenize(text, user_dict_csv=user_dict_csv)
    debug_log(f"{len(tokens)} tokens from {len(text)} characters ({backend.kind.value})")
    return annotate_tokens(text, tokens, backend.kind)


def run_analysis(payload: bytes, backend: TokenizerBackend) -> list[TokenAnnotation]:
    """Structured counterpart of :func:`analyze`; failures raise ``AnalysisError``."""
    request = parse_request(payload)
    return analyze_text(request.text, backend, request.user_dict_csv)


def encode_annotations(annotations: Iterable[TokenAnnotation]) -> bytes:
    try:
        return json.dumps(serialize_annotations(annotations), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise ResponseEncodingError(exc) from exc


def analyze(payload: bytes, backend: TokenizerBackend) -> bytes:
    """
    Analyze a JSON request and return the JSON response bytes.

    The request is ``{"text": ..., "user_dict_csv": ...}``. On failure the
    response is the plain text ``Error: <cause>`` instead of JSON.
    """
    try:
        return encode_annotations(run_analysis(payload, backend))
    except AnalysisError as exc:
        debug_log(f"request failed: {exc}")
        return f"{ERROR_PREFIX}{exc}".encode("utf-8")


def decode_response(payload: bytes, kind: DictionaryKind) -> list[TokenAnnotation]:
    """Parse an :func:`analyze` response, raising ``AnalysisError`` for error strings."""
    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError):
        data = None
    if isinstance(data, list):
        return deserialize_annotations(data, kind)
    message = payload.decode("utf-8", errors="replace")
    if message.startswith(ERROR_PREFIX):
        message = message[len(ERROR_PREFIX):]
    raise AnalysisError(message)
