from .analyzer import analyze, analyze_text, decode_response, run_analysis
from .errors import (
    AnalysisError,
    InvalidRequestError,
    ResponseEncodingError,
    TokenizationError,
    UserDictionaryError,
)
from .features import DictionaryKind, IpadicFeatures, UnidicFeatures
from .nlp import (
    BackendConfig,
    FugashiBackend,
    JanomeBackend,
    NLPBackendUnavailableError,
    create_backend,
)
from .reading import reconstruct_orthography, select_reading
from .render import render_brackets, render_html
from .ruby import RubySegment, build_ruby_segments, ruby_for_token
from .tokens import TokenAnnotation

__all__ = [
    "analyze",
    "analyze_text",
    "decode_response",
    "run_analysis",
    "AnalysisError",
    "InvalidRequestError",
    "ResponseEncodingError",
    "TokenizationError",
    "UserDictionaryError",
    "DictionaryKind",
    "IpadicFeatures",
    "UnidicFeatures",
    "BackendConfig",
    "FugashiBackend",
    "JanomeBackend",
    "NLPBackendUnavailableError",
    "create_backend",
    "reconstruct_orthography",
    "select_reading",
    "render_brackets",
    "render_html",
    "RubySegment",
    "build_ruby_segments",
    "ruby_for_token",
    "TokenAnnotation",
]
