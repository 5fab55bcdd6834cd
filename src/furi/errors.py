from __future__ import annotations

__all__ = [
    "AnalysisError",
    "InvalidRequestError",
    "ResponseEncodingError",
    "TokenizationError",
    "UserDictionaryError",
]


class AnalysisError(RuntimeError):
    """Base class for failures that abort a whole analysis request."""

    prefix = ""

    def __init__(self, detail: object) -> None:
        self.detail = str(detail)
        message = f"{self.prefix}: {self.detail}" if self.prefix else self.detail
        super().__init__(message)


class InvalidRequestError(AnalysisError):
    """Raised when the request payload is not a JSON object with a ``text`` string."""

    prefix = "Invalid JSON"


class TokenizationError(AnalysisError):
    """Raised when the tokenizer backend fails on the input text."""

    prefix = "Tokenization failed"


class UserDictionaryError(AnalysisError):
    """Raised when the supplied user dictionary CSV cannot be built."""

    prefix = "Failed to build user dictionary"


class ResponseEncodingError(AnalysisError):
    """Raised when annotations cannot be serialized to JSON."""

    prefix = "Serialization failed"
