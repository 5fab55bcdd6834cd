from __future__ import annotations

import sys

__all__ = ["debug_enabled", "debug_log", "set_debug_logging"]

_DEBUG_LOG = False


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def debug_enabled() -> bool:
    return _DEBUG_LOG


def debug_log(message: str) -> None:
    # stdout carries analysis output, keep diagnostics on stderr.
    if _DEBUG_LOG:
        print(f"[furi debug] {message}", file=sys.stderr)
