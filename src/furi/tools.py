from __future__ import annotations

import importlib
import os
import shutil
import subprocess
import warnings
from pathlib import Path

UNIDIC_DIR_ENV = "FURI_UNIDIC_DIR"
MECAB_DICT_INDEX_ENV = "FURI_MECAB_DICT_INDEX"
# Sources mecab-dict-index reads when compiling a user dictionary.
USER_DICT_SOURCES = ("char.def", "unk.def", "matrix.def", "dicrc")


def _package_dicdir(module_name: str) -> Path | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    dicdir = getattr(module, "DICDIR", "")
    if not dicdir:
        return None
    candidate = Path(dicdir)
    if (candidate / "dicrc").exists():
        return candidate
    return None


def get_unidic_dicdir() -> Path | None:
    """
    Locate a UniDic dictionary directory.

    Lookup order: ``FURI_UNIDIC_DIR``, then the ``unidic`` and ``unidic_lite``
    packages.
    """
    env_dir = os.environ.get(UNIDIC_DIR_ENV)
    if env_dir:
        candidate = Path(env_dir).expanduser()
        if (candidate / "dicrc").exists():
            return candidate
        warnings.warn(
            f"{UNIDIC_DIR_ENV}={env_dir} does not contain a dicrc; ignoring it.",
            RuntimeWarning,
            stacklevel=2,
        )
    for module_name in ("unidic", "unidic_lite"):
        dicdir = _package_dicdir(module_name)
        if dicdir is not None:
            return dicdir
    return None


def missing_user_dict_sources(dicdir: Path) -> list[str]:
    """Return the compilation sources absent from ``dicdir``."""
    return [name for name in USER_DICT_SOURCES if not (dicdir / name).is_file()]


def find_mecab_dict_index() -> Path | None:
    """Locate the ``mecab-dict-index`` binary used to compile user dictionaries."""
    env_path = os.environ.get(MECAB_DICT_INDEX_ENV)
    if env_path:
        candidate = Path(env_path).expanduser()
        return candidate if candidate.is_file() else None
    found = shutil.which("mecab-dict-index")
    if found:
        return Path(found)
    mecab_config = shutil.which("mecab-config")
    if not mecab_config:
        return None
    try:
        result = subprocess.run(
            [mecab_config, "--libexecdir"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    candidate = Path(result.stdout.strip()) / "mecab-dict-index"
    return candidate if candidate.is_file() else None
