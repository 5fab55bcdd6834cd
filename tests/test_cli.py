from __future__ import annotations

import argparse
import io
import json
from types import SimpleNamespace

import pytest

import furi.cli as cli
from furi.errors import UserDictionaryError
from furi.features import DictionaryKind
from furi.nlp import BackendConfig, RawToken, locate_tokens


class _StubBackend:
    kind = DictionaryKind.UNIDIC

    def __init__(self) -> None:
        self.user_dicts: list[str | None] = []

    def tokenize(self, text: str, *, user_dict_csv: str | None = None) -> list[RawToken]:
        self.user_dicts.append(user_dict_csv)
        lexicon = {
            "食べ": ("動詞", "一般", "*", "*", "下一段-バ行", "連用形-一般", "タベル", "食べる", "食べ", "タベ"),
            "た": ("助動詞", "*", "*", "*", "助動詞-タ", "終止形-一般", "タ", "た", "た", "タ"),
        }
        pieces = []
        idx = 0
        while idx < len(text):
            for surface, fields in lexicon.items():
                if text.startswith(surface, idx):
                    pieces.append((surface, fields))
                    idx += len(surface)
                    break
            else:
                idx += 1
        return locate_tokens(text, pieces)


class _FailingUserDictBackend(_StubBackend):
    def tokenize(self, text: str, *, user_dict_csv: str | None = None) -> list[RawToken]:
        raise UserDictionaryError("bad row")


@pytest.fixture
def stub_backend(monkeypatch) -> _StubBackend:
    backend = _StubBackend()
    seen: dict[str, BackendConfig] = {}

    def _fake_create(config: BackendConfig) -> _StubBackend:
        seen["config"] = config
        return backend

    monkeypatch.delenv("FURI_DICTIONARY", raising=False)
    monkeypatch.setattr(cli, "create_backend", _fake_create)
    backend.seen = seen  # type: ignore[attr-defined]
    return backend


def test_annotate_prints_bracket_notation(stub_backend, capsys) -> None:
    assert cli.main(["食べた"]) == 0
    assert capsys.readouterr().out.strip() == "食[タ]べた"


def test_annotate_hiragana_html(stub_backend, capsys) -> None:
    assert cli.main(["--format", "html", "--hiragana", "食べた"]) == 0
    assert capsys.readouterr().out.strip() == "<ruby>食<rt>た</rt></ruby>べた"


def test_annotate_json_output(stub_backend, capsys) -> None:
    assert cli.main(["-f", "json", "食べ", "た"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert "".join(entry["surface"] for entry in payload) == "食べ た"
    assert payload[1]["details"][0] == "Whitespace"


def test_annotate_table_output(stub_backend, capsys) -> None:
    assert cli.main(["-f", "table", "食べた"]) == 0
    out = capsys.readouterr().out
    assert "食(タ) べ" in out


def test_dictionary_flag_overrides_env(stub_backend, monkeypatch) -> None:
    monkeypatch.setenv("FURI_DICTIONARY", "unidic")
    assert cli.main(["--dictionary", "ipadic", "食べた"]) == 0
    assert stub_backend.seen["config"].dictionary is DictionaryKind.IPADIC


def test_invalid_dictionary_env_exits(stub_backend, monkeypatch) -> None:
    monkeypatch.setenv("FURI_DICTIONARY", "jumandic")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["食べた"])
    assert "FURI_DICTIONARY" in str(excinfo.value)


def test_user_dict_file_is_read(stub_backend, tmp_path) -> None:
    csv_path = tmp_path / "user.csv"
    csv_path.write_text("食べ,1,1,100,動詞\n", encoding="utf-8")
    assert cli.main(["--user-dict", str(csv_path), "食べた"]) == 0
    assert stub_backend.user_dicts == ["食べ,1,1,100,動詞\n"]


def test_analysis_errors_exit_with_message(monkeypatch) -> None:
    monkeypatch.setattr(cli, "create_backend", lambda config: _FailingUserDictBackend())
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["食べた"])
    assert str(excinfo.value) == "Error: Failed to build user dictionary: bad row"


def test_request_round_trips_bytes(stub_backend, monkeypatch, capsysbinary) -> None:
    request = json.dumps({"text": "食べた"}, ensure_ascii=False).encode("utf-8")
    monkeypatch.setattr(cli.sys, "stdin", SimpleNamespace(buffer=io.BytesIO(request)))
    assert cli.main(["request"]) == 0
    payload = json.loads(capsysbinary.readouterr().out)
    assert payload[0]["ruby_segments"] == [{"text": "食", "ruby": "タ"}, {"text": "べ", "ruby": ""}]


def test_request_reports_errors_on_stdout(stub_backend, tmp_path, capsysbinary) -> None:
    request_path = tmp_path / "request.json"
    request_path.write_bytes(b"{broken")
    assert cli.main(["request", "--input", str(request_path)]) == 0
    assert capsysbinary.readouterr().out.startswith(b"Error: Invalid JSON: ")


def test_unidic_status_reports_user_dict_support(monkeypatch, capsys, tmp_path) -> None:
    dicdir = tmp_path / "unidic"
    dicdir.mkdir()
    for name in ("dicrc", "char.def", "unk.def"):
        (dicdir / name).write_text("", encoding="utf-8")
    monkeypatch.setenv("FURI_UNIDIC_DIR", str(dicdir))
    monkeypatch.setattr(cli, "find_mecab_dict_index", lambda: None)

    assert cli._run_tools(argparse.Namespace(tool_cmd="unidic-status")) == 0
    out = capsys.readouterr().out
    assert f"UniDic path: {dicdir}" in out
    assert "mecab-dict-index: not found" in out
    assert "User dictionaries unavailable; missing matrix.def" in out


def test_unidic_status_without_dictionary(monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "get_unidic_dicdir", lambda: None)
    assert cli._run_tools(argparse.Namespace(tool_cmd="unidic-status")) == 1
    assert "No UniDic dictionary detected" in capsys.readouterr().out


def test_tools_requires_subcommand() -> None:
    with pytest.raises(SystemExit):
        cli._run_tools(argparse.Namespace(tool_cmd=None))


def test_debug_flag_logs_to_stderr(stub_backend, monkeypatch, capsys) -> None:
    import furi.logging_utils as logging_utils

    monkeypatch.setattr(logging_utils, "_DEBUG_LOG", False)
    assert cli.main(["--debug", "食べた"]) == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == "食[タ]べた"
    assert "[furi debug] 2 tokens from 3 characters (unidic)" in captured.err
