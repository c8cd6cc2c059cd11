"""
Tests for scripts/ask.py with the agent replaced by one on in-memory collaborators.
"""

import importlib.util
from pathlib import Path
from unittest.mock import patch

import pytest

from linerag.core.errors import ServiceError

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "ask.py"
_spec = importlib.util.spec_from_file_location("ask", _SCRIPT)
ask = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(ask)


@pytest.fixture
def patched(agent):
    with patch.object(ask.RagAgent, "from_settings", return_value=agent):
        yield agent


def test_ingest_and_answer(patched, index, tmp_path: Path, capsys) -> None:
    data = tmp_path / "sales.csv"
    data.write_text("region,units\nnorth,42\n", encoding="utf-8")
    code = ask.main(["--ingest", str(data), "north,42"])
    out = capsys.readouterr().out
    assert code == 0
    assert f"Embedded {data}: 2 points" in out
    assert "north,42" in out
    assert len(index.points) == 2


def test_question_on_empty_index_exits_3(patched, capsys) -> None:
    assert ask.main(["anything?"]) == 3
    assert "error:" in capsys.readouterr().err


def test_missing_file_exits_2(patched, tmp_path: Path) -> None:
    assert ask.main(["--ingest", str(tmp_path / "nope.csv")]) == 2


def test_empty_file_exits_2(patched, tmp_path: Path) -> None:
    empty = tmp_path / "empty.csv"
    empty.write_bytes(b"")
    assert ask.main(["--ingest", str(empty)]) == 2


def test_missing_configuration_exits_4() -> None:
    with patch.object(ask.RagAgent, "from_settings", side_effect=ask.ConfigurationError("no key")):
        assert ask.main(["q"]) == 4


def test_nothing_to_do_is_usage_error() -> None:
    with pytest.raises(SystemExit):
        ask.main([])


def test_index_connection_failure_exits_1(capsys) -> None:
    with patch.object(ask.RagAgent, "from_settings", side_effect=ServiceError("Milvus connection failed")):
        assert ask.main(["q"]) == 1
    assert "Milvus connection failed" in capsys.readouterr().err
