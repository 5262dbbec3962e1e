"""Tests for multi-line decoding and error policies."""

import pytest

from usi_batch import DecodedLine, LineAborted, decode_lines, result_json
from usi_commands import ReadyOk, UsiOk
from usi_parser import IllegalSyntax

LINES = ["usiok\n", "bestmove\n", "readyok\r\n", "\n"]


def test_report_policy_keeps_every_line() -> None:
    results = list(decode_lines(LINES, "report"))
    assert [r.line for r in results] == [1, 2, 3, 4]
    assert results[0].command == UsiOk()
    assert results[1].command is None and "bestmove" in results[1].error
    assert results[2].command == ReadyOk()
    assert results[3].error is not None


def test_skip_policy_drops_bad_lines() -> None:
    results = list(decode_lines(LINES, "skip"))
    assert [(r.line, r.command) for r in results] == [(1, UsiOk()), (3, ReadyOk())]


def test_abort_policy_raises_with_line_number() -> None:
    gen = decode_lines(LINES, "abort")
    assert next(gen).command == UsiOk()
    with pytest.raises(LineAborted) as exc:
        next(gen)
    assert exc.value.lineno == 2
    assert isinstance(exc.value, IllegalSyntax)
    assert str(exc.value).startswith("line 2:")


def test_unknown_policy_rejected() -> None:
    with pytest.raises(ValueError):
        list(decode_lines(["usiok"], "ignore"))


def test_result_json() -> None:
    assert result_json(DecodedLine(line=1, command=ReadyOk())) == {"line": 1, "command": {"type": "readyok"}}
    assert result_json(DecodedLine(line=2, error="bad")) == {"line": 2, "error": "bad"}
