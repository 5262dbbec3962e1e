"""
Purpose: Decode many engine lines under a caller-chosen error policy.
Usage: Shared by usi_service.py (batch + SSE endpoints) and usi_decode.py (CLI).

Policies for a line that raises IllegalSyntax:
  skip   -> drop it
  report -> yield a result carrying `error` instead of `command`
  abort  -> re-raise, annotated with the 1-based line number
"""
from __future__ import annotations

from typing import Iterable, Iterator, Optional

from pydantic import BaseModel

from usi_settings import OnError
from usi_commands import EngineCommand
from usi_parser import IllegalSyntax, parse_engine_line


class DecodedLine(BaseModel):
    line: int                     # 1-based position in the input
    command: Optional[EngineCommand] = None
    error: Optional[str] = None

    model_config = {"frozen": True, "extra": "forbid"}


class LineAborted(IllegalSyntax):
    """Raised under the `abort` policy; `lineno` is 1-based."""

    def __init__(self, cause: IllegalSyntax, lineno: int):
        super().__init__(cause.reason, cause.line)
        self.lineno = lineno

    def __str__(self) -> str:
        return f"line {self.lineno}: {super().__str__()}"


def decode_lines(lines: Iterable[str], on_error: OnError = "report") -> Iterator[DecodedLine]:
    if on_error not in ("skip", "report", "abort"):
        raise ValueError(f"unknown error policy: {on_error!r}")
    for lineno, raw in enumerate(lines, start=1):
        text = raw.rstrip("\r\n")
        try:
            cmd = parse_engine_line(text)
        except IllegalSyntax as e:
            if on_error == "abort":
                raise LineAborted(e, lineno) from e
            if on_error == "report":
                yield DecodedLine(line=lineno, error=str(e))
            continue
        yield DecodedLine(line=lineno, command=cmd)


def result_json(result: DecodedLine) -> dict:
    """Compact JSON shape shared by the service and the CLI."""
    out: dict = {"line": result.line}
    if result.command is not None:
        out["command"] = result.command.model_dump(mode="json")
    else:
        out["error"] = result.error
    return out
