"""
Purpose: Pydantic models for the engine -> GUI commands of the USI protocol.
Usage: Produced by usi_parser.parse_engine_line; dumped to JSON by usi_service.py and usi_decode.py.

Every union is discriminated on `type`, so a dumped command validates back into
the same model. All models are frozen; sequences are tuples.
"""
from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, conint, model_validator

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
UINT64_MAX = 2 ** 64 - 1

Int32 = conint(ge=INT32_MIN, le=INT32_MAX)
UInt64 = conint(ge=0, le=UINT64_MAX)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------- bestmove ----------------

class Resign(_Frozen):
    type: Literal["resign"] = "resign"

class Win(_Frozen):
    type: Literal["win"] = "win"

class MakeMove(_Frozen):
    type: Literal["move"] = "move"
    move: str
    ponder: Optional[str] = None

BestMoveResult = Annotated[Union[Resign, Win, MakeMove], Field(discriminator="type")]


# ---------------- checkmate ----------------

class NoMate(_Frozen):
    type: Literal["nomate"] = "nomate"

class Timeout(_Frozen):
    type: Literal["timeout"] = "timeout"

class Mate(_Frozen):
    type: Literal["mate"] = "mate"
    moves: Tuple[str, ...] = Field(..., min_length=1)

CheckmateResult = Annotated[Union[NoMate, Timeout, Mate], Field(discriminator="type")]


# ---------------- id ----------------

class IdName(_Frozen):
    type: Literal["name"] = "name"
    value: str

class IdAuthor(_Frozen):
    type: Literal["author"] = "author"
    value: str

IdField = Annotated[Union[IdName, IdAuthor], Field(discriminator="type")]


# ---------------- info ----------------

class ScoreKind(str, Enum):
    CP_EXACT = "cp_exact"
    CP_LOWERBOUND = "cp_lowerbound"
    CP_UPPERBOUND = "cp_upperbound"
    MATE_EXACT = "mate_exact"
    MATE_LOWERBOUND = "mate_lowerbound"
    MATE_UPPERBOUND = "mate_upperbound"
    MATE_SIGN_ONLY = "mate_sign_only"   # `mate +` / `mate -`, value is +1 / -1


class Depth(_Frozen):
    type: Literal["depth"] = "depth"
    depth: Int32
    sel_depth: Optional[Int32] = None

class Time(_Frozen):
    type: Literal["time"] = "time"
    milliseconds: UInt64

    @property
    def duration(self) -> timedelta:
        return timedelta(milliseconds=self.milliseconds)

class MultiPv(_Frozen):
    type: Literal["multipv"] = "multipv"
    value: Int32

class Nodes(_Frozen):
    type: Literal["nodes"] = "nodes"
    value: Int32

class HashFull(_Frozen):
    type: Literal["hashfull"] = "hashfull"
    value: Int32  # permille

class Nps(_Frozen):
    type: Literal["nps"] = "nps"
    value: Int32

class Score(_Frozen):
    type: Literal["score"] = "score"
    value: Int32
    kind: ScoreKind

    @model_validator(mode="after")
    def _sign_only_is_unit(self) -> "Score":
        if self.kind is ScoreKind.MATE_SIGN_ONLY and self.value not in (1, -1):
            raise ValueError("sign-only mate score must be +1 or -1")
        return self

class CurrMove(_Frozen):
    type: Literal["currmove"] = "currmove"
    move: str

class Pv(_Frozen):
    type: Literal["pv"] = "pv"
    moves: Tuple[str, ...] = ()

class Text(_Frozen):
    type: Literal["string"] = "string"
    text: str

InfoEntry = Annotated[
    Union[Depth, Time, MultiPv, Nodes, HashFull, Nps, Score, CurrMove, Pv, Text],
    Field(discriminator="type"),
]

# pv and string swallow the rest of the line
TERMINAL_INFO_TYPES = ("pv", "string")


# ---------------- option ----------------

class CheckOption(_Frozen):
    type: Literal["check"] = "check"
    default: Optional[bool] = None

class SpinOption(_Frozen):
    type: Literal["spin"] = "spin"
    default: Optional[Int32] = None
    min: Optional[Int32] = None
    max: Optional[Int32] = None

class ComboOption(_Frozen):
    type: Literal["combo"] = "combo"
    default: Optional[str] = None
    vars: Tuple[str, ...] = ()

class ButtonOption(_Frozen):
    type: Literal["button"] = "button"
    default: Optional[str] = None

class StringOption(_Frozen):
    type: Literal["string"] = "string"
    default: Optional[str] = None

class FilenameOption(_Frozen):
    type: Literal["filename"] = "filename"
    default: Optional[str] = None

OptionKind = Annotated[
    Union[CheckOption, SpinOption, ComboOption, ButtonOption, StringOption, FilenameOption],
    Field(discriminator="type"),
]

class OptionSpec(_Frozen):
    name: str
    kind: OptionKind


# ---------------- top level ----------------

class BestMove(_Frozen):
    type: Literal["bestmove"] = "bestmove"
    result: BestMoveResult

class Checkmate(_Frozen):
    type: Literal["checkmate"] = "checkmate"
    result: CheckmateResult

class Id(_Frozen):
    type: Literal["id"] = "id"
    field: IdField

class Info(_Frozen):
    type: Literal["info"] = "info"
    entries: Tuple[InfoEntry, ...] = ()

    @model_validator(mode="after")
    def _terminal_entry_is_last(self) -> "Info":
        for entry in self.entries[:-1]:
            if entry.type in TERMINAL_INFO_TYPES:
                raise ValueError(f"info '{entry.type}' must be the last entry")
        return self

class Option(_Frozen):
    type: Literal["option"] = "option"
    spec: OptionSpec

class ReadyOk(_Frozen):
    type: Literal["readyok"] = "readyok"

class UsiOk(_Frozen):
    type: Literal["usiok"] = "usiok"

class Unknown(_Frozen):
    type: Literal["unknown"] = "unknown"
    keyword: str = ""  # diagnostics only

EngineCommand = Annotated[
    Union[BestMove, Checkmate, Id, Info, Option, ReadyOk, UsiOk, Unknown],
    Field(discriminator="type"),
]
