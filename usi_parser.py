"""
Purpose: Decode one line sent by a USI engine into a typed command (usi_commands).
Usage: parse_engine_line("info depth 10 score cp 34 pv 7g7f 3c3d")

Examples:
  bestmove 7g7f ponder 8c8d
  checkmate nomate
  id name Lesserkai 1.4
  info depth 10 seldepth 12 time 420 nodes 123456 score cp 34 lowerbound pv 7g7f 3c3d
  option name USI_Hash type spin default 256 min 1 max 1024

Unrecognized leading keywords decode to `Unknown`; inside a recognized command
any deviation from the grammar raises IllegalSyntax. Nothing is kept between calls.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, Optional

from usi_commands import (
    INT32_MAX,
    INT32_MIN,
    UINT64_MAX,
    BestMove,
    ButtonOption,
    CheckOption,
    Checkmate,
    ComboOption,
    CurrMove,
    Depth,
    EngineCommand,
    FilenameOption,
    HashFull,
    Id,
    IdAuthor,
    IdName,
    Info,
    MakeMove,
    Mate,
    MultiPv,
    Nodes,
    NoMate,
    Nps,
    Option,
    OptionSpec,
    Pv,
    ReadyOk,
    Resign,
    Score,
    ScoreKind,
    SpinOption,
    StringOption,
    Text,
    Time,
    Timeout,
    Unknown,
    UsiOk,
    Win,
)
from usi_tokens import TokenStream

EMPTY_LITERAL = "<empty>"

_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


class IllegalSyntax(ValueError):
    """A line did not conform to the engine -> GUI grammar."""

    def __init__(self, reason: str, line: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.reason
        return f"{self.reason} in {self.line!r}"


# ---------------- token conversions ----------------

def _to_int32(tok: Optional[str]) -> Optional[int]:
    if tok is None or not _SIGNED_RE.fullmatch(tok):
        return None
    v = int(tok)
    return v if INT32_MIN <= v <= INT32_MAX else None

def _to_uint64(tok: Optional[str]) -> Optional[int]:
    if tok is None or not _UNSIGNED_RE.fullmatch(tok):
        return None
    v = int(tok)
    return v if v <= UINT64_MAX else None

def _to_bool(tok: Optional[str]) -> Optional[bool]:
    return {"true": True, "false": False}.get(tok) if tok is not None else None

def _default_value(tok: str) -> str:
    return "" if tok == EMPTY_LITERAL else tok

def _require(tokens: TokenStream, what: str) -> str:
    tok = tokens.next_or_none()
    if tok is None:
        raise IllegalSyntax(f"missing {what}")
    return tok

def _require_int32(tokens: TokenStream, what: str) -> int:
    tok = _require(tokens, what)
    v = _to_int32(tok)
    if v is None:
        raise IllegalSyntax(f"{what} is not an int32: {tok!r}")
    return v


# ---------------- bestmove / checkmate / id ----------------

def _parse_bestmove(tokens: TokenStream) -> BestMove:
    move = tokens.next_or_none()
    keyword = tokens.next_or_none()
    ponder = tokens.next_or_none()
    extra = tokens.next_or_none()
    if move is None or extra is not None:
        raise IllegalSyntax("bestmove takes a move and an optional ponder move")
    if keyword is None:
        if move == "resign":
            return BestMove(result=Resign())
        if move == "win":
            return BestMove(result=Win())
        return BestMove(result=MakeMove(move=move))
    if keyword == "ponder" and ponder is not None:
        return BestMove(result=MakeMove(move=move, ponder=ponder))
    raise IllegalSyntax(f"unexpected bestmove suffix {keyword!r}")

def _parse_checkmate(tokens: TokenStream) -> Checkmate:
    first = _require(tokens, "checkmate result")
    # `notimplemented` and `nomate` are wire synonyms
    if first in ("notimplemented", "nomate"):
        return Checkmate(result=NoMate())
    if first == "timeout":
        return Checkmate(result=Timeout())
    return Checkmate(result=Mate(moves=(first, *tokens.rest())))

def _parse_id(tokens: TokenStream) -> Id:
    which = tokens.next_or_none()
    if which == "name":
        return Id(field=IdName(value=tokens.join_rest()))
    if which == "author":
        return Id(field=IdAuthor(value=tokens.join_rest()))
    raise IllegalSyntax(f"id expects name or author, got {which!r}")


# ---------------- info ----------------

_SINGLE_INT_INFO = {
    "multipv": MultiPv,
    "nodes": Nodes,
    "hashfull": HashFull,
    "nps": Nps,
}

_BOUNDS = {
    "cp": {None: ScoreKind.CP_EXACT, "lowerbound": ScoreKind.CP_LOWERBOUND, "upperbound": ScoreKind.CP_UPPERBOUND},
    "mate": {None: ScoreKind.MATE_EXACT, "lowerbound": ScoreKind.MATE_LOWERBOUND, "upperbound": ScoreKind.MATE_UPPERBOUND},
}

def _parse_score(tokens: TokenStream) -> Score:
    unit = tokens.next_or_none()
    if unit not in _BOUNDS:
        raise IllegalSyntax(f"score expects cp or mate, got {unit!r}")
    if unit == "mate":
        # sign-only form never takes a bound suffix
        if tokens.peek() == "+":
            next(tokens)
            return Score(value=1, kind=ScoreKind.MATE_SIGN_ONLY)
        if tokens.peek() == "-":
            next(tokens)
            return Score(value=-1, kind=ScoreKind.MATE_SIGN_ONLY)
    value = _require_int32(tokens, f"score {unit} value")
    bound = tokens.peek()
    if bound in ("lowerbound", "upperbound"):
        next(tokens)
    else:
        bound = None
    return Score(value=value, kind=_BOUNDS[unit][bound])

def _parse_info(tokens: TokenStream) -> Info:
    entries = []
    for keyword in tokens:
        if keyword == "depth":
            depth = _require_int32(tokens, "depth")
            sel_depth = None
            if tokens.peek() == "seldepth":
                next(tokens)
                sel_depth = _require_int32(tokens, "seldepth")
            entries.append(Depth(depth=depth, sel_depth=sel_depth))
        elif keyword == "time":
            raw = _require(tokens, "time")
            ms = _to_uint64(raw)
            if ms is None:
                raise IllegalSyntax(f"time is not a uint64: {raw!r}")
            entries.append(Time(milliseconds=ms))
        elif keyword in _SINGLE_INT_INFO:
            entries.append(_SINGLE_INT_INFO[keyword](value=_require_int32(tokens, keyword)))
        elif keyword == "score":
            entries.append(_parse_score(tokens))
        elif keyword == "currmove":
            entries.append(CurrMove(move=_require(tokens, "currmove")))
        elif keyword == "pv":
            entries.append(Pv(moves=tuple(tokens.rest())))
            break
        elif keyword == "string":
            entries.append(Text(text=tokens.join_rest()))
            break
        else:
            raise IllegalSyntax(f"unknown info keyword {keyword!r}")
    return Info(entries=tuple(entries))


# ---------------- option ----------------

def _value_after_default(tokens: TokenStream) -> Optional[str]:
    """Skip ahead to `default` and return the token after it, if any."""
    for tok in tokens:
        if tok == "default":
            return tokens.next_or_none()
    return None

def _check_body(tokens: TokenStream) -> CheckOption:
    return CheckOption(default=_to_bool(_value_after_default(tokens)))

def _spin_body(tokens: TokenStream) -> SpinOption:
    values: Dict[str, Optional[int]] = {}
    for key in tokens:
        if key in ("default", "min", "max"):
            # unparsable values leave the field unset
            values[key] = _to_int32(tokens.next_or_none())
    return SpinOption(**values)

def _combo_body(tokens: TokenStream) -> ComboOption:
    default = None
    choices: tuple = ()
    for key in tokens:
        if key == "default":
            raw = tokens.next_or_none()
            default = _default_value(raw) if raw is not None else None
        elif key == "var":
            # the var list is always the tail of the line
            choices = tuple(tokens.rest())
            break
    return ComboOption(default=default, vars=choices)

def _text_body(kind):
    def body(tokens: TokenStream):
        raw = _value_after_default(tokens)
        return kind(default=_default_value(raw) if raw is not None else None)
    return body

_OPTION_BODIES = {
    "check": _check_body,
    "spin": _spin_body,
    "combo": _combo_body,
    "button": _text_body(ButtonOption),
    "string": _text_body(StringOption),
    "filename": _text_body(FilenameOption),
}

def _parse_option(tokens: TokenStream) -> Option:
    if tokens.next_or_none() != "name":
        raise IllegalSyntax("option must start with 'name'")
    name = _require(tokens, "option name")
    if tokens.next_or_none() != "type":
        raise IllegalSyntax("option name must be followed by 'type'")
    type_kw = _require(tokens, "option type")
    body = _OPTION_BODIES.get(type_kw)
    if body is None:
        raise IllegalSyntax(f"unknown option type {type_kw!r}")
    return Option(spec=OptionSpec(name=name, kind=body(tokens)))


# ---------------- dispatcher ----------------

# trailing tokens after readyok / usiok are ignored
_COMMANDS: Dict[str, Callable[[TokenStream], object]] = {
    "bestmove": _parse_bestmove,
    "checkmate": _parse_checkmate,
    "id": _parse_id,
    "info": _parse_info,
    "option": _parse_option,
    "readyok": lambda tokens: ReadyOk(),
    "usiok": lambda tokens: UsiOk(),
}

KNOWN_COMMANDS = tuple(_COMMANDS)


def parse_engine_line(line: str) -> EngineCommand:
    """
    Decode one engine line into a command model.

    Raises IllegalSyntax for an empty line or a malformed recognized command.
    """
    tokens = TokenStream(line)
    keyword = tokens.next_or_none()
    if keyword is None:
        raise IllegalSyntax("empty line", line)
    handler = _COMMANDS.get(keyword)
    if handler is None:
        return Unknown(keyword=keyword)
    try:
        return handler(tokens)
    except IllegalSyntax as e:
        e.line = line
        raise
