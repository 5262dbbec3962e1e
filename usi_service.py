"""
Decode Service (USI) — turns engine output lines into typed JSON commands.

Exposes:
  - GET  /health           -> {"ok": true}
  - POST /decode           -> {"command": {...}}            body {line}
  - POST /decode/batch     -> {"results": [{line, command|error}, ...]}
        body {lines, on_error?: skip|report|abort}
  - POST /decode/stream    -> SSE: one event per decoded line, then {type:"done"}

Notes:
  * Decoding is pure; this service never talks to an engine process.
  * SSE events are tiny JSON objects, one per `data:` line.
"""
from __future__ import annotations

import json
from typing import AsyncGenerator, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from usi_batch import LineAborted, decode_lines, result_json
from usi_parser import IllegalSyntax, parse_engine_line
from usi_settings import OnError, load_settings

SETTINGS = load_settings()
PRINT_DBG = SETTINGS.debug

def _dbg(msg: str):
    if PRINT_DBG:
        print(f"[DBG] usi_service: {msg}", flush=True)

app = FastAPI(title="usi-decode", version="1.0")


class DecodeRequest(BaseModel):
    line: str = Field(..., max_length=SETTINGS.max_line, description="One line of engine output")

    model_config = {"extra": "forbid"}

class DecodeBatchRequest(BaseModel):
    lines: List[str] = Field(..., max_length=SETTINGS.max_batch, description="Engine output, one entry per line")
    on_error: Optional[OnError] = None

    model_config = {"extra": "forbid"}


def _check_lengths(lines: List[str]) -> None:
    for i, line in enumerate(lines, start=1):
        if len(line) > SETTINGS.max_line:
            raise HTTPException(422, f"line {i} longer than {SETTINGS.max_line} characters")

def _sse_json(obj: dict) -> str:
    return f"data: {json.dumps(obj, separators=(',', ':'))}\n\n"


@app.get("/health")
async def health():
    return {"ok": True}

@app.post("/decode")
async def decode(req: DecodeRequest):
    try:
        cmd = parse_engine_line(req.line)
    except IllegalSyntax as e:
        _dbg(f"decode: {e}")
        raise HTTPException(400, f"Illegal syntax: {e}")
    return {"command": cmd.model_dump(mode="json")}

@app.post("/decode/batch")
async def decode_batch(req: DecodeBatchRequest):
    _check_lengths(req.lines)
    policy = req.on_error or SETTINGS.on_error
    _dbg(f"batch lines={len(req.lines)} on_error={policy}")
    try:
        results = [result_json(r) for r in decode_lines(req.lines, policy)]
    except LineAborted as e:
        _dbg(f"batch aborted: {e}")
        raise HTTPException(400, f"Illegal syntax: {e}")
    return {"results": results}

@app.post("/decode/stream")
async def decode_stream(req: DecodeBatchRequest) -> StreamingResponse:
    _check_lengths(req.lines)
    policy = req.on_error or SETTINGS.on_error
    _dbg(f"stream lines={len(req.lines)} on_error={policy}")

    async def gen() -> AsyncGenerator[str, None]:
        try:
            for r in decode_lines(req.lines, policy):
                yield _sse_json(result_json(r))
        except LineAborted as e:
            _dbg(f"stream aborted: {e}")
            yield _sse_json({"type": "error", "line": e.lineno, "error": str(e)})
        yield _sse_json({"type": "done"})

    return StreamingResponse(gen(), media_type="text/event-stream")
