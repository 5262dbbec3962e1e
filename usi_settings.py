"""
Purpose: Runtime configuration for the decode service and CLI, read from the environment.
Usage: from usi_settings import load_settings; cfg = load_settings()
"""
from __future__ import annotations

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, conint

# What to do with a line that raises IllegalSyntax
OnError = Literal["skip", "report", "abort"]

MaxLine = conint(ge=1, le=1_000_000)
MaxBatch = conint(ge=1, le=100_000)

_TRUTHY = ("1", "true", "yes", "on")


class DecoderSettings(BaseModel):
    debug: bool = False
    on_error: OnError = "report"
    max_line: MaxLine = 8192
    max_batch: MaxBatch = 1000

    model_config = {"extra": "forbid",
        "json_schema_extra": {"description": "Error policy and request limits for decoding engine lines."}
    }


def load_settings(env: Optional[Mapping[str, str]] = None) -> DecoderSettings:
    env = os.environ if env is None else env
    raw = {}
    if env.get("USI_DECODE_DEBUG"):
        raw["debug"] = env["USI_DECODE_DEBUG"].strip().lower() in _TRUTHY
    if env.get("USI_DECODE_ON_ERROR"):
        raw["on_error"] = env["USI_DECODE_ON_ERROR"].strip().lower()
    if env.get("USI_DECODE_MAX_LINE"):
        raw["max_line"] = env["USI_DECODE_MAX_LINE"]
    if env.get("USI_DECODE_MAX_BATCH"):
        raw["max_batch"] = env["USI_DECODE_MAX_BATCH"]
    return DecoderSettings(**raw)
