"""
Purpose: Lazy whitespace tokenizer with one-token lookahead.
Usage: usi_parser builds one TokenStream per line and hands it to the sub-parsers.
"""
from __future__ import annotations

import re
from typing import Iterator, List, Optional

_TOKEN_RE = re.compile(r"\S+")


class TokenStream:
    """
    Forward-only iterator over the whitespace-delimited tokens of one line.

    Tokens are produced on demand; `peek()` looks at the next token without
    consuming it. No quoting or escaping.
    """

    def __init__(self, line: str):
        self._matches = _TOKEN_RE.finditer(line)
        self._peeked: Optional[str] = None
        self._has_peeked = False

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._has_peeked:
            self._has_peeked = False
            tok = self._peeked
            self._peeked = None
            if tok is None:
                raise StopIteration
            return tok
        m = next(self._matches, None)
        if m is None:
            raise StopIteration
        return m.group(0)

    def peek(self) -> Optional[str]:
        if not self._has_peeked:
            m = next(self._matches, None)
            self._peeked = m.group(0) if m else None
            self._has_peeked = True
        return self._peeked

    def next_or_none(self) -> Optional[str]:
        return next(self, None)

    def rest(self) -> List[str]:
        """Consume and return every remaining token."""
        return list(self)

    def join_rest(self) -> str:
        return " ".join(self)
