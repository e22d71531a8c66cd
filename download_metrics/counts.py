from __future__ import annotations

import re
from typing import Optional

from .errors import CountParseError

_DIGITS = re.compile(r"[0-9]+")


def parse_count(raw: Optional[str]) -> int:
    """Turn a human-formatted download count such as ``"1,234\\n "`` into an int.

    A missing count node (``None``) counts as zero downloads.  Anything that
    is not a plain non-negative integer once whitespace and thousands
    separators are removed raises :class:`CountParseError`.
    """
    if raw is None:
        return 0
    cleaned = raw.strip().replace(",", "")
    if not _DIGITS.fullmatch(cleaned):
        raise CountParseError(raw)
    return int(cleaned, 10)
