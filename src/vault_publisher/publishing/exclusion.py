"""Exclusion rules protecting remote paths from pruning.

A rule is either a delimited regular expression such as ``/draft/i``
or a plain substring. Substring rules are case-sensitive and compared
after trimming whitespace from both the rule and the path.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable

logger = logging.getLogger(__name__)

_DELIMITED = re.compile(r"^/(.*)/([igmsuy]*)$")

# g (global) and y (sticky) have no meaning for a single search.
_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
    "g": 0,
    "y": 0,
}


@lru_cache(maxsize=256)
def parse_rule(rule: str) -> re.Pattern | None:
    """Compile *rule* if it is a delimited regex, else return ``None``.

    An invalid pattern is logged and treated as a substring rule.
    """
    match = _DELIMITED.match(rule.strip())
    if match is None:
        return None

    flags = 0
    for char in match.group(2):
        flags |= _FLAG_MAP[char]
    try:
        return re.compile(match.group(1), flags)
    except re.error as exc:
        logger.warning(
            "Invalid exclusion regex %r (%s); matching it as text", rule, exc
        )
        return None


def is_excluded(path: str, rules: Iterable[str]) -> bool:
    """Return True if *path* matches any exclusion rule."""
    for rule in rules:
        if not rule or not rule.strip():
            continue
        pattern = parse_rule(rule)
        if pattern is not None:
            if pattern.search(path):
                return True
        elif rule.strip() in path.strip():
            return True
    return False
