"""
Attention heuristic for free-text shipment descriptions.

This is keyword matching, not classification. A description such as
"Household goods" is flagged because it contains "hold", and "Stuck at the
border" is not flagged at all. Both outcomes are accepted. Structured status
codes go through ``status_normalizer.classify`` instead.
"""
import re
from functools import lru_cache
from typing import Optional, Sequence

from config import ATTENTION_PATTERNS, LEGACY_ATTENTION_PATTERNS

__all__ = ["ATTENTION_PATTERNS", "LEGACY_ATTENTION_PATTERNS", "needs_attention"]


@lru_cache(maxsize=8)
def _compile(patterns: tuple) -> re.Pattern:
    return re.compile("|".join(re.escape(p) for p in patterns), re.IGNORECASE)


def needs_attention(description: Optional[str], patterns: Sequence[str] = ATTENTION_PATTERNS) -> bool:
    """
    Check whether a description mentions any attention keyword.

    Args:
        description: Free-text shipment description
        patterns: Keywords to look for (case-insensitive substrings). A single
            string is treated as one keyword.

    Returns:
        True if any keyword occurs in the description
    """
    if isinstance(patterns, str):
        patterns = (patterns,)
    if not description or not patterns:
        return False
    return _compile(tuple(patterns)).search(description) is not None
