"""Blocklist domain - blocked stations and block rules.

This domain handles:
- Per-station blocks with one-step undo
- Country/language/tag block rules
- Atomic persistence of the whole blocklist document
"""

from .exceptions import (
    AlreadyBlockedError,
    BlocklistError,
    NotBlockedError,
    RuleAlreadyExistsError,
    RuleNotFoundError,
)
from .manager import BlocklistManager
from .models import (
    BLOCK_LARGE_THRESHOLD,
    BLOCK_WARNING_THRESHOLD,
    BlockedStation,
    BlockRule,
    BlockRuleType,
)

__all__ = [
    "BlocklistManager",
    # Models
    "BlockedStation",
    "BlockRule",
    "BlockRuleType",
    "BLOCK_WARNING_THRESHOLD",
    "BLOCK_LARGE_THRESHOLD",
    # Errors
    "BlocklistError",
    "AlreadyBlockedError",
    "NotBlockedError",
    "RuleAlreadyExistsError",
    "RuleNotFoundError",
]
