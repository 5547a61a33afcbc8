"""Voting domain - permanent vote markers with a resend cooldown."""

from .exceptions import VoteCooldownActiveError
from .tracker import VOTE_COOLDOWN, VotedStation, VoteTracker

__all__ = [
    "VOTE_COOLDOWN",
    "VotedStation",
    "VoteTracker",
    "VoteCooldownActiveError",
]
