"""
Request tokens: latest request wins.

Every outbound fetch is stamped with a monotonically increasing token.
A response is committed only if its token is still the latest issued;
anything older is discarded on arrival. Requests are never aborted.
"""

import itertools
from enum import Enum


class RequestTokens:
    """Issues tokens and tells whether a token is still the latest."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0

    def issue(self) -> int:
        self._latest = next(self._counter)
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    @property
    def latest(self) -> int:
        return self._latest


class LoadOutcome(str, Enum):
    """What happened to a load once its response arrived."""

    APPLIED = "APPLIED"
    STALE = "STALE"  # superseded by a later request; discarded, not an error
    FAILED = "FAILED"
