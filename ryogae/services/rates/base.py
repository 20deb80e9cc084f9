"""Rate client abstraction.

A client performs at most one upstream attempt per ``fetch`` call and reports
the result as a value; it never raises for upstream trouble and keeps no state
between calls. Caching and retry timing belong to the scheduler.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ryogae.models.rates import FetchOutcome


class RateClient(ABC):
    name: str = "abstract"

    @abstractmethod
    def fetch(self, timeout: Optional[float] = None) -> FetchOutcome:
        """Return the latest snapshot or a typed failure."""
        raise NotImplementedError
