# src/discovery/github/aggregators/base.py

from abc import ABC, abstractmethod
from typing import Optional

from discovery.models import ProcessedRepository


class DetailStrategy(ABC):
    """One way of turning a raw repository summary into a ProcessedRepository."""

    @abstractmethod
    async def aggregate(
        self,
        raw: dict,
        user_token: Optional[str] = None,
        include_readme: bool = False,
    ) -> Optional[ProcessedRepository]:
        """
        Returns None only when the strategy cannot answer for this repository
        and another strategy should be tried.
        """
