"""Fetch-then-rank cycle run on every location update."""

import itertools
import logging
from typing import List, Optional, Tuple

from data_source import DEFAULT_DATA_URL, REQUEST_TIMEOUT, FetchResult, fetch_facilities, fetch_table
from nearest_toilet import DEFAULT_COUNT, Predicate, rank_with_distances, requires_baby_change
from toilet_data import Facility

logger = logging.getLogger(__name__)


class ToiletFinder:
    """
    Keeps the latest loaded and ranked facilities for a presentation layer.

    Every call to refresh() runs one independent fetch-then-rank cycle. By
    default the last cycle to finish wins. With discard_stale=True each cycle
    is numbered when it starts and a cycle that finishes after a newer one
    has been applied is dropped.
    """

    def __init__(
        self,
        data_url: str = DEFAULT_DATA_URL,
        count: int = DEFAULT_COUNT,
        predicate: Predicate = requires_baby_change,
        fetch=fetch_table,
        timeout: float = REQUEST_TIMEOUT,
        discard_stale: bool = False,
    ):
        self.data_url = data_url
        self.count = count
        self.predicate = predicate
        self.fetch = fetch
        self.timeout = timeout
        self.discard_stale = discard_stale

        self.toilets: List[Facility] = []
        self.ranked: List[Tuple[Facility, float]] = []
        self._generations = itertools.count(1)
        self._applied_generation = 0

    @property
    def nearest(self) -> List[Facility]:
        return [f for f, _ in self.ranked]

    def start_cycle(self) -> int:
        return next(self._generations)

    def apply(self, generation: int, toilets: List[Facility],
              ranked: List[Tuple[Facility, float]]) -> bool:
        """Store a finished cycle's (facility, distance_m) results.

        Returns False if they were dropped.
        """
        if self.discard_stale and generation < self._applied_generation:
            logger.info("Dropping results of cycle %d; cycle %d already applied",
                        generation, self._applied_generation)
            return False
        self.toilets = toilets
        self.ranked = ranked
        self._applied_generation = generation
        return True

    def refresh(self, latitude: float, longitude: float) -> FetchResult:
        """Fetch the dataset and rank it around (latitude, longitude).

        On a failed fetch the previous results are kept.
        """
        generation = self.start_cycle()
        result = fetch_facilities(self.data_url, timeout=self.timeout, fetch=self.fetch)
        if not result.ok:
            return result

        ranked = rank_with_distances(result.facilities, self.predicate, (latitude, longitude), self.count)
        self.apply(generation, result.facilities, ranked)
        return result

    def find_by_name(self, name: str) -> Optional[Facility]:
        """First loaded facility whose name matches a tapped marker title."""
        return next((t for t in self.toilets if t.name == name), None)
