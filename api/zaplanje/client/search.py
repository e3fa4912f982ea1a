"""Search-as-you-type state for the reader client."""

from __future__ import annotations

import logging

from .. import schemas
from .api import ContentClient, ContentStoreError

logger = logging.getLogger(__name__)

IDLE = "idle"
SEARCHING = "searching"
RESULTS = "results"
ERRORED = "errored"


class SearchSession:
    """
    Holds the results of the latest search.

    Every request gets a sequence number. A response is applied only if no
    newer request was issued (and ``clear()`` was not called) while it was
    in flight, so a slow early response never overwrites a later one.
    Results are kept in the order the server ranked them.
    """

    def __init__(self, client: ContentClient):
        self.client = client
        self.query = ""
        self.results: list[schemas.SearchResult] = []
        self.loading = False
        self.error: str | None = None
        self.state = IDLE
        self._sequence = 0

    def clear(self) -> None:
        self._sequence += 1
        self.query = ""
        self.results = []
        self.loading = False
        self.error = None
        self.state = IDLE

    async def search(self, query: str) -> list[schemas.SearchResult]:
        if not query.strip():
            self.clear()
            return self.results

        self._sequence += 1
        sequence = self._sequence
        self.query = query
        self.loading = True
        self.error = None
        self.state = SEARCHING

        try:
            results = await self.client.search(query)
        except ContentStoreError as exc:
            if sequence != self._sequence:
                logger.debug(f"Dropping stale search failure for {query!r}")
                return self.results
            logger.warning(f"Search for {query!r} failed: {exc.message}")
            self.results = []
            self.error = exc.message
            self.loading = False
            self.state = ERRORED
            return self.results

        if sequence != self._sequence:
            logger.debug(f"Dropping stale search results for {query!r}")
            return self.results

        self.results = results
        self.loading = False
        self.state = RESULTS
        return self.results
