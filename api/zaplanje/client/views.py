"""Deferred view recording for an opened post."""

from __future__ import annotations

import asyncio
import logging

from .. import schemas
from ..settings import VIEW_RECORD_DELAY_SECONDS
from .api import ContentClient, ContentStoreError

logger = logging.getLogger(__name__)

UNRECORDED = "unrecorded"
ARMED = "armed"
RECORDED = "recorded"


class ViewRecorder:
    """
    Counts one view of a post once the reader has stayed on it for ``delay`` seconds.

    One recorder belongs to one opened post page. Leaving before the delay
    (``teardown()``) cancels the pending request. A recorder sends at most one
    request; a failed one is logged and not retried. Opening the post again
    creates a new recorder and may count again.
    """

    def __init__(
        self,
        client: ContentClient,
        delay: float = VIEW_RECORD_DELAY_SECONDS,
        user_agent: str | None = None,
        referrer: str | None = None,
    ):
        self.client = client
        self.delay = delay
        self.user_agent = user_agent
        self.referrer = referrer
        self.state = UNRECORDED
        self.view_count: int | None = None
        self._task: asyncio.Task | None = None
        self._sent = False

    def on_post_loaded(self, post: schemas.Post) -> None:
        """Arm the recorder for ``post``. Ignored once armed or after the request went out."""
        if self.state != UNRECORDED or self._sent:
            return
        self.state = ARMED
        self._task = asyncio.get_running_loop().create_task(self._record_after_delay(post.id))

    async def teardown(self) -> None:
        """Cancel a pending recording. A request already sent is left to finish."""
        task = self._task
        if task is None or task.done() or self._sent:
            return
        self._task = None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.state = UNRECORDED
        logger.debug("View recording cancelled before the delay elapsed")

    async def wait(self) -> None:
        """Wait until an armed recording has finished."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _record_after_delay(self, post_id) -> None:
        await asyncio.sleep(self.delay)
        self._sent = True
        try:
            self.view_count = await self.client.increment_view(
                post_id, user_agent=self.user_agent, referrer=self.referrer
            )
        except ContentStoreError as exc:
            logger.warning(f"Could not record view for post {post_id}: {exc.message}")
            self.state = UNRECORDED
            return
        self.state = RECORDED
        logger.debug(f"Recorded view for post {post_id}: view_count={self.view_count}")
