import asyncio
import logging
from typing import Awaitable, Callable

from config import FRAME_POLL_INTERVAL_S
from processing.pipeline import process_frame, tick
from schemas.observation import FrameObservation
from state.session import SessionState

logger = logging.getLogger("uvicorn.error")

NO_FRAME = object()


class LatestFrameSlot:
    """Holds the most recent undelivered detections; a newer frame overwrites an older one."""

    def __init__(self):
        self._pending = None
        self.dropped = 0

    def put(self, detections: list[FrameObservation]):
        if self._pending is not None and self._pending is not NO_FRAME:
            self.dropped += 1
        self._pending = detections

    def put_no_frame(self):
        """Signal that the detector could not deliver a frame this tick."""
        if self._pending is None:
            self._pending = NO_FRAME

    def take(self):
        pending, self._pending = self._pending, None
        return pending

    def clear(self):
        self._pending = None


async def run_verification_loop(
    session: SessionState,
    slot: LatestFrameSlot,
    on_update: Callable[[dict], Awaitable[None]],
    poll_interval: float = FRAME_POLL_INTERVAL_S,
):
    """Pull frames from ``slot`` one at a time until the session is closed."""
    frame_count = 0
    while not session.closed:
        pending = slot.take()

        if pending is None:
            result = tick(session)
            if result is not None:
                await on_update(result)
            await asyncio.sleep(poll_interval)
            continue

        if pending is NO_FRAME:
            await on_update(process_frame(None, session))
            continue

        frame_count += 1
        result = await asyncio.to_thread(process_frame, pending, session)

        if frame_count <= 3 or frame_count % 30 == 0:
            logger.info(
                f"Frame #{frame_count} -> step={result.get('step')}, faces={result.get('faces')}, "
                f"liveness={result.get('liveness_score'):.2f}"
            )

        await on_update(result)

    return frame_count
