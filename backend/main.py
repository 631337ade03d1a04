import asyncio
import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from config import FRONTEND_URL
from processing.geometry import DescriptorMismatch
from processing.scheduler import LatestFrameSlot, run_verification_loop
from schemas.messages import ConfigureMessage, FrameMessage, ErrorResponse
from state.session import SessionState
from state.thresholds import ThresholdConfig, IdentityGatingMode

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    thresholds = ThresholdConfig()
    weakened = thresholds.weakened_fields()
    if weakened:
        logger.warning(f"Default thresholds are weaker than the recommended baseline: {', '.join(weakened)}")
    app.state.default_thresholds = thresholds
    yield


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok", "weakened_thresholds": app.state.default_thresholds.weakened_fields()}


def _apply_configure(session: SessionState, message: ConfigureMessage):
    with session.lock:
        if message.thresholds is not None:
            session.thresholds = session.thresholds.with_overrides(**message.thresholds.model_dump())
        if message.identity_gating is not None:
            session.identity_gating = IdentityGatingMode(message.identity_gating)
        session.reset()
    weakened = session.thresholds.weakened_fields()
    if weakened:
        logger.warning(f"WS session configured with weakened thresholds: {', '.join(weakened)}")


@app.websocket("/ws/verify")
async def verification(websocket: WebSocket):
    await websocket.accept()
    session = SessionState(thresholds=websocket.app.state.default_thresholds)
    slot = LatestFrameSlot()

    logger.info("WS verification session started")

    async def reader():
        """Continuously read from WebSocket, keeping only the latest detections."""
        try:
            while True:
                message = await websocket.receive()

                if message.get("type") == "websocket.disconnect":
                    break

                if message.get("text") is None:
                    continue

                try:
                    data = json.loads(message["text"])
                except json.JSONDecodeError:
                    continue

                kind = data.get("type") if isinstance(data, dict) else None
                try:
                    if kind == "frame":
                        slot.put(FrameMessage.model_validate(data).detections)
                    elif kind == "no_frame":
                        slot.put_no_frame()
                    elif kind == "reset":
                        logger.info("WS reset command received")
                        await asyncio.to_thread(session.reset)
                        slot.clear()
                        await websocket.send_json({"type": "reset_ack", "step": session.current_step.name})
                    elif kind == "configure":
                        message = ConfigureMessage.model_validate(data)
                        await asyncio.to_thread(_apply_configure, session, message)
                        slot.clear()
                        await websocket.send_json({
                            "type": "config_ack",
                            "step": session.current_step.name,
                            "identity_gating": session.identity_gating.value,
                            "weakened_thresholds": session.thresholds.weakened_fields(),
                        })
                except (ValidationError, ValueError) as e:
                    await websocket.send_json(ErrorResponse(message=str(e)).model_dump())

        except (WebSocketDisconnect, RuntimeError):
            pass

    async def processor():
        try:
            await run_verification_loop(session, slot, websocket.send_json)
        except DescriptorMismatch as e:
            logger.error(f"WS session aborted: {e}")
            session.close()
            try:
                await websocket.send_json(ErrorResponse(message=str(e)).model_dump())
                await websocket.close(code=1011)
            except (WebSocketDisconnect, RuntimeError):
                pass
        except (WebSocketDisconnect, RuntimeError):
            pass

    try:
        reader_task = asyncio.create_task(reader())
        processor_task = asyncio.create_task(processor())

        # Whichever side finishes first (disconnect or aborted session) takes the other down
        _, pending = await asyncio.wait({reader_task, processor_task}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    except (WebSocketDisconnect, RuntimeError) as e:
        logger.info(f"WS session ended: {type(e).__name__}: {e}")
    finally:
        session.close()
        logger.info(f"WS cleanup: step={session.current_step.name}, dropped {slot.dropped} stale frames")
