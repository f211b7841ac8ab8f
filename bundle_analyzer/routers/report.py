import asyncio
import logging
from typing import Any, Callable, Dict

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/chart-data")
def chart_data(request: Request):
    data = request.app.state.channel.chart_data
    if data is None:
        raise HTTPException(status_code=404, detail="No chart data. Nothing to analyze in the provided stats.")
    return data


@router.get("/api/report")
def report(request: Request):
    """Everything a viewer needs to render the treemap on first load."""
    settings = request.app.state.settings
    return {
        "title":           settings.report_title,
        "defaultSizes":    settings.default_sizes,
        "enableWebSocket": True,
        "chartData":       request.app.state.channel.chart_data,
    }


@router.post("/api/stats")
def push_stats(request: Request, stats: Dict[str, Any]):
    return {"updated": request.app.state.channel.recompute(stats)}


async def _pump(websocket: WebSocket, queue: asyncio.Queue, unsubscribe: Callable[[], None]) -> None:
    while True:
        message = await queue.get()
        try:
            await websocket.send_json(message)
        except Exception as err:
            # ECONNRESET / EPIPE and friends: this client is gone
            logger.info(f"Dropping report client: {err}")
            unsubscribe()
            return


@router.websocket("/ws")
async def report_updates(websocket: WebSocket):
    channel = websocket.app.state.channel
    loop    = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    # recompute() may run on a worker thread; hand messages over to our loop
    unsubscribe = channel.subscribe(
        lambda message: loop.call_soon_threadsafe(queue.put_nowait, message)
    )
    sender = None
    try:
        await websocket.accept()
        sender = asyncio.create_task(_pump(websocket, queue, unsubscribe))
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        if sender is not None:
            sender.cancel()
