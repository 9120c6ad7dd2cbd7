"""WebSocket stream of live query snapshots.

Each connection runs one live query. Snapshots are produced on whichever
thread committed the write, so they are handed to the socket's event loop
through a queue and sent from there.
"""

import asyncio
import itertools
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.core.errors import SubscriptionError
from ratemyrez.services.aggregation import SortMode, compute_stats, newest_first, sort_reviews
from ratemyrez.services.store import LiveQuery
from ratemyrez.services.subscriptions import (
    home_feed_query,
    property_questions_query,
    property_reviews_query,
    question_replies_query,
    snapshot_digest,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])

# Close codes in the application range
CLOSE_UNKNOWN_QUERY = 4404
CLOSE_BACKEND_UNAVAILABLE = 4503


def live_query_for(kind: str, key: str, feed_limit: int) -> LiveQuery | None:
    """Live query behind a stream kind, or None for an unknown kind or key."""
    if kind == "feed":
        return home_feed_query(feed_limit)
    if kind == "reviews" and key:
        return property_reviews_query(key)
    if kind == "questions" and key:
        return property_questions_query(key)
    if kind == "replies" and key.isdigit():
        return question_replies_query(int(key))
    return None


def snapshot_message(
    kind: str,
    key: str,
    version: int,
    records: list[Any],
    sort_mode: SortMode,
    feed_limit: int,
) -> dict:
    """JSON message for one snapshot; review lists arrive ordered and with stats."""
    message: dict[str, Any] = {"type": "snapshot", "kind": kind, "key": key, "version": version}
    if kind == "feed":
        records = newest_first(records, feed_limit)
    elif kind == "reviews":
        stats = compute_stats(records)
        message["sort"] = sort_mode.value
        message["stats"] = {
            "avg_rating": stats.avg_rating,
            "avg_rent": stats.avg_rent,
            "avg_dist": stats.avg_dist,
            "count": stats.count,
        }
        records = sort_reviews(records, sort_mode)
    message["digest"] = snapshot_digest(records)
    message["records"] = [record.model_dump(mode="json") for record in records]
    return message


async def _pump(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        message = await queue.get()
        await websocket.send_json(message)


@router.websocket("/ws/{kind}")
async def live_snapshots(
    websocket: WebSocket,
    kind: str,
    key: str = Query(default=""),
    sort: str | None = Query(default=None),
    context: AppContext = Depends(get_app_context),
) -> None:
    """Stream every snapshot of one live query until the client disconnects."""
    feed_limit = context.settings.HOME_FEED_LIMIT
    query = live_query_for(kind, key, feed_limit)
    if query is None:
        await websocket.close(code=CLOSE_UNKNOWN_QUERY)
        return
    if not context.ready or context.store is None:
        await websocket.close(code=CLOSE_BACKEND_UNAVAILABLE)
        return

    store = context.store
    sort_mode = SortMode.parse(sort)
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    versions = itertools.count(1)

    def on_snapshot(records: list[Any]) -> None:
        message = snapshot_message(kind, key, next(versions), records, sort_mode, feed_limit)
        loop.call_soon_threadsafe(queue.put_nowait, message)

    def on_error(exc: SubscriptionError) -> None:
        loop.call_soon_threadsafe(
            queue.put_nowait, {"type": "error", "kind": kind, "key": key, "message": exc.message}
        )

    await websocket.accept()
    subscription = await asyncio.to_thread(store.subscribe, query, on_snapshot, on_error)
    pump = asyncio.create_task(_pump(websocket, queue))
    logger.debug("Live %s stream opened (key=%s)", kind, key)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Live %s stream closed (key=%s)", kind, key)
    finally:
        subscription.unsubscribe()
        pump.cancel()
