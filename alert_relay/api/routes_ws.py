"""
PURPOSE: WebSocket endpoint streaming alert changes to dashboards in real time.

Every connected client receives alert_created, alert_updated and
alert_deleted events as they are published on the event bus.
"""

import json
from typing import Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from alert_relay.config.constants import EventType
from alert_relay.events.types import EventPayload
from alert_relay.utils.logger import get_logger
from alert_relay.utils.time_utils import get_utc_now


logger = get_logger(__name__)
router = APIRouter(prefix="/ws", tags=["websocket"])

STREAMED_EVENTS = (
    EventType.ALERT_CREATED,
    EventType.ALERT_UPDATED,
    EventType.ALERT_DELETED,
)

# Track connected clients
_connected_clients: Set[WebSocket] = set()


# ════════════════════════════════════════════════════════════════
# WebSocket Event Handler
# ════════════════════════════════════════════════════════════════


def _event_message(event: EventPayload) -> dict:
    return {
        "type": "event",
        "event_type": event.event_type,
        "data": event.data,
        "timestamp": event.timestamp.isoformat(),
        "source": event.source,
    }


async def broadcast_event(event: EventPayload) -> None:
    """
    PURPOSE: Broadcast an event from the EventBus to all connected WebSocket clients.

    Clients whose send fails are dropped from the connected set.

    CALLED BY: EventBus handlers registered by setup_ws_event_handlers()

    Args:
        event: EventPayload to broadcast to clients
    """
    message = _event_message(event)
    disconnected = []

    for client in list(_connected_clients):
        try:
            await client.send_json(message)
        except Exception as e:
            logger.warning(
                "websocket_send_failed",
                error=str(e),
                client_count=len(_connected_clients)
            )
            disconnected.append(client)

    # Clean up disconnected clients
    for client in disconnected:
        _connected_clients.discard(client)


def setup_ws_event_handlers(event_bus) -> None:
    """
    PURPOSE: Register broadcast_event for every streamed event type.

    CALLED BY: main.py on_startup()
    """
    for event_type in STREAMED_EVENTS:
        event_bus.on(event_type.value, broadcast_event)


# ════════════════════════════════════════════════════════════════
# WebSocket Endpoint
# ════════════════════════════════════════════════════════════════


@router.websocket("/alerts")
async def websocket_alert_stream(websocket: WebSocket) -> None:
    """
    PURPOSE: Live stream of alert changes.

    Behavior:
        1. Accept the connection and register the client
        2. Answer {"type": "ping"} with {"type": "pong"}
        3. Receive broadcasts until the client disconnects
    """
    await websocket.accept()

    _connected_clients.add(websocket)
    client_id = id(websocket)

    logger.info(
        "websocket_client_connected",
        client_id=client_id,
        total_clients=len(_connected_clients)
    )

    try:
        while True:
            data = await websocket.receive_text()
            if not data:
                continue

            try:
                message = json.loads(data)
            except json.JSONDecodeError as e:
                logger.warning(
                    "websocket_json_decode_failed",
                    client_id=client_id,
                    error=str(e)
                )
                await websocket.send_json({
                    "type": "error",
                    "message": "Invalid JSON format"
                })
                continue

            message_type = message.get("type", "unknown") if isinstance(message, dict) else "unknown"
            if message_type == "ping":
                await websocket.send_json({
                    "type": "pong",
                    "timestamp": get_utc_now().isoformat(),
                })
            else:
                logger.debug(
                    "websocket_unknown_message_type",
                    client_id=client_id,
                    message_type=message_type
                )

    except WebSocketDisconnect:
        logger.info("websocket_client_disconnected", client_id=client_id)

    finally:
        # Always remove client from connected set
        _connected_clients.discard(websocket)
        logger.info(
            "websocket_client_cleanup",
            client_id=client_id,
            remaining_clients=len(_connected_clients)
        )


def get_connected_client_count() -> int:
    """
    PURPOSE: Get current count of connected WebSocket clients.

    Returns:
        int: Number of connected clients
    """
    return len(_connected_clients)
