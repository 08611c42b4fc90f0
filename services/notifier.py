import logging

from flask import request

from extensions import socketio

logger = logging.getLogger(__name__)

DATA_CHANGED = "data_changed"


def notify_data_changed():
    """Broadcast a payload-less ``data_changed`` event to every connected client.

    Fire-and-forget: there is no acknowledgment and no replay for clients
    that connect later. Call only after the change has been committed.
    """
    try:
        socketio.emit(DATA_CHANGED)
    except Exception:
        logger.warning("Failed to broadcast %s", DATA_CHANGED, exc_info=True)


@socketio.on("connect")
def handle_connect():
    logger.info("Client connected: %s", request.sid)


@socketio.on("disconnect")
def handle_disconnect():
    logger.info("Client disconnected: %s", request.sid)
