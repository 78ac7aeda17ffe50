"""
backend/grooming/services/events.py

Event emitter: pushes booking events to a Redis queue for notification
consumers (SMS / messenger senders run outside this service).

Queue: events:p2p, one message per booking event.
No-op when Redis is not configured.
"""

import json
import time
import logging

from redis import RedisError

from .. import redis_client as redis_module

logger = logging.getLogger(__name__)

EVENTS_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> bool:
    """
    Emit a p2p event (instant delivery).

    Returns True when the event was queued.
    """
    client = redis_module.redis_client
    if client is None:
        logger.debug(f"Event {event_type} not emitted: Redis is not configured")
        return False

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        client.rpush(EVENTS_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {EVENTS_QUEUE}")
        return True
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False
