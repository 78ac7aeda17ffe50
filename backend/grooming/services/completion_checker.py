"""
Visit completion checker.

Periodically counts visits for confirmed bookings whose service time has
ended (date + time + duration <= now): customer visit_count, last_visit
and first_visit_date are updated once per booking.

Runs as an asyncio task in backend lifespan.
Uses synchronous DB (via asyncio.to_thread).
"""

import asyncio
import logging
from datetime import datetime

from ..config import settings
from ..database import SessionLocal
from .customers import process_completed_bookings

logger = logging.getLogger(__name__)


async def completion_checker_loop() -> None:
    """Periodic loop processing finished bookings of every shop."""
    logger.info("completion_checker_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(_check_completed_bookings)
            except asyncio.CancelledError:
                logger.info("completion_checker_loop cancelled")
                raise
            except Exception:
                logger.exception("completion_checker_loop error")

            await asyncio.sleep(settings.completion_check_interval)
    except asyncio.CancelledError:
        pass


def _check_completed_bookings() -> int:
    """Process finished bookings across all shops (synchronous)."""
    db = SessionLocal()
    try:
        return process_completed_bookings(db, now=datetime.now())
    finally:
        db.close()
