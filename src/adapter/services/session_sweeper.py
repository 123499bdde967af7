"""
Expired session sweeper

Timer-driven background loop that deletes sessions past their expiry.
"""

import asyncio
import logging

from src.app.use_cases.auth import SweepExpiredSessionsUseCase

logger = logging.getLogger(__name__)


async def run_session_sweeper(resources, interval_seconds: float) -> None:
    """Sweep, then sleep; until cancelled at shutdown."""
    try:
        while True:
            try:
                async with resources.session_factory() as session:
                    use_case = SweepExpiredSessionsUseCase(
                        resources.unit_of_work(session), resources.codec
                    )
                    await use_case.execute()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Expired session sweep failed")
            await asyncio.sleep(interval_seconds)
    except asyncio.CancelledError:
        logger.info("Expired session sweeper stopped")
