"""
Janitor Task

Celery beat task that reclaims storage for expired links.
Thin wrapper that delegates to the LinkJanitor domain service.
"""

import logging

from celery_app import celery_app
from mediarelay.config.celery_config import SWEEP_TASK_NAME

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name=SWEEP_TASK_NAME)
def sweep_expired_links(self, batch_limit=None):
    """
    Delete one batch of expired links and their stored objects.

    Runs every JANITOR_INTERVAL_SECONDS (Celery beat). Resolution rejects
    expired links on its own, so a missed or partial run only delays
    reclaiming space.

    Args:
        batch_limit: Override for JANITOR_BATCH_LIMIT

    Returns:
        dict: Sweep statistics with counts and errors
    """
    logger.info(f"Starting expired link sweep (task {self.request.id})")

    try:
        from celery_app import flask_app
        from mediarelay.domain.links.services import LinkJanitor

        janitor = flask_app.container.resolve(LinkJanitor)
        report = janitor.sweep(batch_limit=batch_limit)

        if report.errors:
            logger.warning(f"Sweep errors: {report.errors}")

        return report.to_dict()

    except Exception as e:
        error_msg = f"Sweep task failed: {e}"
        logger.error(error_msg, exc_info=True)
        return {
            "examined": 0,
            "blobs_removed": 0,
            "entries_removed": 0,
            "errors": [error_msg],
        }
