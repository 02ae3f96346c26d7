"""
Celery Configuration

Configures Celery with Flask integration, Redis broker, and the janitor
schedule.
"""

import os

from celery import Celery
from kombu import Queue

SWEEP_TASK_NAME = "mediarelay.tasks.sweep_expired_links"


class CeleryConfig:
    """Celery configuration settings."""

    # Broker settings
    broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")

    # Task settings
    task_serializer = "json"
    accept_content = ["json"]
    result_serializer = "json"
    timezone = "UTC"
    enable_utc = True

    # Worker settings
    worker_prefetch_multiplier = 1
    task_acks_late = True
    worker_max_tasks_per_child = 200

    # Task routing
    task_routes = {
        SWEEP_TASK_NAME: {"queue": "janitor_queue"},
    }

    # Queue definitions
    task_default_queue = "default"
    task_queues = (
        Queue("default", routing_key="default"),
        Queue("janitor_queue", routing_key="janitor"),
    )

    # A sweep deletes at most one batch; a stuck backend must not pin a worker
    task_soft_time_limit = int(os.getenv("CELERY_TASK_SOFT_TIME_LIMIT", 600))
    task_time_limit = int(os.getenv("CELERY_TASK_TIME_LIMIT", 660))

    # Result backend settings
    result_expires = 3600


def make_celery(app, janitor_interval_seconds: int = 3600):
    """
    Create Celery instance with Flask app context.

    Args:
        app: Flask application instance
        janitor_interval_seconds: Period of the expired-link sweep

    Returns:
        Configured Celery instance
    """
    celery = Celery(
        app.import_name,
        backend=CeleryConfig.result_backend,
        broker=CeleryConfig.broker_url,
    )

    celery.config_from_object(CeleryConfig)
    celery.conf.beat_schedule = {
        "sweep-expired-links": {
            "task": SWEEP_TASK_NAME,
            "schedule": float(janitor_interval_seconds),
        },
    }

    # Ensure tasks run within Flask app context
    class ContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""

        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    celery.flask_app = app
    return celery
