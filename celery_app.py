"""
Celery Application Instance

Creates the Celery app instance for use by workers and the beat scheduler.
Uses the app factory so tasks resolve the same services as the web process.

    celery -A celery_app.celery_app worker -Q default,janitor_queue
    celery -A celery_app.celery_app beat
"""

from app_factory import create_app

flask_app = create_app()

celery_app = flask_app.celery

# Task modules are imported by name when the worker starts, after
# celery_app exists for their decorators
celery_app.conf.imports = (
    "mediarelay.tasks.janitor_task",
)
