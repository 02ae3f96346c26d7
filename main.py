"""
main.py

Flask entry point for the media relay: uploads go to object storage,
short links under /r/<id> redirect to time-limited signed URLs.

Dependencies:
  - Python packages: Flask, flask-cors, redis, celery, google-cloud-storage
  - Infrastructure: Redis server (link registry and Celery broker),
    a GCS bucket unless STORAGE_BACKEND=local

Run the janitor separately with Celery beat and a worker (see celery_app.py).
"""

import logging
import sys

from app_factory import create_app
from mediarelay.config.settings import ConfigurationError

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    try:
        app = create_app()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    config = app.relay_config
    app.run(host=config.host, port=config.port, debug=config.debug)
