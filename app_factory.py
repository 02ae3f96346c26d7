"""
Application Factory

Creates and configures the Flask application with all dependencies.
Backends can be injected so tests run without Redis or Google Cloud.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import MethodNotAllowed, NotFound, RequestEntityTooLarge

import mediarelay
from mediarelay.api import files_bp, links_bp, system_bp, upload_bp
from mediarelay.application.dependency_container import DependencyContainer
from mediarelay.application.upload_service import UploadService
from mediarelay.config.celery_config import make_celery
from mediarelay.config.logging_config import configure_logging
from mediarelay.config.redis_config import init_redis
from mediarelay.config.settings import RelayConfig
from mediarelay.domain.blob_storage.blob_store import BlobStore
from mediarelay.domain.errors import ErrorCategory, create_error_response
from mediarelay.domain.links import IdentifierCodec, LinkJanitor, LinkRegistry, LinkResolver
from mediarelay.infrastructure.local_blob_store import LocalBlobStore
from mediarelay.infrastructure.storage_factory import StorageFactory

logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(mediarelay.__file__), "static")

# Multipart framing on top of the file itself; the exact size limit is
# enforced by UploadService
MULTIPART_OVERHEAD_BYTES = 1024 * 1024


def create_app(
    config: Optional[RelayConfig] = None,
    blob_store: Optional[BlobStore] = None,
    link_registry: Optional[LinkRegistry] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, read from the environment if None
        blob_store: Blob store to use instead of the configured backend
        link_registry: Link registry to use instead of the configured backend

    Returns:
        Configured Flask application

    Raises:
        ConfigurationError: If required settings are missing or invalid
    """
    if config is None:
        config = RelayConfig()
    config.validate()

    configure_logging(config.log_level)

    app = Flask(__name__, static_folder=STATIC_DIR, static_url_path="")
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
    app.relay_config = config

    CORS(
        app,
        resources={
            r"/*": {
                "origins": config.cors_origins,
                "methods": ["GET", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type"],
                "max_age": 3600,
            }
        },
    )

    _initialize_infrastructure(app, config, link_registry)
    _initialize_services(app, config, blob_store, link_registry)
    _register_blueprints(app)
    _register_error_handlers(app)

    return app


def _initialize_infrastructure(app: Flask, config: RelayConfig,
                               link_registry: Optional[LinkRegistry]) -> None:
    """
    Initialize Redis (when the Redis registry is in use) and Celery.

    Redis is only configured here; the first command opens the connection.
    """
    if link_registry is None and config.registry_backend == "redis":
        init_redis()

    app.celery = make_celery(app, janitor_interval_seconds=config.janitor_interval_seconds)
    logger.info("Celery initialized successfully")


def _initialize_services(app: Flask, config: RelayConfig,
                         blob_store: Optional[BlobStore],
                         link_registry: Optional[LinkRegistry]) -> None:
    """
    Build every service once and register it in the DependencyContainer.

    Routes and tasks resolve services with
    ``current_app.container.resolve(ServiceType)``.
    """
    container = DependencyContainer()

    if blob_store is None:
        blob_store = StorageFactory.create_blob_store(config)
    if link_registry is None:
        link_registry = StorageFactory.create_link_registry(config)

    codec = IdentifierCodec(config.link_secret)

    container.register_singleton(BlobStore, blob_store)
    container.register_singleton(LinkRegistry, link_registry)
    container.register_singleton(IdentifierCodec, codec)

    container.register_singleton(
        LinkResolver,
        LinkResolver(codec, link_registry, blob_store),
    )
    container.register_singleton(
        LinkJanitor,
        LinkJanitor(link_registry, blob_store, batch_limit=config.janitor_batch_limit,
                    pending_bucket=config.storage_bucket),
    )
    container.register_singleton(
        UploadService,
        UploadService(
            blob_store,
            link_registry,
            codec,
            bucket=config.storage_bucket,
            link_ttl_seconds=config.link_ttl_seconds,
            max_upload_bytes=config.max_upload_bytes,
        ),
    )

    app.container = container
    logger.info("Application services initialized")


def _register_blueprints(app: Flask) -> None:
    app.register_blueprint(upload_bp)
    app.register_blueprint(links_bp)
    app.register_blueprint(system_bp)

    if isinstance(app.container.resolve(BlobStore), LocalBlobStore):
        app.register_blueprint(files_bp)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(RequestEntityTooLarge)
    def file_too_large(error):
        body, status_code = create_error_response(ErrorCategory.FILE_TOO_LARGE)
        return jsonify(body), status_code

    # A method without a route on any path is unmatched too; the catch-all
    # static rule turns those into 405 rather than 404
    @app.errorhandler(NotFound)
    @app.errorhandler(MethodNotAllowed)
    def not_found(error):
        return send_from_directory(STATIC_DIR, "expired.html"), 404
