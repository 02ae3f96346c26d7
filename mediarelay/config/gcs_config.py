"""
Google Cloud Storage Configuration

Builds the storage client used by the GCS blob store.
"""

import logging
import os
from typing import Optional

from google.cloud import storage
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


def create_gcs_client(credentials_path: Optional[str] = None) -> storage.Client:
    """
    Create a Google Cloud Storage client.

    A service account key file is used when one is given and exists;
    otherwise the client falls back to application default credentials.
    Signing v4 URLs needs credentials that carry a private key (or
    IAM signBlob permission on GCE).

    Args:
        credentials_path: Path to a service account JSON key file

    Returns:
        Configured storage client
    """
    if credentials_path and os.path.exists(credentials_path):
        credentials = service_account.Credentials.from_service_account_file(credentials_path)
        logger.info(f"GCS client initialized with service account: {credentials_path}")
        return storage.Client(credentials=credentials, project=credentials.project_id)

    if credentials_path:
        logger.warning(f"Credentials file not found: {credentials_path}, using default credentials")

    logger.info("GCS client initialized with default credentials")
    return storage.Client()


def gcs_health_check(client: storage.Client, bucket_name: str) -> bool:
    """
    Check that the bucket is reachable.

    Returns:
        True if the bucket exists and is visible to the client
    """
    try:
        return client.bucket(bucket_name).exists()
    except Exception as e:
        logger.warning(f"GCS health check failed: {e}")
        return False
