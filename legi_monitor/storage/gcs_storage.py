"""
Cloud Storage mirror for the probe history file.
Used when running on GCP Cloud Run (ephemeral containers), where the local
history file does not survive a restart.
Disabled when GCS_BUCKET_NAME is unset or google-cloud-storage is missing.
"""
import os
import logging

from legi_monitor.config import settings
from legi_monitor.errors import StorageError

logger = logging.getLogger(__name__)

# google-cloud-storage ships as the optional "gcs" extra
try:
    from google.cloud import storage
    GCS_AVAILABLE = True
except ImportError:
    GCS_AVAILABLE = False

BLOB_PREFIX = "history/"


def _get_gcs_client():
    """Get GCS client (uses default credentials on Cloud Run)."""
    if not GCS_AVAILABLE:
        return None
    try:
        return storage.Client()
    except Exception as e:
        logger.warning(f"Could not create GCS client: {e}")
        return None


def is_gcs_enabled(bucket_name=None):
    """Check if GCS storage is configured and available."""
    bucket_name = settings.GCS_BUCKET_NAME if bucket_name is None else bucket_name
    return bool(bucket_name) and GCS_AVAILABLE


def _blob_name(local_path):
    return f"{BLOB_PREFIX}{os.path.basename(local_path)}"


def download_history(local_path, bucket_name=None, client=None):
    """
    Download the history file from GCS to *local_path*.
    Returns True if the remote copy was downloaded, False if there is none
    (or GCS is disabled).

    Raises:
        StorageError: if the remote copy could not be checked or fetched.
        Uploading after such a failure would overwrite the remote log.
    """
    bucket_name = settings.GCS_BUCKET_NAME if bucket_name is None else bucket_name
    if client is None:
        if not is_gcs_enabled(bucket_name):
            return False
        client = _get_gcs_client()
        if not client:
            raise StorageError("GCS client unavailable")

    blob_name = _blob_name(local_path)
    try:
        blob = client.bucket(bucket_name).blob(blob_name)
        if not blob.exists():
            logger.info(f"No existing history in GCS: {blob_name}")
            return False
        os.makedirs(os.path.dirname(local_path) or '.', exist_ok=True)
        blob.download_to_filename(local_path)
    except Exception as e:
        logger.warning(f"Error downloading from GCS: {e}")
        raise StorageError(f"Could not download {blob_name}: {e}") from e

    logger.info(f"Downloaded history from GCS: {blob_name}")
    return True


def upload_history(local_path, bucket_name=None, client=None):
    """
    Upload the history file to GCS. Failures are logged; the local file
    stays authoritative.
    Returns True on success.
    """
    bucket_name = settings.GCS_BUCKET_NAME if bucket_name is None else bucket_name
    if client is None:
        if not is_gcs_enabled(bucket_name):
            return False
        client = _get_gcs_client()
        if not client:
            return False

    blob_name = _blob_name(local_path)
    try:
        blob = client.bucket(bucket_name).blob(blob_name)
        blob.upload_from_filename(local_path)
        logger.info(f"Uploaded history to GCS: {blob_name}")
        return True

    except Exception as e:
        logger.warning(f"Error uploading to GCS: {e}")
        return False
