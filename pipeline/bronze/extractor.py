# pipeline/bronze/extractor.py
"""Download CSV exports from the MinIO bucket into the local data folder."""

import os
import logging
from typing import List, Optional

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError

from pipeline.common.config import Settings, get_settings
from pipeline.common.exceptions import ExtractionError

logger = logging.getLogger(__name__)


def create_minio_client(settings: Optional[Settings] = None) -> Minio:
    minio = (settings or get_settings()).minio
    return Minio(
        minio.endpoint,
        access_key=minio.access_key,
        secret_key=minio.secret_key,
        secure=minio.secure,
    )


def extract_from_minio(
    bucket_name: Optional[str] = None,
    download_dir: Optional[str] = None,
    prefix: Optional[str] = None,
    client: Optional[Minio] = None,
    settings: Optional[Settings] = None
) -> List[str]:
    """
    Download every CSV object under ``prefix`` into ``download_dir``.

    Object names are kept as paths relative to ``prefix``: with prefix
    ``attendance/`` the object ``attendance/2024/users.csv`` lands in
    ``<download_dir>/2024/users.csv``.

    Returns:
        Local paths of the downloaded files

    Raises:
        ExtractionError: bucket missing or the object store unreachable
    """
    settings = settings or get_settings()
    bucket_name = bucket_name or settings.minio.bucket_name
    download_dir = download_dir or settings.data_dir
    client = client or create_minio_client(settings)

    logger.info(f"Extracting CSV files from bucket '{bucket_name}' (prefix: {prefix or '-'})")
    os.makedirs(download_dir, exist_ok=True)

    downloaded_files = []
    try:
        if not client.bucket_exists(bucket_name):
            raise ExtractionError(f"Bucket '{bucket_name}' does not exist", source=bucket_name)

        for obj in client.list_objects(bucket_name, prefix=prefix, recursive=True):
            if obj.is_dir or not obj.object_name.lower().endswith(".csv"):
                continue

            relative = obj.object_name[len(prefix):] if prefix else obj.object_name
            local_path = os.path.join(download_dir, relative.lstrip("/"))
            os.makedirs(os.path.dirname(local_path), exist_ok=True)

            client.fget_object(bucket_name, obj.object_name, local_path)
            downloaded_files.append(local_path)
            logger.info(f"  Downloaded: {local_path}")
    except (S3Error, HTTPError, OSError) as e:
        raise ExtractionError(
            f"MinIO extraction failed: {e}",
            source=bucket_name,
            original_error=e,
        ) from e

    logger.info(f"Extracted {len(downloaded_files)} files to {download_dir}")
    return downloaded_files
