"""
Media host client (Google Cloud Storage) and duration probing.

Contract:
- upload_on_storage(local_path) -> {"public_id", "url"} or None on failure
- delete_video_asset(public_id) / delete_image_asset(public_id) -> bool
- get_video_duration(url) -> seconds

Upload failures are reported as None, never raised, so views decide which
400 to answer with.
"""
from __future__ import annotations

import json
import logging
import mimetypes
import os
import subprocess
import uuid
from functools import lru_cache

from django.conf import settings
from google.cloud import storage

logger = logging.getLogger(__name__)

VIDEO_FOLDER = 'videos'
IMAGE_FOLDER = 'images'


@lru_cache(maxsize=1)
def get_storage_client() -> storage.Client:
    # Credentials come from GOOGLE_APPLICATION_CREDENTIALS / ADC.
    return storage.Client(project=settings.GCS_PROJECT or None)


def _bucket():
    if not settings.GCS_BUCKET:
        raise RuntimeError("GCS_BUCKET is not set.")
    return get_storage_client().bucket(settings.GCS_BUCKET)


def _folder_for(local_path: str) -> str:
    content_type, _ = mimetypes.guess_type(local_path)
    if content_type and content_type.startswith('image/'):
        return IMAGE_FOLDER
    return VIDEO_FOLDER


def public_url(public_id: str, default: str) -> str:
    base = (settings.MEDIA_PUBLIC_BASE_URL or '').rstrip('/')
    return f"{base}/{public_id}" if base else default


def upload_on_storage(local_path: str | None) -> dict | None:
    """
    Upload a local file and return its stable id and retrieval URL.
    """
    if not local_path:
        return None

    _, ext = os.path.splitext(local_path)
    public_id = f"{_folder_for(local_path)}/{uuid.uuid4().hex}{ext.lower()}"
    content_type, _ = mimetypes.guess_type(local_path)

    try:
        blob = _bucket().blob(public_id)
        logger.info("Uploading %s to %s", local_path, public_id)
        blob.upload_from_filename(local_path, content_type=content_type)
    except Exception as exc:
        logger.error("Upload failed for %s: %s", local_path, exc)
        return None

    return {
        'public_id': public_id,
        'url': public_url(public_id, blob.public_url),
    }


def _delete_asset(public_id: str | None, kind: str) -> bool:
    if not public_id:
        logger.warning("Skipping %s delete: empty public id", kind)
        return False
    try:
        _bucket().blob(public_id).delete()
    except Exception as exc:
        logger.error("Failed to delete %s %s: %s", kind, public_id, exc)
        return False
    logger.info("Deleted %s %s", kind, public_id)
    return True


def delete_video_asset(public_id: str | None) -> bool:
    return _delete_asset(public_id, 'video')


def delete_image_asset(public_id: str | None) -> bool:
    return _delete_asset(public_id, 'image')


def get_video_duration(url: str) -> float:
    """
    Playback duration in seconds, read by ffprobe straight from the URL.
    """
    proc = subprocess.run(
        [
            'ffprobe', '-v', 'error',
            '-show_entries', 'format=duration',
            '-of', 'json', url,
        ],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        timeout=settings.FFPROBE_TIMEOUT,
    )
    if proc.returncode != 0:
        raise RuntimeError(f"ffprobe failed for {url}: {proc.stderr[:500]}")
    return parse_duration(proc.stdout)


def parse_duration(ffprobe_json: str) -> float:
    data = json.loads(ffprobe_json or '{}')
    raw = data.get('format', {}).get('duration', '0')
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0
