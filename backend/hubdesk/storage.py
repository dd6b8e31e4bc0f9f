"""Blob storage for complaint attachments.

A private S3 (or S3-compatible) bucket when ``ATTACHMENTS_BUCKET`` is set,
otherwise a folder under ``UPLOAD_FOLDER``. Object keys are namespaced by
complaint id so that access checks can work on the key prefix alone.
"""
from __future__ import annotations

import logging
import os
import time
import unicodedata
import uuid
from threading import Lock
from urllib.parse import quote

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from werkzeug.http import dump_options_header

from .errors import StorageError

log = logging.getLogger(__name__)

_last_stamp = 0
_stamp_lock = Lock()


def _next_stamp() -> int:
    """Microsecond upload timestamp, strictly increasing within the process."""
    global _last_stamp
    with _stamp_lock:
        _last_stamp = max(time.time_ns() // 1_000, _last_stamp + 1)
        return _last_stamp


def object_key(complaint_id: uuid.UUID, filename: str | None) -> str:
    """Build ``<complaint_id>/<upload_timestamp>.<ext>`` for a new upload."""
    ext = os.path.splitext(filename or "")[1].lower().lstrip(".")[:10]
    return f"{complaint_id}/{_next_stamp()}.{ext or 'bin'}"


def _s3_client():
    return boto3.client(
        "s3",
        region_name=current_app.config.get("S3_REGION") or None,
        aws_access_key_id=current_app.config.get("S3_ACCESS_KEY_ID") or None,
        aws_secret_access_key=current_app.config.get("S3_SECRET_ACCESS_KEY") or None,
        endpoint_url=current_app.config.get("S3_ENDPOINT_URL") or None,
        config=BotoConfig(s3={"addressing_style": "virtual"}, signature_version="s3v4"),
    )


def _local_path(key: str) -> str:
    base = os.path.abspath(current_app.config["UPLOAD_FOLDER"])
    path = os.path.abspath(os.path.join(base, key))
    if not path.startswith(base + os.sep):
        raise StorageError("Invalid object key")
    return path


def put_object(key: str, data: bytes, content_type: str) -> None:
    bucket = current_app.config.get("ATTACHMENTS_BUCKET")
    try:
        if bucket:
            # No ACL: the bucket stays private, reads go through presigned URLs
            _s3_client().put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
        else:
            path = _local_path(key)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
    except (BotoCoreError, ClientError, OSError) as exc:
        log.error("Blob upload failed for %s: %s", key, exc)
        raise StorageError("Failed to store attachment") from exc


def delete_object(key: str) -> None:
    """Remove a blob whose metadata row was never written. Failures are logged with the key for cleanup."""
    bucket = current_app.config.get("ATTACHMENTS_BUCKET")
    try:
        if bucket:
            _s3_client().delete_object(Bucket=bucket, Key=key)
        else:
            path = _local_path(key)
            if os.path.isfile(path):
                os.remove(path)
    except (BotoCoreError, ClientError, OSError, StorageError) as exc:
        log.error("Orphaned blob %s could not be removed: %s", key, exc)


def content_disposition(filename: str) -> str:
    """``attachment`` header value; non-ASCII names get an RFC 5987 ``filename*``."""
    try:
        filename.encode("ascii")
    except UnicodeEncodeError:
        simple = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
        options = {"filename": simple or "download", "filename*": f"UTF-8''{quote(filename, safe='')}"}
    else:
        options = {"filename": filename}
    return dump_options_header("attachment", options)


def presigned_url(key: str, filename: str) -> str | None:
    """Short-lived download URL for S3 objects; None for the local store."""
    bucket = current_app.config.get("ATTACHMENTS_BUCKET")
    if not bucket:
        return None
    try:
        return _s3_client().generate_presigned_url(
            "get_object",
            Params={
                "Bucket": bucket,
                "Key": key,
                "ResponseContentDisposition": content_disposition(filename),
            },
            ExpiresIn=int(current_app.config.get("S3_PRESIGN_TTL") or 300),
        )
    except (BotoCoreError, ClientError) as exc:
        log.error("Presign failed for %s: %s", key, exc)
        raise StorageError("Attachment temporarily unavailable") from exc


def local_file(key: str) -> str:
    path = _local_path(key)
    if not os.path.isfile(path):
        raise StorageError("Attachment content missing")
    return path
