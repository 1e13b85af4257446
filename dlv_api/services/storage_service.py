import logging
import uuid
from functools import lru_cache
from pathlib import PurePosixPath

import boto3
from botocore.exceptions import ClientError

from dlv_api.config import settings

logger = logging.getLogger(__name__)


class StoredObjectNotFound(Exception):
    pass


@lru_cache(maxsize=1)
def get_s3_client():
    """Client for Supabase Storage through its S3-compatible endpoint."""
    session = boto3.session.Session()
    return session.client(
        "s3",
        region_name=settings.SUPABASE_S3_REGION,
        endpoint_url=f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1/s3",
        aws_access_key_id=settings.SUPABASE_S3_ACCESS_KEY_ID,
        aws_secret_access_key=settings.SUPABASE_S3_SECRET_ACCESS_KEY,
    )


def _join_path(*segments: str) -> str:
    cleaned = [segment.strip("/") for segment in segments if segment and segment.strip("/")]
    return "/".join(cleaned)


def public_url(key: str) -> str:
    return f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1/object/public/{settings.SUPABASE_STORAGE_BUCKET}/{key}"


def build_key(folder: str, original_name: str | None) -> str:
    extension = PurePosixPath(original_name or "").suffix.lower()
    return _join_path(folder, f"{uuid.uuid4()}{extension}")


def upload_file(data: bytes, folder: str, original_name: str | None, content_type: str | None = None) -> dict:
    key = build_key(folder, original_name)
    extra_args = {"CacheControl": "max-age=3600"}
    if content_type:
        extra_args["ContentType"] = content_type

    get_s3_client().put_object(
        Bucket=settings.SUPABASE_STORAGE_BUCKET,
        Key=key,
        Body=data,
        **extra_args,
    )
    logger.info("Stored %s bytes at %s/%s", len(data), settings.SUPABASE_STORAGE_BUCKET, key)
    return {
        "path": key,
        "url": public_url(key),
        "fileName": original_name,
        "size": len(data),
        "mimeType": content_type,
    }


def download_file(key: str) -> tuple[bytes, str]:
    try:
        response = get_s3_client().get_object(Bucket=settings.SUPABASE_STORAGE_BUCKET, Key=key)
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code")
        if code in {"NoSuchKey", "404", "NotFound"}:
            raise StoredObjectNotFound(key) from exc
        raise
    content_type = response.get("ContentType") or "application/octet-stream"
    return response["Body"].read(), content_type


def delete_file(key: str) -> None:
    get_s3_client().delete_object(Bucket=settings.SUPABASE_STORAGE_BUCKET, Key=key)
    logger.info("Deleted %s/%s", settings.SUPABASE_STORAGE_BUCKET, key)
