"""GCS helpers for render assets (certification watermark)."""

import os
from datetime import datetime, timedelta, timezone

DEFAULT_BUCKET = "captioncast-media"
WATERMARK_BLOB = "assets/certified-watermark.png"
ASSET_URL_EXPIRATION_SECONDS = 24 * 3600  # renders are fetched within a day


def get_bucket_name() -> str:
    """Bucket name from env or default."""
    return os.environ.get("GCS_BUCKET", "").strip() or DEFAULT_BUCKET


def public_url(blob_name: str, *, bucket_name: str | None = None) -> str:
    """Unsigned URL for an object in a publicly readable bucket."""
    bucket_name = bucket_name or get_bucket_name()
    return f"https://storage.googleapis.com/{bucket_name}/{blob_name}"


def generate_signed_url(
    blob_name: str,
    *,
    bucket_name: str | None = None,
    expiration_seconds: int = ASSET_URL_EXPIRATION_SECONDS,
    method: str = "GET",
) -> str:
    """
    Generate a V4 signed URL so the renderer can fetch a private asset.

    Uses default credentials (GOOGLE_APPLICATION_CREDENTIALS or ADC).

    :param blob_name: Object path in bucket, e.g. "assets/certified-watermark.png"
    :param bucket_name: GCS bucket; default from GCS_BUCKET env or "captioncast-media"
    :param expiration_seconds: URL validity in seconds
    :param method: HTTP method for the signed URL
    :return: Signed URL string
    """
    from google.cloud import storage

    bucket_name = bucket_name or get_bucket_name()
    client = storage.Client()
    bucket = client.bucket(bucket_name)
    blob = bucket.blob(blob_name)
    expiration = datetime.now(timezone.utc) + timedelta(seconds=expiration_seconds)
    return blob.generate_signed_url(
        expiration=expiration,
        method=method,
        version="v4",
    )


def resolve_watermark_url(*, override: str | None = None, signed: bool = False) -> str:
    """Explicit URL wins; otherwise the watermark object in the asset bucket."""
    if override:
        return override
    if signed:
        return generate_signed_url(WATERMARK_BLOB)
    return public_url(WATERMARK_BLOB)
