"""Private document storage on Cloudflare R2 (ID card images for contracts)"""

import logging
import uuid
from typing import Optional

import boto3
from botocore.config import Config
from fastapi import HTTPException

from ..config import R2_ACCESS_KEY_ID, R2_ACCOUNT_ID, R2_BUCKET_NAME, R2_SECRET_ACCESS_KEY

logger = logging.getLogger(__name__)

# Presigned URL expiration time (1 hour)
PRESIGNED_URL_EXPIRATION = 3600

MAX_DOCUMENT_SIZE = 10 * 1024 * 1024  # 10MB

ALLOWED_DOCUMENT_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/heic": "heic",
    "image/heif": "heif",
    "application/pdf": "pdf",
}

DANGEROUS_FILENAME_CHARS = ["..", "/", "\\", "<", ">", ":", '"', "|", "?", "*"]


def get_r2_client():
    """Create and return an R2 client."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def validate_document(content_type: Optional[str], filename: Optional[str], size: int) -> str:
    """Check type, name and size of an upload; returns the file extension to store"""
    if content_type not in ALLOWED_DOCUMENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Ungültiger Dateityp. Erlaubt sind PNG, JPEG, WebP, HEIC und PDF.",
        )

    if filename:
        for char in DANGEROUS_FILENAME_CHARS:
            if char in filename:
                logger.warning(f"❌ Dangerous character '{char}' detected in filename: '{filename}'")
                raise HTTPException(status_code=400, detail="Ungültiger Dateiname")
        if len(filename) > 255:
            raise HTTPException(status_code=400, detail="Dateiname zu lang")

    if size == 0:
        raise HTTPException(status_code=400, detail="Die Datei ist leer")
    if size > MAX_DOCUMENT_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Die Datei ist größer als 10MB ({size / (1024 * 1024):.2f}MB).",
        )

    return ALLOWED_DOCUMENT_TYPES[content_type]


def upload_document(prefix: str, contents: bytes, content_type: str, filename: Optional[str] = None) -> str:
    """
    Store a private document under prefix/ and return its object key

    The key, never a URL, is persisted; readers get short-lived presigned URLs.
    """
    ext = validate_document(content_type, filename, len(contents))
    key = f"{prefix}/{uuid.uuid4()}.{ext}"

    try:
        r2 = get_r2_client()
        r2.put_object(
            Bucket=R2_BUCKET_NAME,
            Key=key,
            Body=contents,
            ContentType=content_type,
        )
    except Exception as e:
        logger.error(f"❌ Upload failed: {str(e)}")
        raise HTTPException(status_code=502, detail="Upload fehlgeschlagen") from e

    logger.info(f"✅ Document stored at {key}")
    return key


def generate_presigned_url(key: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> Optional[str]:
    """Generate a presigned URL for a private object; None when the key is empty or signing fails"""
    if not key:
        return None
    try:
        r2 = get_r2_client()
        return r2.generate_presigned_url(
            "get_object",
            Params={"Bucket": R2_BUCKET_NAME, "Key": key, "ResponseContentDisposition": "inline"},
            ExpiresIn=expiration,
        )
    except Exception as e:
        logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
        return None
