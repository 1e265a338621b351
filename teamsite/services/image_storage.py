"""Player image storage: local filesystem or an S3-compatible bucket.

Files live under ``images/{player_id}/{filename}``. The returned path (or
public URL, for S3) is what the roster stores as the player's image.
"""

import logging
import os
import shutil
from pathlib import PurePath
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from teamsite.config import Settings
from teamsite.core.validation import is_safe_player_id
from teamsite.utils.slug import generate_slug

logger = logging.getLogger(__name__)

LOCAL_URL_PREFIX = "/uploads"


def player_image_prefix(player_id: str) -> str:
    if not is_safe_player_id(player_id):
        raise ValueError(f"Unsafe player id for image storage: {player_id!r}")
    return f"images/{player_id}/"


def safe_filename(filename: str) -> str:
    """Strip directories and normalize the stem; keeps the extension."""
    name = PurePath(filename.replace("\\", "/")).name
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    clean_stem = generate_slug(stem) or "image"
    return f"{clean_stem}.{ext.lower()}" if ext else clean_stem


class ImageStorage:
    """Thin wrapper around boto3 or the local uploads directory.

    Supports AWS S3 and S3-compatible services (Tigris, R2, MinIO) and falls
    back to local filesystem storage when ``image_storage_local`` is True.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.bucket = settings.s3_bucket_name
        self.public_url_base = settings.s3_public_url_base
        self.use_local = settings.image_storage_local
        self.local_root = settings.uploads_dir
        self._client: Optional[Any] = None

    @property
    def client(self) -> Any:
        """Lazily initialize the S3 client."""
        if self._client is None:
            client_kwargs: dict[str, str] = {
                "region_name": self.settings.s3_region,
            }
            if self.settings.s3_access_key_id and self.settings.s3_secret_access_key:
                client_kwargs["aws_access_key_id"] = self.settings.s3_access_key_id
                client_kwargs["aws_secret_access_key"] = self.settings.s3_secret_access_key
            if self.settings.s3_endpoint_url:
                client_kwargs["endpoint_url"] = self.settings.s3_endpoint_url

            self._client = boto3.client("s3", **client_kwargs)
        return self._client

    def save(
        self,
        player_id: str,
        filename: str,
        data: bytes,
        content_type: str = "image/png",
    ) -> str:
        """Store an image for a player and return the path to reference it by."""
        key = f"{player_image_prefix(player_id)}{safe_filename(filename)}"
        if self.use_local:
            return self._save_local(key, data)

        if not self.bucket:
            raise ValueError("S3_BUCKET_NAME not configured")

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
            logger.info(f"Uploaded {key} to S3 bucket {self.bucket}")
            return self.get_public_url(key)
        except ClientError as e:
            logger.error(f"Failed to upload {key} to S3: {e}")
            raise

    def delete_player_images(self, player_id: str) -> int:
        """Remove every stored image for a player; returns how many were removed."""
        prefix = player_image_prefix(player_id)
        if self.use_local:
            return self._delete_local_prefix(prefix)

        if not self.bucket:
            raise ValueError("S3_BUCKET_NAME not configured")

        response = self.client.list_objects_v2(Bucket=self.bucket, Prefix=prefix)
        keys = [{"Key": item["Key"]} for item in response.get("Contents", [])]
        if not keys:
            return 0
        try:
            self.client.delete_objects(Bucket=self.bucket, Delete={"Objects": keys})
        except ClientError as e:
            logger.error(f"Failed to delete {prefix}* from S3: {e}")
            raise
        logger.info(f"Deleted {len(keys)} images under {prefix} from S3")
        return len(keys)

    def get_public_url(self, key: str) -> str:
        """Return the URL a stored key is served from."""
        if self.use_local:
            return f"{LOCAL_URL_PREFIX}/{key}"

        if self.public_url_base:
            base = self.public_url_base.rstrip("/")
            return f"{base}/{key}"

        if self.settings.s3_endpoint_url:
            endpoint = self.settings.s3_endpoint_url.rstrip("/")
            return f"{endpoint}/{self.bucket}/{key}"

        return f"https://{self.bucket}.s3.{self.settings.s3_region}.amazonaws.com/{key}"

    def _local_path(self, key: str) -> str:
        """Resolve ``key`` under the uploads root; refuses anything outside it."""
        root = os.path.realpath(self.local_root)
        local_path = os.path.realpath(os.path.join(root, key))
        if os.path.commonpath([root, local_path]) != root:
            raise ValueError(f"Refusing to touch {key!r} outside {root}")
        return local_path

    def _save_local(self, key: str, data: bytes) -> str:
        local_path = self._local_path(key)
        os.makedirs(os.path.dirname(local_path), exist_ok=True)

        with open(local_path, "wb") as f:
            f.write(data)

        logger.info(f"Saved {key} to local filesystem")
        return self.get_public_url(key)

    def _delete_local_prefix(self, prefix: str) -> int:
        local_dir = self._local_path(prefix)
        if not os.path.isdir(local_dir):
            return 0
        removed = len(os.listdir(local_dir))
        shutil.rmtree(local_dir)
        logger.info(f"Deleted {removed} images under {prefix} from local filesystem")
        return removed
