# storage.py
# ------------------------------------------------------------------------------------
#  Where generated artifacts end up. Both backends honour the same contract:
#    await backend.put(data, name, content_type) -> URL the client can fetch
#  LocalStorage also exposes get(name) and existing_path(name), the latter
#  so /files/{name} can stream the file from disk;
#  S3Storage objects are read straight from their public URL.
# ------------------------------------------------------------------------------------
import asyncio
import logging
import os
from typing import Optional
from urllib.parse import quote

import aiofiles
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from errors import NotFound, StorageError
from settings import Settings

logger = logging.getLogger(__name__)


class StorageBackend:
    name = "abstract"

    async def put(self, data: bytes, name: str, content_type: str = "video/mp4") -> str:
        raise NotImplementedError


class LocalStorage(StorageBackend):
    name = "local"

    def __init__(self, root: str, public_base_url: str):
        self.root = root
        self.public_base_url = public_base_url.rstrip("/")
        os.makedirs(self.root, exist_ok=True)

    def _path(self, name: str) -> str:
        # Flat namespace: anything that looks like a path is not ours.
        if not name or name != os.path.basename(name) or name in {".", ".."}:
            raise NotFound(f"file not found: {name}")
        return os.path.join(self.root, name)

    def url_for(self, name: str) -> str:
        return f"{self.public_base_url}/files/{quote(name)}"

    async def put(self, data: bytes, name: str, content_type: str = "video/mp4") -> str:
        try:
            path = self._path(name)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except (OSError, NotFound) as e:
            raise StorageError(f"could not write {name}: {e}") from e
        return self.url_for(name)

    def existing_path(self, name: str) -> str:
        """Path of a stored file, for streaming it straight from disk."""
        path = self._path(name)
        if not os.path.isfile(path):
            raise NotFound(f"file not found: {name}")
        return path

    async def get(self, name: str) -> bytes:
        path = self.existing_path(name)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageError(f"could not read {name}: {e}") from e


class S3Storage(StorageBackend):
    """
    Public-read uploads to an S3 bucket (or any S3-compatible endpoint,
    e.g. R2 when `endpoint_url` is set).
    """

    name = "s3"

    def __init__(
        self,
        bucket: str,
        region: str,
        *,
        endpoint_url: Optional[str] = None,
        public_base: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        self.region = region
        self.public_base = (public_base or "").rstrip("/")
        if not bucket:
            logger.warning("STORAGE_PROVIDER=s3 but S3_BUCKET not set; uploads will fail")

        if endpoint_url:
            # Normalize accidental trailing slashes or bucket suffixes
            endpoint_url = endpoint_url.rstrip("/")
            if bucket and endpoint_url.endswith(f"/{bucket}"):
                endpoint_url = endpoint_url[: -(len(bucket) + 1)]

        self._s3 = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url or None,
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
            region_name=region,
            config=Config(signature_version="s3v4"),
        )

    def url_for(self, key: str) -> str:
        if self.public_base:
            return f"{self.public_base}/{quote(key)}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(key)}"

    def _put_object(self, data: bytes, key: str, content_type: str):
        self._s3.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            ACL="public-read",
        )

    async def put(self, data: bytes, name: str, content_type: str = "video/mp4") -> str:
        if not self.bucket:
            raise StorageError("S3_BUCKET is not configured")
        try:
            # boto3 is blocking; keep the event loop free for other jobs.
            await asyncio.to_thread(self._put_object, data, name, content_type)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"upload of {name} failed: {e}") from e
        return self.url_for(name)


def build_storage(settings: Settings) -> StorageBackend:
    if settings.uses_object_store:
        return S3Storage(
            settings.s3_bucket,
            settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
            public_base=settings.s3_public_base,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    return LocalStorage(settings.local_storage_dir, settings.app_base_url)
