"""Uploads to Supabase object storage."""

import logging
import os
import uuid

from errors import RemoteServiceError, ValidationError


logger = logging.getLogger(__name__)

FILES_BUCKET = "qr-files"
AVATARS_BUCKET = "avatars"
MAX_FILE_BYTES = 2 * 1024 * 1024 * 1024
MAX_AVATAR_BYTES = 50 * 1024 * 1024
CACHE_CONTROL = "3600"


def file_size(uploaded_file):
    size = getattr(uploaded_file, "size", None)
    if size is None:
        size = len(uploaded_file.getvalue())
    return int(size)


def file_extension(name):
    ext = os.path.splitext(name or "")[1].lstrip(".").lower()
    return ext or "bin"


def validate_content_file(uploaded_file):
    if file_size(uploaded_file) > MAX_FILE_BYTES:
        raise ValidationError(f"File {uploaded_file.name} exceeds 2GB limit")


def validate_avatar(uploaded_file):
    if file_size(uploaded_file) > MAX_AVATAR_BYTES:
        raise ValidationError("Avatar must be less than 50MB")
    if not (getattr(uploaded_file, "type", "") or "").startswith("image/"):
        raise ValidationError("Please upload an image file")


class StorageGateway:
    """Writes user files under ``<owner_id>/`` and hands back public URLs."""

    def __init__(self, client):
        self.client = client

    def _bucket(self, name):
        return self.client.storage.from_(name)

    def _put(self, bucket, path, uploaded_file, upsert):
        options = {
            "cache-control": CACHE_CONTROL,
            "upsert": "true" if upsert else "false",
        }
        content_type = getattr(uploaded_file, "type", None)
        if content_type:
            options["content-type"] = content_type
        try:
            self._bucket(bucket).upload(path, uploaded_file.getvalue(), options)
            return self._bucket(bucket).get_public_url(path)
        except Exception as exc:
            logger.error("Error uploading %s to %s: %s", path, bucket, exc)
            raise RemoteServiceError(f"Upload of {path} failed: {exc}") from exc

    def upload(self, uploaded_file, owner_id):
        validate_content_file(uploaded_file)
        path = f"{owner_id}/{uuid.uuid4().hex}.{file_extension(uploaded_file.name)}"
        return self._put(FILES_BUCKET, path, uploaded_file, upsert=False)

    def upload_many(self, uploaded_files, owner_id):
        """Upload files one after another.

        All sizes are checked first so an oversized file fails the batch
        before anything is sent. If an upload fails partway, files already
        stored by this call are removed again.
        """
        for uploaded_file in uploaded_files:
            validate_content_file(uploaded_file)

        urls = []
        try:
            for uploaded_file in uploaded_files:
                urls.append(self.upload(uploaded_file, owner_id))
        except RemoteServiceError:
            self.remove(urls)
            raise
        return urls

    def upload_avatar(self, uploaded_file, owner_id):
        validate_avatar(uploaded_file)
        path = f"{owner_id}/avatar.{file_extension(uploaded_file.name)}"
        return self._put(AVATARS_BUCKET, path, uploaded_file, upsert=True)

    def object_path(self, public_url, bucket=FILES_BUCKET):
        marker = f"/{bucket}/"
        if marker not in public_url:
            return None
        return public_url.split(marker, 1)[1].split("?", 1)[0]

    def remove(self, public_urls, bucket=FILES_BUCKET):
        """Best-effort delete of previously uploaded files."""
        paths = [p for p in (self.object_path(url, bucket) for url in public_urls) if p]
        if not paths:
            return 0
        try:
            self._bucket(bucket).remove(paths)
        except Exception as exc:
            logger.warning("Could not remove uploaded files %s: %s", paths, exc)
            return 0
        logger.info("Removed %d orphaned upload(s)", len(paths))
        return len(paths)
