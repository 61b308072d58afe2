"""
Image storage for teacher photos, teacher galleries and program images.

Keep the interface small so tests can supply simple fakes.
"""
import logging
import os
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Protocol

from config import settings
from .exceptions import UpstreamFailure

logger = logging.getLogger(__name__)


class ImageStoreError(Exception):
    """Raised by image store implementations when an operation fails."""


@dataclass(frozen=True)
class StoredImage:
    url: str
    id: str


class ImageStore(Protocol):
    """Binary object storage for images."""

    def upload(self, data: bytes) -> StoredImage: ...

    def delete(self, image_id: str) -> None: ...


class LocalImageStore:
    """Stores images as files under a directory served at ``base_url``."""

    def __init__(self, root: str, base_url: str):
        self.root = root
        self.base_url = base_url.rstrip("/")

    def upload(self, data: bytes) -> StoredImage:
        image_id = f"image_{uuid.uuid4().hex}"
        try:
            os.makedirs(self.root, exist_ok=True)
            with open(os.path.join(self.root, image_id), "wb") as fh:
                fh.write(data)
        except OSError as exc:
            raise ImageStoreError(f"upload failed: {exc}") from exc
        return StoredImage(url=f"{self.base_url}/{image_id}", id=image_id)

    def delete(self, image_id: str) -> None:
        path = os.path.join(self.root, os.path.basename(image_id))
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.warning("Image %s already absent from store", image_id)
        except OSError as exc:
            raise ImageStoreError(f"delete failed: {exc}") from exc


class InMemoryImageStore:
    """Keeps images in a dict (development and tests)."""

    def __init__(self, base_url: str = "memory://images"):
        self.base_url = base_url
        self.objects: Dict[str, bytes] = {}

    def upload(self, data: bytes) -> StoredImage:
        image_id = f"image_{uuid.uuid4().hex}"
        self.objects[image_id] = data
        return StoredImage(url=f"{self.base_url}/{image_id}", id=image_id)

    def delete(self, image_id: str) -> None:
        self.objects.pop(image_id, None)


@lru_cache()
def get_image_store() -> ImageStore:
    """Get the configured image store."""
    return LocalImageStore(settings.image_store_dir, settings.image_base_url)


def upload_image(store: ImageStore, data: bytes) -> StoredImage:
    """Upload an image, surfacing store failures as UpstreamFailure."""
    try:
        return store.upload(data)
    except ImageStoreError as exc:
        logger.error("Image upload failed: %s", exc)
        raise UpstreamFailure("image_store") from exc


def delete_image(store: ImageStore, image_id: str) -> None:
    """Delete an image, surfacing store failures as UpstreamFailure."""
    try:
        store.delete(image_id)
    except ImageStoreError as exc:
        logger.error("Image delete failed for %s: %s", image_id, exc)
        raise UpstreamFailure("image_store") from exc


class UploadBatch:
    """
    Uploads made while one operation runs.

    Used as a context manager around the uploads and the commit that
    records them: if anything inside fails, the images uploaded so far are
    deleted again before the error propagates.
    """

    def __init__(self, store: ImageStore):
        self.store = store
        self.image_ids: List[str] = []

    def upload(self, data: bytes) -> StoredImage:
        stored = upload_image(self.store, data)
        self.image_ids.append(stored.id)
        return stored

    def __enter__(self) -> "UploadBatch":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            return False
        for image_id in self.image_ids:
            try:
                self.store.delete(image_id)
            except ImageStoreError as cleanup_exc:
                # The original failure is the one reported
                logger.warning("Could not discard uploaded image %s: %s", image_id, cleanup_exc)
        if self.image_ids:
            logger.info("Discarded %d uploaded image(s) after failure", len(self.image_ids))
        return False
