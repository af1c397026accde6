from abc import ABC, abstractmethod

from schemas import OptimizationResult, StorageResult
from utils.format_detect import EXTENSIONS, MIME_TYPES


class BlobStore(ABC):
    """Accepts encoded bytes and returns where they can be retrieved."""

    @abstractmethod
    async def upload(self, data: bytes, key: str, content_type: str) -> StorageResult:
        """Store data under key.

        Raises:
            StorageError: If the upload fails.
        """


def storage_key(prefix: str, name: str, result: OptimizationResult) -> str:
    """Build '<prefix>/<name>.<ext>' with the extension of the result's format."""
    ext = EXTENSIONS.get(result.format, result.format.value)
    return f"{prefix.strip('/')}/{name}.{ext}"


async def publish(result: OptimizationResult, store: BlobStore, key: str) -> StorageResult:
    """Upload an optimization result with the MIME type of its format.

    Persistence stays on the caller side: the pipeline itself never
    uploads.
    """
    content_type = MIME_TYPES.get(result.format, "application/octet-stream")
    return await store.upload(result.data, key, content_type)
