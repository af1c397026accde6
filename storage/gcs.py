import asyncio

from google.cloud import storage as gcs_lib

from exceptions import StorageError
from schemas import StorageResult
from storage.base import BlobStore
from utils.logging import get_logger

logger = get_logger("storage.gcs")

# Keys are unique per upload, so the object never changes once written
IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


class GCSBlobStore(BlobStore):
    """Google Cloud Storage blob store.

    Authentication:
    - Cloud Run / GKE: Workload identity (automatic)
    - Local development: GOOGLE_APPLICATION_CREDENTIALS env var
    """

    def __init__(
        self,
        bucket: str,
        project: str | None = None,
        public: bool = False,
        cache_control: str = IMMUTABLE_CACHE_CONTROL,
    ):
        self.bucket = bucket
        self.project = project
        self.public = public
        self.cache_control = cache_control
        self._client = None

    @property
    def client(self):
        """Lazy-initialized GCS client."""
        if self._client is None:
            self._client = gcs_lib.Client(project=self.project)
        return self._client

    async def upload(self, data: bytes, key: str, content_type: str) -> StorageResult:
        """Upload bytes to gs://<bucket>/<key>.

        Raises:
            StorageError: If upload fails.
        """
        try:
            await asyncio.to_thread(self._upload_blob, data, key, content_type)
        except Exception as e:
            logger.error(
                f"GCS upload failed: {e}",
                extra={"context": {"bucket": self.bucket, "key": key}},
            )
            raise StorageError(
                f"GCS upload failed: {e}",
                bucket=self.bucket,
                path=key,
            )

        public_url = (
            f"https://storage.googleapis.com/{self.bucket}/{key}"
            if self.public
            else None
        )
        return StorageResult(
            provider="gcs",
            url=f"gs://{self.bucket}/{key}",
            public_url=public_url,
        )

    def _upload_blob(self, data: bytes, key: str, content_type: str) -> None:
        bucket = self.client.bucket(self.bucket, user_project=self.project)
        blob = bucket.blob(key)
        blob.cache_control = self.cache_control
        blob.upload_from_string(data, content_type=content_type)
        if self.public:
            blob.make_public()
