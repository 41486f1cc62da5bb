import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential
from azure.storage.blob import BlobServiceClient, ContentSettings

from ...core.config import AppConfig
from ...core.errors import BlobUploadError, StorageError, StorageNotConfiguredError
from ...utils.async_utils import run_sync
from ...utils.file_utils import safe_blob_filename


_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class UploadResult:
    success: bool
    blob_url: Optional[str] = None
    blob_name: Optional[str] = None
    error: Optional[str] = None


def _path_segment(value: Any, fallback: str) -> str:
    text = str(value).strip() if value not in (None, "") else fallback
    segment = _UNSAFE_PATH_CHARS.sub("_", text)
    return segment if segment.strip(".") else fallback


class EvidenceStorageService:
    """Uploads component evidence files to Azure Blob Storage."""

    def __init__(self, config: AppConfig, blob_service_client: Optional[BlobServiceClient] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.container_name = config.azure_storage_evidence_container
        self._blob_service_client = blob_service_client

    @property
    def blob_service_client(self) -> BlobServiceClient:
        if self._blob_service_client is None:
            if not self.config.azure_storage_account_url:
                raise StorageNotConfiguredError()

            # Prefer key-based authentication for local development,
            # managed identity everywhere else
            if self.config.azure_storage_key:
                self.logger.info("Using Azure Storage key-based authentication")
                credential: Any = self.config.azure_storage_key
            else:
                self.logger.info("Using Azure Storage managed identity authentication")
                credential = DefaultAzureCredential()

            self._blob_service_client = BlobServiceClient(
                account_url=self.config.azure_storage_account_url, credential=credential
            )
        return self._blob_service_client

    def build_blob_name(
        self,
        filename: str,
        cm_code: Any,
        sku_code: Any,
        component_code: Any,
        period_key: Any,
        category_tag: str,
        now: Optional[datetime] = None,
    ) -> str:
        """``cm/sku/component/period/category/<timestamp>_<filename>``"""
        now = now or datetime.now()
        sanitized_filename = safe_blob_filename(filename)
        timestamp = now.strftime("%Y%m%d_%H%M%S_%f")[:-3]
        return "/".join([
            _path_segment(cm_code, "unknown-cm"),
            _path_segment(sku_code, "unknown-sku"),
            _path_segment(component_code, "unknown-component"),
            _path_segment(period_key, "unknown-period"),
            _path_segment(category_tag, "evidence"),
            f"{timestamp}_{sanitized_filename}",
        ])

    def _upload_bytes(self, blob_name: str, buffer: bytes, mimetype: str) -> str:
        try:
            container_client = self.blob_service_client.get_container_client(self.container_name)
            blob_client = container_client.get_blob_client(blob_name)
            blob_client.upload_blob(
                buffer,
                overwrite=True,
                content_settings=ContentSettings(content_type=mimetype),
            )
            return blob_client.url
        except AzureError as e:
            raise BlobUploadError(blob_name, str(e)) from e

    async def upload_single_file(
        self,
        buffer: Union[bytes, bytearray],
        filename: str,
        mimetype: str,
        cm_code: Any,
        sku_code: Any,
        component_code: Any,
        period_key: Any,
        category_tag: str,
    ) -> UploadResult:
        """Upload one evidence file.

        Returns a failed ``UploadResult`` instead of raising for storage
        errors so one bad file does not abort the rest of the request.
        """
        if not buffer:
            return UploadResult(success=False, error="Empty file buffer")

        blob_name = self.build_blob_name(filename, cm_code, sku_code, component_code, period_key, category_tag)
        self.logger.info(f"🚀 Uploading evidence file to blob storage: {blob_name}")

        try:
            blob_url = await run_sync(self._upload_bytes, blob_name, bytes(buffer), mimetype)
        except StorageError as e:
            self.logger.error(
                f"❌ File upload failed: {e.message}",
                extra={"blob_name": blob_name, "error_code": e.error_code.value},
            )
            return UploadResult(success=False, blob_name=blob_name, error=e.message)

        return UploadResult(success=True, blob_url=blob_url, blob_name=blob_name)
