import logging
import os
import uuid
from functools import lru_cache

from azure.storage.blob import BlobServiceClient

from config import get_settings
from exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@lru_cache
def get_blob_service() -> BlobServiceClient:
     storage = get_settings().storage
     if not storage.is_configured:
          raise ConfigurationError("AZURE_STORAGE_ACCOUNT and AZURE_STORAGE_KEY must be set for document uploads")
     return BlobServiceClient.from_connection_string(
          f"DefaultEndpointsProtocol=https;"
          f"AccountName={storage.account};"
          f"AccountKey={storage.key};"
          f"EndpointSuffix=core.windows.net"
     )


def upload_to_blob(file, container: str, prefix: str) -> str:
     """
     Upload a FastAPI UploadFile under <prefix>/<uuid><ext> and return its URL.
     """
     ext = os.path.splitext(file.filename or "")[1]
     filename = f"{prefix}/{uuid.uuid4()}{ext}"
     blob_client = get_blob_service().get_blob_client(container=container, blob=filename)
     blob_client.upload_blob(file.file, overwrite=True)
     logger.info("Uploaded %s to container %s", filename, container)
     return blob_client.url
