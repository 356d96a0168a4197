"""ImageKit REST wrapper.

Uploads return the CDN URL of the stored file. Deleting by URL looks the file
up by name and removes it by id. Without ImageKit credentials uploads resolve
to a placeholder URL and deletes are skipped.
"""

import re
import time
from typing import Optional
from urllib.parse import urlparse

import httpx

from globetrotter.core.config import settings
from globetrotter.core.logger import logger

UPLOAD_URL = "https://upload.imagekit.io/api/v1/files/upload"
FILES_URL = "https://api.imagekit.io/v1/files"


class ImageCDNError(Exception):
    pass


def sanitize_filename(name: str) -> str:
    return re.sub(r"[^\w.\-]", "_", name or "upload")


def build_file_name(original: str) -> str:
    """Millisecond timestamp prefix keeps uploads of the same name apart."""
    return f"{int(time.time() * 1000)}_{sanitize_filename(original)}"


class ImageKitClient:
    def __init__(
        self,
        public_key: Optional[str] = None,
        private_key: Optional[str] = None,
        url_endpoint: Optional[str] = None,
        fallback_url: str = settings.FALLBACK_IMAGE_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.public_key = public_key
        self.private_key = private_key
        self.url_endpoint = url_endpoint
        self.fallback_url = fallback_url
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "ImageKitClient":
        return cls(
            public_key=settings.IMAGEKIT_PUBLIC_KEY,
            private_key=settings.IMAGEKIT_PRIVATE_KEY,
            url_endpoint=settings.IMAGEKIT_URL_ENDPOINT,
            fallback_url=settings.FALLBACK_IMAGE_BASE_URL,
        )

    @property
    def configured(self) -> bool:
        return bool(self.public_key and self.private_key and self.url_endpoint)

    def _client(self) -> httpx.AsyncClient:
        # ImageKit authenticates with the private key as the basic-auth user name
        return httpx.AsyncClient(
            auth=(self.private_key or "", ""),
            timeout=30.0,
            transport=self._transport,
        )

    async def upload(self, content: bytes, file_name: str, folder: str = "/") -> str:
        if not self.configured:
            logger.warning("ImageKit is not configured; returning placeholder image URL")
            return self.fallback_url

        try:
            async with self._client() as client:
                resp = await client.post(
                    UPLOAD_URL,
                    data={"fileName": file_name, "folder": folder, "useUniqueFileName": "true"},
                    files={"file": (file_name, content)},
                )
                resp.raise_for_status()
                url = resp.json().get("url")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Image upload failed for {file_name}: {e}")
            raise ImageCDNError("Image upload failed") from e

        if not url:
            raise ImageCDNError("Image upload failed")
        logger.info(f"Uploaded image {file_name} to {folder}")
        return url

    async def delete_by_url(self, file_url: str) -> dict:
        if not file_url:
            raise ImageCDNError("URL required")
        parsed = urlparse(file_url)
        if not parsed.scheme or not parsed.netloc:
            raise ImageCDNError("Invalid URL")
        relative = parsed.path.lstrip("/")
        file_name = relative.split("/")[-1]

        if not self.configured:
            return {"skipped": True}

        try:
            async with self._client() as client:
                resp = await client.get(
                    FILES_URL,
                    params={"searchQuery": f'name="{file_name}"', "limit": 100},
                )
                resp.raise_for_status()
                files = resp.json()

                match = next(
                    (
                        f for f in files
                        if f.get("filePath", "").lstrip("/") == relative
                        or relative.endswith(f.get("name", "\0"))
                    ),
                    None,
                )
                if match is None:
                    raise ImageCDNError("File not found for given URL")

                resp = await client.delete(f"{FILES_URL}/{match['fileId']}")
                resp.raise_for_status()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Image delete failed for {file_url}: {e}")
            raise ImageCDNError("Image delete failed") from e

        logger.info(f"Deleted image {match['fileId']}")
        return {"deleted": True, "file_id": match["fileId"]}

    async def try_delete(self, file_url: Optional[str]) -> bool:
        """Best-effort delete used when the owning record goes away."""
        if not isinstance(file_url, str) or not file_url.startswith("http"):
            return False
        try:
            result = await self.delete_by_url(file_url)
        except ImageCDNError as e:
            logger.warning(f"Image deletion failed: {e}")
            return False
        return bool(result.get("deleted"))


_image_cdn: Optional[ImageKitClient] = None


def get_image_cdn() -> ImageKitClient:
    """FastAPI dependency returning the shared ImageKit client."""
    global _image_cdn
    if _image_cdn is None:
        _image_cdn = ImageKitClient.from_settings()
    return _image_cdn
