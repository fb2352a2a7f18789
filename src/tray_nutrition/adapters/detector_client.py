"""HTTP client for the tray detection service."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from tray_nutrition.domain.detection import DetectionResponse
from tray_nutrition.domain.errors import DetectorError


class DetectorClient(Protocol):
    """Interface for the external object-detection service."""

    async def detect(self, image: bytes, filename: str) -> DetectionResponse:
        """Return detected food trays and menu items for an image."""

    async def preview(self, image: bytes, filename: str) -> bytes:
        """Return an annotated JPEG rendering of the detections."""

    async def health(self) -> bool:
        """Return true when the service reports itself healthy."""


@dataclass
class HttpxDetectorClient(DetectorClient):
    """HTTPX-backed detector client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 30

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float = 30
    ) -> "HttpxDetectorClient":
        """Create a detector client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def detect(self, image: bytes, filename: str) -> DetectionResponse:
        """POST the image to `/api/detect` and validate the payload."""
        response = await self._post_image("/api/detect", image, filename)
        try:
            result = DetectionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise DetectorError(f"Invalid detector payload: {exc}") from exc
        if not result.success:
            raise DetectorError(result.error or "Detector reported a failure")
        return result

    async def preview(self, image: bytes, filename: str) -> bytes:
        """POST the image to `/api/detect/preview` and return JPEG bytes."""
        response = await self._post_image("/api/detect/preview", image, filename)
        return response.content

    async def health(self) -> bool:
        """Query `/api/health`; any failure counts as unhealthy."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/api/health", timeout=5
            )
        except httpx.HTTPError:
            return False
        return response.is_success

    async def _post_image(
        self, path: str, image: bytes, filename: str
    ) -> httpx.Response:
        try:
            response = await self.http_client.post(
                f"{self.base_url}{path}",
                files={"image": (filename, image, "image/jpeg")},
                timeout=self.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise DetectorError(f"Detector request failed: {exc}") from exc
        if response.is_error:
            raise DetectorError(f"API error {response.status_code}: {response.text}")
        return response

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
