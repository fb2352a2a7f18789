"""Detection pipeline: detector call, nutrition, menu match and persistence."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol

from tray_nutrition.adapters.detector_client import DetectorClient
from tray_nutrition.domain.detection import DetectionResponse
from tray_nutrition.domain.detections import (
    DetectionDetail,
    DetectionPage,
    DetectionRecord,
    NewDetection,
)
from tray_nutrition.domain.errors import DataSourceError, DetectorError
from tray_nutrition.domain.menus import MatchedDailyMenu
from tray_nutrition.domain.nutrition import NutritionCalculation, TotalNutrition
from tray_nutrition.services.menus import MenuMatcher
from tray_nutrition.services.nutrition import NutritionMapper, sum_totals

_logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class DetectionRepository(Protocol):
    """Persistence interface for detections and their items."""

    def create_detection(self, detection: NewDetection) -> int:
        """Create a detection header and return its id."""

    def create_detection_items(
        self, detection_id: int, items: list[NutritionCalculation]
    ) -> None:
        """Create item rows for a detection."""

    def get_detection(self, detection_id: int) -> DetectionDetail | None:
        """Return a detection with items, if present."""

    def list_detections(
        self,
        page: int,
        limit: int,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> DetectionPage:
        """Return a page of detections, newest first."""

    def delete_detection(self, detection_id: int) -> None:
        """Delete a detection and its items."""

    def list_detections_since(self, start: datetime) -> list[DetectionRecord]:
        """Return detections made at or after `start`."""

    def list_recent_detections(self, limit: int) -> list[DetectionRecord]:
        """Return the most recent detections."""

    def count_detections(self) -> int:
        """Return the total number of detections."""


@dataclass(frozen=True)
class UploadResult:
    """Outcome of storing an image; `url` is None when the upload failed."""

    path: str
    url: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.url is not None


class ImageStorage(Protocol):
    """Object storage for tray images."""

    def upload(self, path: str, content: bytes, content_type: str) -> UploadResult:
        """Store bytes at `path` and report the public URL or the failure."""


@dataclass(frozen=True)
class DetectionOutcome:
    """Everything computed and stored for one analysed image."""

    detection_id: int
    response: DetectionResponse
    items: list[NutritionCalculation]
    totals: TotalNutrition
    matched_menu: MatchedDailyMenu | None
    image_upload: UploadResult
    annotated_upload: UploadResult


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DetectionService:
    """Runs a tray image through detection, nutrition and menu matching."""

    detector: DetectorClient
    mapper: NutritionMapper
    menu_matcher: MenuMatcher
    repository: DetectionRepository
    storage: ImageStorage
    clock: Callable[[], datetime] = _utcnow

    async def detect(
        self,
        image: bytes,
        filename: str = "image.jpg",
        user_id: int | None = None,
    ) -> DetectionOutcome:
        """Analyse an image and persist the nutrition breakdown."""
        response = await self.detector.detect(image, filename)
        detections = response.menu.detections
        items = await self.mapper.map_detections(detections)
        totals = sum_totals(items)
        matched_menu = self.menu_matcher.match_menu(
            [item.label for item in detections], totals.calories
        )

        base_path = self._base_path(user_id)
        image_upload = self.storage.upload(
            f"{base_path}/original.jpg", image, "image/jpeg"
        )
        annotated_upload = await self._upload_annotated(
            f"{base_path}/annotated.jpg", image, filename
        )
        for upload in (image_upload, annotated_upload):
            if not upload.ok:
                _logger.warning(
                    "Image upload failed for %s: %s", upload.path, upload.error
                )

        detection_id = self.repository.create_detection(
            NewDetection(
                user_id=user_id,
                image_url=image_upload.url,
                annotated_image_url=annotated_upload.url,
                foodtray_count=response.foodtray.count,
                menu_count=response.menu.count,
                totals=totals,
            )
        )
        if items:
            try:
                self.repository.create_detection_items(detection_id, items)
            except DataSourceError:
                _logger.error(
                    "Item insert failed, removing detection %s", detection_id
                )
                self.repository.delete_detection(detection_id)
                raise
        _logger.info(
            "Stored detection %s: %s items, %.2f kcal, menu=%s",
            detection_id,
            len(items),
            totals.calories,
            matched_menu.menu_name if matched_menu else None,
        )

        return DetectionOutcome(
            detection_id=detection_id,
            response=response,
            items=items,
            totals=totals,
            matched_menu=matched_menu,
            image_upload=image_upload,
            annotated_upload=annotated_upload,
        )

    async def preview(self, image: bytes, filename: str = "image.jpg") -> bytes:
        """Return the detector's annotated JPEG for an image."""
        return await self.detector.preview(image, filename)

    def get_detection(self, detection_id: int) -> DetectionDetail | None:
        """Return a stored detection with its items."""
        return self.repository.get_detection(detection_id)

    def list_detections(
        self,
        page: int = 1,
        limit: int = 20,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> DetectionPage:
        """Return a page of detections with clamped paging arguments."""
        page = max(1, page)
        limit = min(MAX_PAGE_SIZE, max(1, limit))
        return self.repository.list_detections(page, limit, date_from, date_to)

    def delete_detection(self, detection_id: int) -> None:
        """Delete a stored detection."""
        self.repository.delete_detection(detection_id)

    async def _upload_annotated(
        self, path: str, image: bytes, filename: str
    ) -> UploadResult:
        try:
            annotated = await self.detector.preview(image, filename)
        except DetectorError as exc:
            return UploadResult(path=path, error=str(exc))
        return self.storage.upload(path, annotated, "image/jpeg")

    def _base_path(self, user_id: int | None) -> str:
        folder = str(user_id) if user_id is not None else "public"
        timestamp_ms = int(self.clock().timestamp() * 1000)
        return f"{folder}/{timestamp_ms}"
