"""Domain models for persisted detections."""

from dataclasses import dataclass
from datetime import date, datetime

from tray_nutrition.domain.nutrition import TotalNutrition


@dataclass(frozen=True)
class NewDetection:
    """Detection header to persist."""

    user_id: int | None
    image_url: str | None
    annotated_image_url: str | None
    foodtray_count: int
    menu_count: int
    totals: TotalNutrition
    notes: str | None = None


@dataclass(frozen=True)
class DetectionRecord:
    """Persisted detection header."""

    id: int
    user_id: int | None
    image_url: str | None
    annotated_image_url: str | None
    foodtray_count: int
    menu_count: int
    totals: TotalNutrition
    notes: str | None
    detected_at: datetime


@dataclass(frozen=True)
class DetectionItemRecord:
    """Persisted nutrition row for one detected item."""

    id: int
    detection_id: int
    food_nutrition_id: int | None
    food_name: str
    confidence: float
    estimated_weight_g: float
    calories: float
    protein: float
    carbohydrates: float
    fat: float
    fiber: float
    bbox_x1: float | None
    bbox_y1: float | None
    bbox_x2: float | None
    bbox_y2: float | None


@dataclass(frozen=True)
class DetectionDetail:
    """Detection with its items."""

    detection: DetectionRecord
    items: list[DetectionItemRecord]


@dataclass(frozen=True)
class DetectionPage:
    """One page of detections plus the total row count."""

    rows: list[DetectionRecord]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)


@dataclass(frozen=True)
class DailyNutrition:
    """Summed nutrition for one calendar day."""

    day: date
    calories: float
    protein: float
    carbohydrates: float
    fat: float
    detection_count: int
