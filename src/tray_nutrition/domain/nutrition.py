"""Nutrition domain models."""

from dataclasses import dataclass
from enum import Enum

from tray_nutrition.domain.detection import BoundingBox


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient quantities for a reference weight (100g in the catalog)."""

    calories: float
    protein: float
    carbohydrates: float
    fat: float
    fiber: float


@dataclass(frozen=True)
class FoodNutritionRecord:
    """Catalog entry keyed by a unique food name."""

    id: int
    food_name: str
    per_100g: NutrientProfile
    sugar: float = 0.0
    sodium: float = 0.0
    reference_weight_g: float = 100.0


class LookupStatus(str, Enum):
    """Outcome of resolving a detected label against the catalog."""

    MATCHED = "matched"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class LookupResult:
    """Result of a catalog lookup; infrastructure failures are raised instead."""

    label: str
    status: LookupStatus
    record: FoodNutritionRecord | None = None

    @property
    def matched(self) -> bool:
        return self.status is LookupStatus.MATCHED


@dataclass(frozen=True)
class NutritionCalculation:
    """Nutrition estimate for one detected item."""

    food_name: str
    matched_food_name: str | None
    food_nutrition_id: int | None
    estimated_weight_g: float
    confidence: float
    calories: float
    protein: float
    carbohydrates: float
    fat: float
    fiber: float
    bbox: BoundingBox


@dataclass(frozen=True)
class TotalNutrition:
    """Summed nutrients across all items of one image."""

    calories: float = 0.0
    protein: float = 0.0
    carbohydrates: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0


@dataclass(frozen=True)
class FoodPage:
    """One page of catalog entries plus the matching row count."""

    rows: list[FoodNutritionRecord]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)
