"""Catalog lookup and detection-to-nutrition mapping."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from tray_nutrition.domain.detection import DetectedItem
from tray_nutrition.domain.nutrition import (
    FoodNutritionRecord,
    FoodPage,
    LookupResult,
    LookupStatus,
    NutritionCalculation,
    TotalNutrition,
)
from tray_nutrition.services.cache import Cache
from tray_nutrition.services.estimation import (
    estimate_weight,
    round_half_up,
    scale_nutrient,
)

_logger = logging.getLogger(__name__)

_NUTRIENT_FIELDS = ("calories", "protein", "carbohydrates", "fat", "fiber")
MAX_PAGE_SIZE = 100


class NutritionCatalog(Protocol):
    """Read interface for the per-100g nutrition catalog."""

    def find_by_name_exact(self, name: str) -> FoodNutritionRecord | None:
        """Return the entry whose name equals `name`, ignoring case."""

    def find_by_name_contains(self, substring: str) -> FoodNutritionRecord | None:
        """Return the first entry (catalog order) containing `substring`."""

    def list_foods(
        self, query: str | None, limit: int, offset: int = 0
    ) -> list[FoodNutritionRecord]:
        """Return catalog entries ordered by name, optionally filtered by name."""

    def count_foods(self, query: str | None = None) -> int:
        """Return the number of catalog entries matching `query`."""

    def get_food(self, food_id: int) -> FoodNutritionRecord | None:
        """Return the entry with `food_id`, if present."""


def normalize_label(label: str) -> str:
    """Turn detector class names like `ayam_goreng` into `ayam goreng`."""
    return label.replace("_", " ").replace("-", " ")


@dataclass
class NutritionLookupService:
    """Resolve detected labels to catalog entries with caching."""

    catalog: NutritionCatalog
    cache: Cache
    ttl_seconds: int = 300

    def lookup(self, label: str) -> LookupResult:
        """Resolve a label by exact name, then by normalised substring.

        Catalog failures propagate as `DataSourceError`; only a genuine miss
        produces a `NO_MATCH` result.
        """
        cache_key = f"catalog:lookup:{label.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, LookupResult):
            return LookupResult(label=label, status=cached.status, record=cached.record)

        record = self.catalog.find_by_name_exact(label)
        if record is None:
            record = self.catalog.find_by_name_contains(normalize_label(label))

        if record is None:
            result = LookupResult(label=label, status=LookupStatus.NO_MATCH)
        else:
            result = LookupResult(
                label=label, status=LookupStatus.MATCHED, record=record
            )
        self.cache.set(cache_key, result, ttl_seconds=self.ttl_seconds)
        return result

    def search(self, query: str | None, page: int = 1, limit: int = 50) -> FoodPage:
        """Return a page of catalog entries whose name contains `query`."""
        page = max(1, page)
        limit = min(MAX_PAGE_SIZE, max(1, limit))
        query = query or None
        return FoodPage(
            rows=self.catalog.list_foods(query, limit, offset=(page - 1) * limit),
            total=self.catalog.count_foods(query),
            page=page,
            limit=limit,
        )

    def get_food(self, food_id: int) -> FoodNutritionRecord | None:
        """Return one catalog entry by id."""
        return self.catalog.get_food(food_id)

    def count(self) -> int:
        """Return the catalog size."""
        return self.catalog.count_foods()


@dataclass
class NutritionMapper:
    """Turn detector output into per-item nutrition estimates."""

    lookup_service: NutritionLookupService

    async def map_detections(
        self, items: list[DetectedItem]
    ) -> list[NutritionCalculation]:
        """Estimate nutrition for each detection, preserving input order."""
        if not items:
            return []
        return list(
            await asyncio.gather(
                *(asyncio.to_thread(self.calculate, item) for item in items)
            )
        )

    def calculate(self, item: DetectedItem) -> NutritionCalculation:
        """Estimate nutrition for a single detection."""
        weight = estimate_weight(item.bbox)
        result = self.lookup_service.lookup(item.label)
        if not result.matched or result.record is None:
            _logger.info("No catalog match for detected label %r", item.label)
            return NutritionCalculation(
                food_name=item.label,
                matched_food_name=None,
                food_nutrition_id=None,
                estimated_weight_g=round_half_up(weight, 0),
                confidence=item.confidence,
                calories=0.0,
                protein=0.0,
                carbohydrates=0.0,
                fat=0.0,
                fiber=0.0,
                bbox=item.bbox,
            )

        profile = result.record.per_100g
        return NutritionCalculation(
            food_name=item.label,
            matched_food_name=result.record.food_name,
            food_nutrition_id=result.record.id,
            estimated_weight_g=round_half_up(weight, 0),
            confidence=item.confidence,
            calories=scale_nutrient(profile.calories, weight),
            protein=scale_nutrient(profile.protein, weight),
            carbohydrates=scale_nutrient(profile.carbohydrates, weight),
            fat=scale_nutrient(profile.fat, weight),
            fiber=scale_nutrient(profile.fiber, weight),
            bbox=item.bbox,
        )


def sum_totals(calculations: list[NutritionCalculation]) -> TotalNutrition:
    """Sum nutrients across items, rounding each field once at the end."""
    sums = dict.fromkeys(_NUTRIENT_FIELDS, 0.0)
    for calculation in calculations:
        for name in _NUTRIENT_FIELDS:
            sums[name] += getattr(calculation, name)
    return TotalNutrition(
        **{name: round_half_up(value, 2) for name, value in sums.items()}
    )
