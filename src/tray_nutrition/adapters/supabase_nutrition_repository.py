"""Supabase implementation of the nutrition catalog."""

from dataclasses import dataclass

from supabase import Client

from tray_nutrition.adapters.supabase_errors import data_source, escape_like
from tray_nutrition.domain.nutrition import FoodNutritionRecord, NutrientProfile
from tray_nutrition.services.nutrition import NutritionCatalog

_TABLE = "food_nutrition"


@dataclass
class SupabaseNutritionCatalog(NutritionCatalog):
    """Supabase-backed `food_nutrition` catalog (values per 100g)."""

    client: Client

    def find_by_name_exact(self, name: str) -> FoodNutritionRecord | None:
        """Return the entry whose name equals `name`, ignoring case."""
        with data_source("Catalog exact lookup"):
            response = (
                self.client.table(_TABLE)
                .select("*")
                .ilike("food_name", escape_like(name))
                .order("id")
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def find_by_name_contains(self, substring: str) -> FoodNutritionRecord | None:
        """Return the first entry by id whose name contains `substring`."""
        with data_source("Catalog substring lookup"):
            response = (
                self.client.table(_TABLE)
                .select("*")
                .ilike("food_name", f"%{escape_like(substring)}%")
                .order("id")
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def list_foods(
        self, query: str | None, limit: int, offset: int = 0
    ) -> list[FoodNutritionRecord]:
        """Return catalog entries ordered by name."""
        with data_source("Catalog listing"):
            request = self.client.table(_TABLE).select("*")
            if query:
                request = request.ilike("food_name", f"%{escape_like(query)}%")
            response = (
                request.order("food_name").range(offset, offset + limit - 1).execute()
            )
        return [_parse_food(row) for row in response.data or []]

    def count_foods(self, query: str | None = None) -> int:
        """Return the number of catalog entries matching `query`."""
        with data_source("Catalog count"):
            request = self.client.table(_TABLE).select("id", count="exact")
            if query:
                request = request.ilike("food_name", f"%{escape_like(query)}%")
            response = request.limit(1).execute()
        return int(response.count or 0)

    def get_food(self, food_id: int) -> FoodNutritionRecord | None:
        """Return the entry with `food_id`, if present."""
        with data_source("Catalog fetch"):
            response = (
                self.client.table(_TABLE)
                .select("*")
                .eq("id", food_id)
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _parse_food(response.data[0])


def _parse_food(row: dict[str, object]) -> FoodNutritionRecord:
    """Parse a catalog row; numeric columns arrive as strings."""
    return FoodNutritionRecord(
        id=int(row["id"]),
        food_name=str(row.get("food_name", "")),
        per_100g=NutrientProfile(
            calories=_to_float(row.get("calories")),
            protein=_to_float(row.get("protein")),
            carbohydrates=_to_float(row.get("carbohydrates")),
            fat=_to_float(row.get("fat")),
            fiber=_to_float(row.get("fiber")),
        ),
        sugar=_to_float(row.get("sugar")),
        sodium=_to_float(row.get("sodium")),
        reference_weight_g=_to_float(row.get("reference_weight_gram"), 100.0),
    )


def _to_float(value: object, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)
