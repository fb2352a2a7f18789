"""Supabase repository for detections and detection items."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time

from supabase import Client

from tray_nutrition.adapters.supabase_errors import data_source
from tray_nutrition.domain.detections import (
    DetectionDetail,
    DetectionItemRecord,
    DetectionPage,
    DetectionRecord,
    NewDetection,
)
from tray_nutrition.domain.errors import DataSourceError
from tray_nutrition.domain.nutrition import NutritionCalculation, TotalNutrition
from tray_nutrition.services.detection import DetectionRepository

_AGGREGATE_COLUMNS = (
    "id, detected_at, total_calories, total_protein, total_carbohydrates, "
    "total_fat, total_fiber"
)


@dataclass
class SupabaseDetectionRepository(DetectionRepository):
    """Supabase implementation over `detections` and `detection_items`."""

    client: Client
    page_size: int = 1000

    def create_detection(self, detection: NewDetection) -> int:
        """Create a detection header and return its id."""
        with data_source("Detection insert"):
            response = (
                self.client.table("detections")
                .insert(
                    {
                        "user_id": detection.user_id,
                        "image_url": detection.image_url,
                        "annotated_image_url": detection.annotated_image_url,
                        "foodtray_count": detection.foodtray_count,
                        "menu_count": detection.menu_count,
                        "total_calories": detection.totals.calories,
                        "total_protein": detection.totals.protein,
                        "total_carbohydrates": detection.totals.carbohydrates,
                        "total_fat": detection.totals.fat,
                        "total_fiber": detection.totals.fiber,
                        "notes": detection.notes,
                    }
                )
                .execute()
            )
        if not response.data:
            raise DataSourceError("Detection insert returned no row")
        return int(response.data[0]["id"])

    def create_detection_items(
        self, detection_id: int, items: list[NutritionCalculation]
    ) -> None:
        """Create item rows for a detection."""
        payload = [
            {
                "detection_id": detection_id,
                "food_nutrition_id": item.food_nutrition_id,
                "food_name": item.food_name,
                "confidence": item.confidence,
                "estimated_weight_gram": item.estimated_weight_g,
                "calories": item.calories,
                "protein": item.protein,
                "carbohydrates": item.carbohydrates,
                "fat": item.fat,
                "fiber": item.fiber,
                "bbox_x1": item.bbox.x1,
                "bbox_y1": item.bbox.y1,
                "bbox_x2": item.bbox.x2,
                "bbox_y2": item.bbox.y2,
            }
            for item in items
        ]
        if not payload:
            return
        with data_source("Detection item insert"):
            self.client.table("detection_items").insert(payload).execute()

    def get_detection(self, detection_id: int) -> DetectionDetail | None:
        """Return a detection with items, if present."""
        with data_source("Detection fetch"):
            response = (
                self.client.table("detections")
                .select("*")
                .eq("id", detection_id)
                .limit(1)
                .execute()
            )
            if not response.data:
                return None
            items_response = (
                self.client.table("detection_items")
                .select("*")
                .eq("detection_id", detection_id)
                .order("id")
                .execute()
            )
        return DetectionDetail(
            detection=_parse_detection(response.data[0]),
            items=[_parse_item(row) for row in items_response.data or []],
        )

    def list_detections(
        self,
        page: int,
        limit: int,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> DetectionPage:
        """Return a page of detections, newest first."""
        offset = (page - 1) * limit
        with data_source("Detection listing"):
            request = self.client.table("detections").select("*", count="exact")
            if date_from is not None:
                start = datetime.combine(date_from, time.min, tzinfo=UTC)
                request = request.gte("detected_at", start.isoformat())
            if date_to is not None:
                end = datetime.combine(date_to, time.max, tzinfo=UTC)
                request = request.lte("detected_at", end.isoformat())
            response = (
                request.order("detected_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        return DetectionPage(
            rows=[_parse_detection(row) for row in response.data or []],
            total=int(response.count or 0),
            page=page,
            limit=limit,
        )

    def delete_detection(self, detection_id: int) -> None:
        """Delete a detection; items cascade in the database."""
        with data_source("Detection delete"):
            self.client.table("detections").delete().eq("id", detection_id).execute()

    def list_detections_since(self, start: datetime) -> list[DetectionRecord]:
        """Return detections made at or after `start`, oldest first.

        PostgREST caps each response at its max-rows setting without saying
        so, so rows are read in pages until a short page comes back.
        """
        rows: list[DetectionRecord] = []
        offset = 0
        while True:
            with data_source("Detection range listing"):
                response = (
                    self.client.table("detections")
                    .select(_AGGREGATE_COLUMNS)
                    .gte("detected_at", start.isoformat())
                    .order("detected_at", desc=False)
                    .order("id", desc=False)
                    .range(offset, offset + self.page_size - 1)
                    .execute()
                )
            batch = response.data or []
            rows.extend(_parse_detection(row) for row in batch)
            if len(batch) < self.page_size:
                return rows
            offset += self.page_size

    def list_recent_detections(self, limit: int) -> list[DetectionRecord]:
        """Return the most recent detections."""
        with data_source("Recent detection listing"):
            response = (
                self.client.table("detections")
                .select("*")
                .order("detected_at", desc=True)
                .limit(limit)
                .execute()
            )
        return [_parse_detection(row) for row in response.data or []]

    def count_detections(self) -> int:
        """Return the total number of detections."""
        with data_source("Detection count"):
            response = (
                self.client.table("detections")
                .select("id", count="exact")
                .limit(1)
                .execute()
            )
        return int(response.count or 0)


def _parse_timestamp(raw: object) -> datetime:
    """Parse a timestamp column, treating naive values as UTC."""
    if not isinstance(raw, str) or not raw:
        return datetime.min.replace(tzinfo=UTC)
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _float(value: object) -> float:
    return float(value) if value not in (None, "") else 0.0


def _optional_float(value: object) -> float | None:
    return float(value) if value not in (None, "") else None


def _parse_detection(row: dict[str, object]) -> DetectionRecord:
    user_id = row.get("user_id")
    return DetectionRecord(
        id=int(row["id"]),
        user_id=int(user_id) if user_id is not None else None,
        image_url=row.get("image_url"),
        annotated_image_url=row.get("annotated_image_url"),
        foodtray_count=int(row.get("foodtray_count") or 0),
        menu_count=int(row.get("menu_count") or 0),
        totals=TotalNutrition(
            calories=_float(row.get("total_calories")),
            protein=_float(row.get("total_protein")),
            carbohydrates=_float(row.get("total_carbohydrates")),
            fat=_float(row.get("total_fat")),
            fiber=_float(row.get("total_fiber")),
        ),
        notes=row.get("notes"),
        detected_at=_parse_timestamp(row.get("detected_at")),
    )


def _parse_item(row: dict[str, object]) -> DetectionItemRecord:
    food_nutrition_id = row.get("food_nutrition_id")
    return DetectionItemRecord(
        id=int(row["id"]),
        detection_id=int(row["detection_id"]),
        food_nutrition_id=(
            int(food_nutrition_id) if food_nutrition_id is not None else None
        ),
        food_name=str(row.get("food_name", "")),
        confidence=_float(row.get("confidence")),
        estimated_weight_g=_float(row.get("estimated_weight_gram")),
        calories=_float(row.get("calories")),
        protein=_float(row.get("protein")),
        carbohydrates=_float(row.get("carbohydrates")),
        fat=_float(row.get("fat")),
        fiber=_float(row.get("fiber")),
        bbox_x1=_optional_float(row.get("bbox_x1")),
        bbox_y1=_optional_float(row.get("bbox_y1")),
        bbox_x2=_optional_float(row.get("bbox_x2")),
        bbox_y2=_optional_float(row.get("bbox_y2")),
    )
