"""Dashboard aggregates over stored detections."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from tray_nutrition.domain.detections import DailyNutrition, DetectionRecord
from tray_nutrition.services.detection import DetectionRepository
from tray_nutrition.services.estimation import round_half_up
from tray_nutrition.services.nutrition import NutritionLookupService

AVERAGE_WINDOW_DAYS = 30
CHART_WINDOW_DAYS = 14
RECENT_LIMIT = 5


@dataclass
class DashboardStats:
    """Summary numbers shown on the staff dashboard."""

    total_detections: int
    total_nutrition_records: int
    avg_calories: float
    avg_protein: float
    avg_carbohydrates: float
    avg_fat: float
    daily: list[DailyNutrition]
    recent: list[DetectionRecord]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DashboardService:
    """Computes dashboard statistics in UTC."""

    repository: DetectionRepository
    lookup_service: NutritionLookupService
    clock: Callable[[], datetime] = _utcnow

    def get_stats(self) -> DashboardStats:
        """Return counts, 30-day averages, a 14-day chart and recent items."""
        now = self.clock()
        recent_month = self.repository.list_detections_since(
            now - timedelta(days=AVERAGE_WINDOW_DAYS)
        )
        chart_start = now - timedelta(days=CHART_WINDOW_DAYS)
        chart_rows = [row for row in recent_month if row.detected_at >= chart_start]

        count = len(recent_month)
        return DashboardStats(
            total_detections=self.repository.count_detections(),
            total_nutrition_records=self.lookup_service.count(),
            avg_calories=_average(recent_month, "calories", count),
            avg_protein=_average(recent_month, "protein", count),
            avg_carbohydrates=_average(recent_month, "carbohydrates", count),
            avg_fat=_average(recent_month, "fat", count),
            daily=_aggregate_daily(chart_rows),
            recent=self.repository.list_recent_detections(RECENT_LIMIT),
        )


def _average(rows: list[DetectionRecord], field_name: str, count: int) -> float:
    if count == 0:
        return 0.0
    total = sum(getattr(row.totals, field_name) for row in rows)
    return round_half_up(total / count, 2)


def _aggregate_daily(rows: list[DetectionRecord]) -> list[DailyNutrition]:
    """Sum detections per UTC date, oldest day first; empty days are omitted."""
    days: dict[date, list[DetectionRecord]] = {}
    for row in rows:
        days.setdefault(row.detected_at.astimezone(UTC).date(), []).append(row)
    return [
        DailyNutrition(
            day=day,
            calories=round_half_up(sum(r.totals.calories for r in entries), 2),
            protein=round_half_up(sum(r.totals.protein for r in entries), 2),
            carbohydrates=round_half_up(
                sum(r.totals.carbohydrates for r in entries), 2
            ),
            fat=round_half_up(sum(r.totals.fat for r in entries), 2),
            detection_count=len(entries),
        )
        for day, entries in sorted(days.items())
    ]
