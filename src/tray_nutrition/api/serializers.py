"""JSON shapes returned by the HTTP API."""

from dataclasses import asdict

from tray_nutrition.domain.detections import (
    DailyNutrition,
    DetectionDetail,
    DetectionItemRecord,
    DetectionPage,
    DetectionRecord,
)
from tray_nutrition.domain.menus import DailyMenu, MatchedDailyMenu, PortionInfo
from tray_nutrition.domain.nutrition import (
    FoodNutritionRecord,
    FoodPage,
    NutritionCalculation,
    TotalNutrition,
)
from tray_nutrition.services.dashboard import DashboardStats
from tray_nutrition.services.detection import DetectionOutcome


def serialize_outcome(outcome: DetectionOutcome) -> dict[str, object]:
    response = outcome.response
    return {
        "success": True,
        "detection_id": outcome.detection_id,
        "image_url": outcome.image_upload.url,
        "annotated_image_url": outcome.annotated_upload.url,
        "image_info": response.image_info.model_dump(),
        "foodtray": response.foodtray.model_dump(by_alias=True),
        "menu": response.menu.model_dump(by_alias=True),
        "summary": response.summary.model_dump(),
        "nutrition_items": [serialize_calculation(item) for item in outcome.items],
        "nutrition_totals": serialize_totals(outcome.totals),
        "matched_menu": serialize_matched_menu(outcome.matched_menu),
    }


def serialize_calculation(item: NutritionCalculation) -> dict[str, object]:
    return {
        "food_name": item.food_name,
        "matched_food_name": item.matched_food_name,
        "confidence": item.confidence,
        "estimated_weight_gram": item.estimated_weight_g,
        "calories": item.calories,
        "protein": item.protein,
        "carbohydrates": item.carbohydrates,
        "fat": item.fat,
        "fiber": item.fiber,
    }


def serialize_totals(totals: TotalNutrition) -> dict[str, float]:
    return asdict(totals)


def serialize_portion(portion: PortionInfo | None) -> dict[str, float] | None:
    return asdict(portion) if portion is not None else None


def serialize_matched_menu(
    match: MatchedDailyMenu | None,
) -> dict[str, object] | None:
    if match is None:
        return None
    return {
        "menu_name": match.menu_name,
        "menu_items": match.items,
        "match_score": match.match_score,
        "porsi_besar": serialize_portion(match.large),
        "porsi_kecil": serialize_portion(match.small),
        "closest_portion": match.closest_portion.value,
        "closest_portion_label": match.closest_portion_label,
        "calorie_deviation": match.calorie_deviation_pct,
    }


def serialize_menu(menu: DailyMenu) -> dict[str, object]:
    return {
        "menu_name": menu.menu_name,
        "menu_items": menu.items,
        "image_url": menu.image_url,
        "porsi_besar": serialize_portion(menu.large),
        "porsi_kecil": serialize_portion(menu.small),
    }


def serialize_food(food: FoodNutritionRecord) -> dict[str, object]:
    return {
        "id": food.id,
        "food_name": food.food_name,
        **asdict(food.per_100g),
        "sugar": food.sugar,
        "sodium": food.sodium,
        "reference_weight_gram": food.reference_weight_g,
    }


def serialize_detection(record: DetectionRecord) -> dict[str, object]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "image_url": record.image_url,
        "annotated_image_url": record.annotated_image_url,
        "foodtray_count": record.foodtray_count,
        "menu_count": record.menu_count,
        "total_calories": record.totals.calories,
        "total_protein": record.totals.protein,
        "total_carbohydrates": record.totals.carbohydrates,
        "total_fat": record.totals.fat,
        "total_fiber": record.totals.fiber,
        "notes": record.notes,
        "detected_at": record.detected_at.isoformat(),
    }


def serialize_item(item: DetectionItemRecord) -> dict[str, object]:
    return asdict(item)


def serialize_detail(detail: DetectionDetail) -> dict[str, object]:
    return {
        "detection": serialize_detection(detail.detection),
        "items": [serialize_item(item) for item in detail.items],
    }


def serialize_page(page: DetectionPage) -> dict[str, object]:
    return {
        "data": [serialize_detection(row) for row in page.rows],
        "pagination": _pagination(page),
    }


def serialize_food_page(page: FoodPage) -> dict[str, object]:
    return {
        "data": [serialize_food(food) for food in page.rows],
        "pagination": _pagination(page),
    }


def _pagination(page: DetectionPage | FoodPage) -> dict[str, int]:
    return {
        "page": page.page,
        "limit": page.limit,
        "total": page.total,
        "total_pages": page.total_pages,
    }


def serialize_daily(day: DailyNutrition) -> dict[str, object]:
    return {
        "date": day.day.isoformat(),
        "total_calories": day.calories,
        "total_protein": day.protein,
        "total_carbohydrates": day.carbohydrates,
        "total_fat": day.fat,
        "detection_count": day.detection_count,
    }


def serialize_stats(stats: DashboardStats) -> dict[str, object]:
    return {
        "summary": {
            "total_detections": stats.total_detections,
            "total_nutrition_records": stats.total_nutrition_records,
            "avg_calories": stats.avg_calories,
            "avg_protein": stats.avg_protein,
            "avg_carbohydrates": stats.avg_carbohydrates,
            "avg_fat": stats.avg_fat,
        },
        "daily_chart": [serialize_daily(day) for day in stats.daily],
        "recent_detections": [serialize_detection(row) for row in stats.recent],
    }
