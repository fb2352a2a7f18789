"""Portion weight estimation and nutrient scaling."""

from decimal import ROUND_HALF_UP, Decimal

from tray_nutrition.domain.detection import BoundingBox

# Calibration: a 40000 px^2 box corresponds to a 150g portion.
BASE_AREA_PX = 40000.0
BASE_WEIGHT_G = 150.0
MIN_WEIGHT_G = 10.0
MAX_WEIGHT_G = 500.0
REFERENCE_WEIGHT_G = 100.0
# Clamp on area so the bounds are exact despite float rounding.
MIN_AREA_PX = MIN_WEIGHT_G / BASE_WEIGHT_G * BASE_AREA_PX
MAX_AREA_PX = MAX_WEIGHT_G / BASE_WEIGHT_G * BASE_AREA_PX


def bbox_area(bbox: BoundingBox) -> float:
    """Return the box area, preferring explicit width and height."""
    width = bbox.width if bbox.width is not None else bbox.x2 - bbox.x1
    height = bbox.height if bbox.height is not None else bbox.y2 - bbox.y1
    return width * height


def estimate_weight(bbox: BoundingBox) -> float:
    """Estimate the weight in grams of the food inside a bounding box."""
    area = bbox_area(bbox)
    if area >= MAX_AREA_PX:
        return MAX_WEIGHT_G
    if area <= MIN_AREA_PX:
        return MIN_WEIGHT_G
    return area / BASE_AREA_PX * BASE_WEIGHT_G


def scale_nutrient(per_100g: float, weight_g: float) -> float:
    """Scale a per-100g nutrient value to the given weight."""
    return round_half_up(per_100g * weight_g / REFERENCE_WEIGHT_G, 2)


def round_half_up(value: float, places: int) -> float:
    """Round using half-up semantics on the decimal representation."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
