"""Daily menu domain models."""

from dataclasses import dataclass
from enum import Enum


class PortionSize(str, Enum):
    """Portion variants stored for every daily menu."""

    LARGE = "porsi_besar"
    SMALL = "porsi_kecil"

    @property
    def label(self) -> str:
        return "Porsi Besar" if self is PortionSize.LARGE else "Porsi Kecil"


@dataclass(frozen=True)
class PortionInfo:
    """Absolute nutrient values for one portion of a menu."""

    calories: float
    protein: float
    carbohydrates: float
    fat: float
    fiber: float


@dataclass(frozen=True)
class DailyMenuRow:
    """Single stored menu row (one per portion size)."""

    menu_name: str
    portion_size: PortionSize
    items: list[str]
    portion: PortionInfo
    image_url: str | None = None


@dataclass(frozen=True)
class DailyMenu:
    """Menu with its item list and both portion variants, when present."""

    menu_name: str
    items: list[str]
    large: PortionInfo | None = None
    small: PortionInfo | None = None
    image_url: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.large is not None and self.small is not None


@dataclass(frozen=True)
class MatchedDailyMenu:
    """Best matching menu for a tray, with its calorie-closest portion."""

    menu_name: str
    items: list[str]
    match_score: float
    large: PortionInfo
    small: PortionInfo
    closest_portion: PortionSize
    closest_portion_label: str
    calorie_deviation_pct: float
