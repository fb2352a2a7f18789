"""Daily menu matching."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol

from tray_nutrition.domain.menus import (
    DailyMenu,
    DailyMenuRow,
    MatchedDailyMenu,
    PortionInfo,
    PortionSize,
)
from tray_nutrition.services.estimation import round_half_up

_logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.5


class DailyMenuRepository(Protocol):
    """Read interface for predefined daily menus."""

    def list_menu_rows(self) -> list[DailyMenuRow]:
        """Return every stored menu row, one per menu and portion size."""


@dataclass
class MenuMatcher:
    """Find the predefined menu that best explains a detected tray."""

    repository: DailyMenuRepository
    threshold: float = DEFAULT_MATCH_THRESHOLD

    def list_menus(self) -> list[DailyMenu]:
        """Return menus grouped by name, including incomplete ones."""
        return group_menu_rows(self.repository.list_menu_rows())

    def match_menu(
        self, detected_labels: list[str], estimated_total_calories: float
    ) -> MatchedDailyMenu | None:
        """Return the best matching complete menu, or None below the threshold."""
        detected = {_normalize(label) for label in detected_labels}
        best: DailyMenu | None = None
        best_score = 0.0
        for menu in self.list_menus():
            if not menu.is_complete:
                _logger.debug("Skipping menu %r without both portions", menu.menu_name)
                continue
            score = match_score(menu.items, detected)
            if best is None or score > best_score:
                best = menu
                best_score = score

        if best is None or best_score < self.threshold:
            return None
        return _build_match(best, best_score, estimated_total_calories)


def group_menu_rows(rows: list[DailyMenuRow]) -> list[DailyMenu]:
    """Group per-portion rows into menus, keeping first-seen menu order."""
    grouped: dict[str, DailyMenu] = {}
    for row in rows:
        current = grouped.get(row.menu_name)
        if current is None:
            current = DailyMenu(
                menu_name=row.menu_name,
                items=list(row.items),
                image_url=row.image_url,
            )
        if row.portion_size is PortionSize.LARGE:
            current = replace(current, large=row.portion)
        else:
            current = replace(current, small=row.portion)
        if current.image_url is None and row.image_url:
            current = replace(current, image_url=row.image_url)
        grouped[row.menu_name] = current
    return list(grouped.values())


def match_score(menu_items: list[str], detected: set[str]) -> float:
    """Fraction of a menu's items present among the detected labels."""
    if not menu_items:
        return 0.0
    matched = sum(1 for item in menu_items if _normalize(item) in detected)
    return matched / len(menu_items)


def closest_portion(
    large: PortionInfo, small: PortionInfo, calories: float
) -> PortionSize:
    """Pick the portion whose calories are closest; ties go to the large one."""
    if abs(calories - small.calories) < abs(calories - large.calories):
        return PortionSize.SMALL
    return PortionSize.LARGE


def calorie_deviation(estimated: float, reference: float) -> float:
    """Signed percentage deviation of `estimated` from `reference`."""
    if reference == 0:
        return 0.0
    return round_half_up((estimated - reference) / reference * 100, 1)


def _build_match(
    menu: DailyMenu, score: float, estimated_total_calories: float
) -> MatchedDailyMenu:
    large = menu.large
    small = menu.small
    if large is None or small is None:
        raise ValueError(f"Menu {menu.menu_name!r} is missing a portion")
    portion_size = closest_portion(large, small, estimated_total_calories)
    portion = large if portion_size is PortionSize.LARGE else small
    return MatchedDailyMenu(
        menu_name=menu.menu_name,
        items=menu.items,
        match_score=score,
        large=large,
        small=small,
        closest_portion=portion_size,
        closest_portion_label=portion_size.label,
        calorie_deviation_pct=calorie_deviation(
            estimated_total_calories, portion.calories
        ),
    )


def _normalize(value: str) -> str:
    return value.strip().lower()
