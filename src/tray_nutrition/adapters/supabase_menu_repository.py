"""Supabase implementation for daily menus."""

import json
import logging
from dataclasses import dataclass

from supabase import Client

from tray_nutrition.adapters.supabase_errors import data_source
from tray_nutrition.domain.menus import DailyMenuRow, PortionInfo, PortionSize
from tray_nutrition.services.menus import DailyMenuRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseDailyMenuRepository(DailyMenuRepository):
    """Reads `daily_menus`, one row per menu and portion size."""

    client: Client

    def list_menu_rows(self) -> list[DailyMenuRow]:
        """Return every menu row in insertion order."""
        with data_source("Daily menu listing"):
            response = (
                self.client.table("daily_menus").select("*").order("id").execute()
            )
        rows = []
        for raw in response.data or []:
            row = _parse_row(raw)
            if row is not None:
                rows.append(row)
        return rows


def _parse_row(row: dict[str, object]) -> DailyMenuRow | None:
    try:
        portion_size = PortionSize(row.get("portion_size"))
    except ValueError:
        _logger.warning(
            "Ignoring menu row %s with unknown portion size %r",
            row.get("id"),
            row.get("portion_size"),
        )
        return None
    return DailyMenuRow(
        menu_name=str(row.get("menu_name", "")),
        portion_size=portion_size,
        items=parse_menu_items(row.get("menu_items")),
        portion=PortionInfo(
            calories=float(row.get("calories") or 0),
            protein=float(row.get("protein") or 0),
            carbohydrates=float(row.get("carbohydrates") or 0),
            fat=float(row.get("fat") or 0),
            fiber=float(row.get("fiber") or 0),
        ),
        image_url=row.get("image_url"),
    )


def parse_menu_items(raw: object) -> list[str]:
    """Parse the stored item list (a JSON array, possibly JSON-encoded text)."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("Ignoring malformed menu item list: %r", raw)
            return []
    if not isinstance(raw, list):
        return []
    return [str(item) for item in raw if item is not None]
