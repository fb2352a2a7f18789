"""Staff dashboard endpoints with simple token auth."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from tray_nutrition.api.serializers import (
    serialize_detail,
    serialize_food,
    serialize_food_page,
    serialize_menu,
    serialize_page,
    serialize_stats,
)

if TYPE_CHECKING:
    from tray_nutrition.containers import AppContainer

router = APIRouter(prefix="/api", tags=["staff"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_staff(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid staff token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/detections", dependencies=[Depends(require_staff)])
async def list_detections(
    request: Request,
    page: int = 1,
    limit: int = 20,
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
) -> dict[str, object]:
    """Return detections newest first, optionally within a date range."""
    container: AppContainer = request.app.state.container
    result = container.detection_service.list_detections(
        page=page, limit=limit, date_from=date_from, date_to=date_to
    )
    return serialize_page(result)


@router.get("/detections/{detection_id}", dependencies=[Depends(require_staff)])
async def detection_detail(detection_id: int, request: Request) -> dict[str, object]:
    """Return one detection with its items."""
    container: AppContainer = request.app.state.container
    detail = container.detection_service.get_detection(detection_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return serialize_detail(detail)


@router.delete("/detections/{detection_id}", dependencies=[Depends(require_staff)])
async def delete_detection(detection_id: int, request: Request) -> dict[str, bool]:
    """Delete a detection and its items."""
    container: AppContainer = request.app.state.container
    container.detection_service.delete_detection(detection_id)
    return {"success": True}


@router.get("/dashboard/stats", dependencies=[Depends(require_staff)])
async def dashboard_stats(request: Request) -> dict[str, object]:
    """Return dashboard summary numbers."""
    container: AppContainer = request.app.state.container
    return serialize_stats(container.dashboard_service.get_stats())


@router.get("/nutrition", dependencies=[Depends(require_staff)])
async def list_nutrition(
    request: Request, search: str | None = None, page: int = 1, limit: int = 50
) -> dict[str, object]:
    """Return a page of the nutrition catalog, optionally filtered by name."""
    container: AppContainer = request.app.state.container
    result = container.lookup_service.search(search, page=page, limit=limit)
    return serialize_food_page(result)


@router.get("/nutrition/{food_id}", dependencies=[Depends(require_staff)])
async def nutrition_detail(food_id: int, request: Request) -> dict[str, object]:
    """Return one catalog entry."""
    container: AppContainer = request.app.state.container
    food = container.lookup_service.get_food(food_id)
    if food is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return serialize_food(food)


@router.get("/menus", dependencies=[Depends(require_staff)])
async def list_menus(request: Request) -> dict[str, object]:
    """Return daily menus with both portion variants."""
    container: AppContainer = request.app.state.container
    menus = container.menu_matcher.list_menus()
    return {"data": [serialize_menu(menu) for menu in menus]}
