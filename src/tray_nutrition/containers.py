"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from tray_nutrition.adapters.detector_client import (
    DetectorClient,
    HttpxDetectorClient,
)
from tray_nutrition.adapters.supabase_detection_repository import (
    SupabaseDetectionRepository,
)
from tray_nutrition.adapters.supabase_image_storage import SupabaseImageStorage
from tray_nutrition.adapters.supabase_menu_repository import (
    SupabaseDailyMenuRepository,
)
from tray_nutrition.adapters.supabase_nutrition_repository import (
    SupabaseNutritionCatalog,
)
from tray_nutrition.config import Settings
from tray_nutrition.services.cache import InMemoryCache
from tray_nutrition.services.dashboard import DashboardService
from tray_nutrition.services.detection import DetectionService
from tray_nutrition.services.menus import MenuMatcher
from tray_nutrition.services.nutrition import NutritionLookupService, NutritionMapper


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    detector_client: DetectorClient
    lookup_service: NutritionLookupService
    nutrition_mapper: NutritionMapper
    menu_matcher: MenuMatcher
    detection_service: DetectionService
    dashboard_service: DashboardService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    catalog = SupabaseNutritionCatalog(supabase_client)
    menu_repository = SupabaseDailyMenuRepository(supabase_client)
    detection_repository = SupabaseDetectionRepository(supabase_client)
    storage = SupabaseImageStorage(
        supabase_client, bucket=resolved_settings.storage_bucket
    )
    detector_client = HttpxDetectorClient.create(
        base_url=resolved_settings.detector_api_url,
        timeout_seconds=resolved_settings.detector_timeout_seconds,
    )
    lookup_service = NutritionLookupService(
        catalog=catalog,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.lookup_cache_ttl_seconds,
    )
    nutrition_mapper = NutritionMapper(lookup_service)
    menu_matcher = MenuMatcher(
        menu_repository, threshold=resolved_settings.menu_match_threshold
    )
    detection_service = DetectionService(
        detector=detector_client,
        mapper=nutrition_mapper,
        menu_matcher=menu_matcher,
        repository=detection_repository,
        storage=storage,
    )
    dashboard_service = DashboardService(
        repository=detection_repository,
        lookup_service=lookup_service,
    )

    async def close_resources() -> None:
        await detector_client.close()

    return AppContainer(
        settings=resolved_settings,
        detector_client=detector_client,
        lookup_service=lookup_service,
        nutrition_mapper=nutrition_mapper,
        menu_matcher=menu_matcher,
        detection_service=detection_service,
        dashboard_service=dashboard_service,
        close_resources=close_resources,
    )
