"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_trends.adapters.supabase_stats_repository import SupabaseStatsRepository
from nutrition_trends.adapters.supabase_weight_repository import (
    SupabaseWeightLogRepository,
)
from nutrition_trends.config import Settings
from nutrition_trends.services.nutrition_trends import NutritionTrendService
from nutrition_trends.services.weights import WeightLogService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    weight_service: WeightLogService
    nutrition_service: NutritionTrendService
    close_resources: Callable[[], None]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    weight_service = WeightLogService(
        repository=SupabaseWeightLogRepository(supabase_client),
        volatility_threshold=resolved_settings.weight_volatility_threshold,
        stability_threshold=resolved_settings.weight_stability_threshold,
        empty_range_fallback=resolved_settings.empty_range_fallback,
        engine_ttl_seconds=resolved_settings.engine_ttl_seconds,
        max_cached_users=resolved_settings.max_cached_engines,
    )
    nutrition_service = NutritionTrendService(
        repository=SupabaseStatsRepository(supabase_client),
        volatility_threshold=resolved_settings.nutrition_volatility_threshold,
        stability_threshold=resolved_settings.nutrition_stability_threshold,
        empty_range_fallback=resolved_settings.empty_range_fallback,
        engine_ttl_seconds=resolved_settings.engine_ttl_seconds,
        max_cached_engines=resolved_settings.max_cached_engines,
    )

    def close_resources() -> None:
        weight_service.clear()
        nutrition_service.clear()

    return AppContainer(
        settings=resolved_settings,
        weight_service=weight_service,
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )
