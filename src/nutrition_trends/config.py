"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_trends.domain.chart import ChartGeometry

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    environment: str = _ENVIRONMENT
    default_timezone: str = "UTC"
    empty_range_fallback: bool = True
    weight_volatility_threshold: float = 0.025
    weight_stability_threshold: float = 0.5
    nutrition_volatility_threshold: float = 0.25
    nutrition_stability_threshold: float = 50.0
    engine_ttl_seconds: int = 900
    max_cached_engines: int = 1024
    graph_width: float = 300
    graph_height: float = 260
    graph_padding: float = 40

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def chart_geometry(
        self, width: float | None = None, height: float | None = None
    ) -> ChartGeometry:
        """Return graph geometry, overriding the configured size when given."""
        return ChartGeometry(
            width=width or self.graph_width,
            height=height or self.graph_height,
            padding=self.graph_padding,
        )
