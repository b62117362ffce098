"""
Configuration Management for the WIC Shopping Assistant

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The benefit allowance table is NOT configuration - it lives with the
ledger rules because its priority order is part of the behavior.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets document store and APL catalog configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    users_sheet_name: str = Field(
        default="Users",
        description="Name of the sheet holding one ledger document per user"
    )
    apl_sheet_name: str = Field(
        default="APL",
        description="Name of the sheet holding the Approved Product List"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class HealthScoreSettings(BaseSettings):
    """
    Weights for the nutrition health score.

    Penalties apply to energy, sugar, sodium and saturated+trans fat.
    Bonuses apply to fiber and protein. Lower score = healthier.
    """

    model_config = SettingsConfigDict(
        env_prefix="HEALTH_SCORE_",
        extra="ignore"
    )

    energy_weight: float = Field(default=0.01, ge=0.0)
    sugar_weight: float = Field(default=1.0, ge=0.0)
    sodium_weight: float = Field(default=0.005, ge=0.0)
    fat_weight: float = Field(
        default=2.0,
        ge=0.0,
        description="Applied to saturated plus trans fat grams"
    )
    fiber_weight: float = Field(default=1.5, ge=0.0)
    protein_weight: float = Field(default=1.0, ge=0.0)


class AppSettings(BaseSettings):
    """
    Main application settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="WIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Catalog lookups
    substitutes_limit: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Default number of eligible substitutes to suggest"
    )
    healthier_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Default number of healthier alternatives to suggest"
    )

    # Receipt parsing
    upc_length: int = Field(
        default=12,
        ge=6,
        le=14,
        description="Digit count of a UPC printed on a receipt"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def health_score(self) -> HealthScoreSettings:
        return HealthScoreSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries describing failures.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "health_score", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
