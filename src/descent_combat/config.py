"""Engine configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (prefix DESCENT_)."""

    model_config = SettingsConfigDict(
        env_prefix="DESCENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Hand and energy
    hand_size: int = Field(default=5, ge=0)  # Cards drawn at turn start
    max_hand_size: int = Field(default=10, ge=1)  # Draws beyond this are dropped
    energy_per_turn: int = Field(default=3, ge=0)
    max_energy_cap: int = Field(default=10, ge=0)

    # Player defaults
    max_potion_slots: int = Field(default=3, ge=0)
    starting_max_hp: int = Field(default=80, gt=0)
    starting_gold: int = Field(default=99, ge=0)

    # Enemies
    enemy_hp_variance: float = Field(default=0.1, ge=0, lt=1)  # +/- fraction of template HP
    move_history_size: int = Field(default=3, ge=1)

    # Safety
    max_events_per_action: int = Field(default=1000, ge=1)  # Relic cascade limit
    check_invariants: bool = False  # Assert pile/HP invariants after every action


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
