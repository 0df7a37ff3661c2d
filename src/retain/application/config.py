from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from retain.domain import constants
from retain.domain.models import ReviewQuality

CONFIG_FILES = (
    Path(".config/retain/config.toml"),
    Path(".retain.toml"),
)


class EngineConfig(BaseSettings):
    """
    Scheduling parameters for the engine.
    Supports loading from:
    1. Config file (~/.config/retain/config.toml or ~/.retain.toml)
    2. Environment variables (RETAIN_*)
    3. Manual overrides (CLI / constructor)

    Invalid combinations are rejected when the object is built, never mid-session.
    """

    model_config = SettingsConfigDict(
        env_prefix="RETAIN_",
        extra="ignore",
        frozen=True,
    )

    # Steps (minutes)
    learning_steps: list[int] = Field(default_factory=lambda: list(constants.LEARNING_STEPS))
    relearning_steps: list[int] = Field(
        default_factory=lambda: list(constants.RELEARNING_STEPS)
    )

    # Intervals (days)
    graduating_interval: int = constants.GRADUATING_INTERVAL
    easy_interval: int = constants.EASY_INTERVAL
    maximum_interval: int = constants.MAXIMUM_INTERVAL

    # Ease factor
    ease_delta_again: float = constants.EASE_DELTA_AGAIN
    ease_delta_hard: float = constants.EASE_DELTA_HARD
    ease_delta_good: float = constants.EASE_DELTA_GOOD
    ease_delta_easy: float = constants.EASE_DELTA_EASY
    minimum_ease: float = constants.MINIMUM_EASE
    maximum_ease: float = constants.MAXIMUM_EASE
    starting_ease: float = constants.STARTING_EASE

    # Global multiplier, user-tunable
    interval_modifier: float = constants.INTERVAL_MODIFIER

    # Session size used by the CLI (None = no cap)
    queue_limit: int | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Earlier sources win: overrides, then env, then the first existing file
        toml_file = find_config_file()
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("learning_steps", "relearning_steps")
    @classmethod
    def validate_steps(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("at least one step is required")
        if any(step <= 0 for step in v):
            raise ValueError("steps must be positive minute counts")
        if any(later <= earlier for earlier, later in zip(v, v[1:])):
            raise ValueError("steps must be strictly increasing")
        return v

    @field_validator("graduating_interval", "easy_interval", "maximum_interval")
    @classmethod
    def validate_day_interval(cls, v: int) -> int:
        if v < 1:
            raise ValueError("day intervals must be at least 1")
        return v

    @field_validator("interval_modifier")
    @classmethod
    def validate_interval_modifier(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("interval_modifier must be positive")
        return v

    @field_validator("queue_limit")
    @classmethod
    def validate_queue_limit(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("queue_limit cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_ease_bounds(self) -> "EngineConfig":
        if self.minimum_ease <= 0:
            raise ValueError("minimum_ease must be positive")
        if self.minimum_ease > self.maximum_ease:
            raise ValueError(
                f"minimum_ease ({self.minimum_ease}) exceeds maximum_ease ({self.maximum_ease})"
            )
        if not self.minimum_ease <= self.starting_ease <= self.maximum_ease:
            raise ValueError("starting_ease must lie within the ease bounds")
        return self

    @property
    def ease_bounds(self) -> tuple[float, float]:
        return (self.minimum_ease, self.maximum_ease)

    @property
    def ease_deltas(self) -> dict[ReviewQuality, float]:
        return {
            ReviewQuality.AGAIN: self.ease_delta_again,
            ReviewQuality.HARD: self.ease_delta_hard,
            ReviewQuality.GOOD: self.ease_delta_good,
            ReviewQuality.EASY: self.ease_delta_easy,
        }

    def clamp_ease(self, ease: float) -> float:
        return max(self.minimum_ease, min(self.maximum_ease, ease))


class StaticEngineConfig(EngineConfig):
    """
    EngineConfig that only reads constructor arguments.

    Never consults the environment or config files, so results built on it
    depend on nothing but their inputs.
    """

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)


DEFAULT_CONFIG = StaticEngineConfig()


def find_config_file() -> Path | None:
    """Return the first existing config file under the user's home, if any."""
    home = Path.home()
    for candidate in CONFIG_FILES:
        path = home / candidate
        if path.exists():
            return path
    return None


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> EngineConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in EngineConfig
    2. ~/.config/retain/config.toml (if exists)
    3. Environment variables (RETAIN_*)
    4. cli_overrides (None values are ignored)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return EngineConfig(**overrides)
