"""Configuration management for the newshub scoring engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import LexiconError

DEFAULT_LEXICON_PATH = Path(__file__).parent / "lexicon.yaml"


class Settings(BaseSettings):
    """Main application settings."""

    # ── Lexicon ────────────────────────────────────────────────────────────
    lexicon_path: Path | None = Field(
        None, description="Override for the keyword lexicon YAML file"
    )

    # ── Scoring Weights ────────────────────────────────────────────────────
    title_weight: float = Field(0.8, description="Share of the title keyword score")
    summary_weight: float = Field(0.2, description="Share of the summary keyword score")
    source_bonus: float = Field(0.15, description="Bonus fraction for high-quality sources")
    high_quality_sources: list[str] = Field(
        default_factory=lambda: [
            "Hacker News",
            "ArXiv",
            "Reddit r/MachineLearning",
            "Reddit r/artificial",
            "TechCrunch",
            "VentureBeat",
            "MIT Technology Review",
            "Wired",
        ],
        description="Sources that earn the source bonus",
    )
    aggregator_sources: list[str] = Field(
        default_factory=lambda: ["Hacker News", "Reddit", "ArXiv"],
        description="Forum/aggregator sources that get a score floor",
    )

    # ── Escalation Tiers ───────────────────────────────────────────────────
    notable_threshold: int = Field(140, description="Totals above this get the notable boost")
    notable_multiplier: float = Field(1.15, description="Notable tier multiplier")
    strong_threshold: int = Field(160, description="Totals above this get the strong boost")
    strong_multiplier: float = Field(1.25, description="Strong tier multiplier")
    aggregator_floor: int = Field(120, description="Minimum score for aggregator sources")

    # ── Relevance & Social Signals ─────────────────────────────────────────
    citation_limit: int = Field(3, description="Citations attached per digest topic")
    social_boost_per_match: float = Field(5.0, description="Boost percent per social keyword match")
    social_boost_cap: float = Field(50.0, description="Maximum social boost percent")
    default_base_score: int = Field(100, description="Base score for items never scored")

    # ── Batch Processing ───────────────────────────────────────────────────
    batch_size: int = Field(50, description="Items written per batch")
    global_parallel: int = Field(10, description="Concurrent store writes")
    retry_attempts: int = Field(3, description="Retries for a failed store write")
    backoff_factor: float = Field(2.0, description="Retry backoff multiplier")

    # ── Logging ────────────────────────────────────────────────────────────
    log_level: str = Field("INFO", description="Log level")
    json_logging: bool = Field(True, description="Enable JSON logging")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("title_weight", "summary_weight", "source_bonus")
    @classmethod
    def validate_weights(cls, v: float) -> float:
        """Validate weight values are between 0 and 1."""
        if not 0 <= v <= 1:
            raise ValueError("Weight must be between 0 and 1")
        return v

    @field_validator("batch_size", "global_parallel")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_tiers(self) -> "Settings":
        """Strong tier must sit above the notable tier."""
        if self.strong_threshold <= self.notable_threshold:
            raise ValueError("strong_threshold must be greater than notable_threshold")
        return self


class LexiconFile(BaseModel):
    """Shape of the lexicon YAML artifact."""
    keyword_weights: dict[str, int]
    impact_keywords: list[str] = Field(default_factory=list)
    breaking_keywords: list[str] = Field(default_factory=list)

    @field_validator("keyword_weights")
    @classmethod
    def validate_not_empty(cls, v: dict[str, int]) -> dict[str, int]:
        if not v:
            raise ValueError("keyword_weights must not be empty")
        return v


class LexiconConfig:
    """Lexicon artifact loader."""

    def __init__(self, config_path: str | Path = DEFAULT_LEXICON_PATH):
        self.config_path = Path(config_path)
        self._config: dict[str, Any] = {}
        self.load_config()

    def load_config(self) -> None:
        """Load the lexicon from its YAML file."""
        if not self.config_path.exists():
            raise LexiconError(f"Lexicon file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            self._config = LexiconFile(**raw).model_dump()
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise LexiconError(f"Invalid lexicon file {self.config_path}: {e}") from e

    def get_keyword_weights(self) -> dict[str, int]:
        """Get the phrase -> weight table."""
        return dict(self._config["keyword_weights"])

    def get_impact_keywords(self) -> list[str]:
        return list(self._config["impact_keywords"])

    def get_breaking_keywords(self) -> list[str]:
        return list(self._config["breaking_keywords"])

    def as_mapping(self) -> dict[str, Any]:
        return dict(self._config)


# Global instances
settings = Settings()
_lexicon = None


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def get_lexicon():
    """Get the process-wide lexicon, loading it on first use."""
    global _lexicon
    if _lexicon is None:
        from .processing.lexicon import Lexicon

        path = settings.lexicon_path or DEFAULT_LEXICON_PATH
        _lexicon = Lexicon.from_mapping(LexiconConfig(path).as_mapping())
    return _lexicon


def validate_config(settings: Settings) -> bool:
    """Validate configuration completeness."""
    try:
        weight_sum = settings.title_weight + settings.summary_weight
        if abs(weight_sum - 1.0) > 0.01:
            raise ValueError(f"Title/summary weights sum to {weight_sum}, should be 1.0")

        LexiconConfig(settings.lexicon_path or DEFAULT_LEXICON_PATH)

        return True

    except (ValueError, LexiconError) as e:
        print(f"Configuration validation failed: {e}")
        return False
