"""Tests for configuration module."""

import pytest
import yaml

from newshub.config import DEFAULT_LEXICON_PATH, LexiconConfig, Settings, get_lexicon, validate_config
from newshub.exceptions import LexiconError


def test_settings_defaults():
    """Test settings defaults match the scoring constants."""
    settings = Settings()

    assert settings.title_weight == 0.8
    assert settings.summary_weight == 0.2
    assert settings.source_bonus == 0.15
    assert settings.notable_threshold == 140
    assert settings.strong_threshold == 160
    assert settings.aggregator_floor == 120
    assert "TechCrunch" in settings.high_quality_sources
    assert settings.aggregator_sources == ["Hacker News", "Reddit", "ArXiv"]


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("AGGREGATOR_FLOOR", "90")
    monkeypatch.setenv("CITATION_LIMIT", "5")

    settings = Settings()

    assert settings.aggregator_floor == 90
    assert settings.citation_limit == 5


def test_settings_weight_validation():
    """Test weight validation."""
    with pytest.raises(ValueError, match="Weight must be between 0 and 1"):
        Settings(title_weight=1.5)


def test_settings_tier_validation():
    with pytest.raises(ValueError, match="strong_threshold must be greater"):
        Settings(notable_threshold=160, strong_threshold=140)


def test_settings_batch_size_validation():
    with pytest.raises(ValueError, match="at least 1"):
        Settings(batch_size=0)


def test_lexicon_config_loading():
    """Test the packaged lexicon artifact loads."""
    config = LexiconConfig(DEFAULT_LEXICON_PATH)

    weights = config.get_keyword_weights()
    assert weights["breaking"] == 170
    assert weights["gpt-5"] == 160
    assert weights["ai safety"] == 140
    assert "growth" in config.get_impact_keywords()
    assert "launches" in config.get_breaking_keywords()


def test_lexicon_config_missing_file(temp_dir):
    with pytest.raises(LexiconError, match="not found"):
        LexiconConfig(temp_dir / "missing.yaml")


def test_lexicon_config_invalid_shape(temp_dir):
    path = temp_dir / "lexicon.yaml"
    path.write_text(yaml.safe_dump({"keyword_weights": {}}))

    with pytest.raises(LexiconError, match="Invalid lexicon"):
        LexiconConfig(path)


def test_lexicon_config_invalid_weight(temp_dir):
    path = temp_dir / "lexicon.yaml"
    path.write_text(yaml.safe_dump({"keyword_weights": {"openai": "lots"}}))

    with pytest.raises(LexiconError):
        LexiconConfig(path)


def test_get_lexicon_is_cached():
    assert get_lexicon() is get_lexicon()
    assert get_lexicon().weights["openai"] == 150


def test_config_validation():
    """Test configuration validation."""
    assert validate_config(Settings()) is True


def test_config_validation_invalid_weights():
    """Test validation fails with weights that don't sum to 1.0."""
    assert validate_config(Settings(title_weight=0.5, summary_weight=0.2)) is False


def test_config_validation_missing_lexicon(temp_dir):
    assert validate_config(Settings(lexicon_path=temp_dir / "missing.yaml")) is False
