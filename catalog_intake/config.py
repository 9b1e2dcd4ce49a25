"""
Configuration Module - Centralized Configuration Hub

Contains all configurable parameters for the intake pipeline:
- Directory paths
- Pricing markup applied by the gate evaluator
- Boilerplate phrases and length limits used by the content cleaner
- Identifier-list detection thresholds
- Canonical field defaults

Defaults can be overridden from config/pipeline.json (see bottom of file).
"""

from __future__ import annotations

import json
import os
import warnings
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any


# ============================================================================
# DIRECTORY PATHS
# ============================================================================

def resolve_project_root() -> Path:
    """Working root for output/ and config/: CATALOG_INTAKE_HOME, else the current directory."""
    return Path(os.environ.get("CATALOG_INTAKE_HOME") or Path.cwd()).resolve()


PROJECT_ROOT = resolve_project_root()

# Default output directory for exported workbooks
OUTPUT_PATH = PROJECT_ROOT / "output"

# Configuration file directory
CONFIG_DIR = PROJECT_ROOT / "config"
PIPELINE_CONFIG_FILE = CONFIG_DIR / "pipeline.json"


# ============================================================================
# PRICING
# ============================================================================
# Sell price = cost price x MARKUP_FACTOR (70% markup)

MARKUP_FACTOR = 1.70


# ============================================================================
# CONTENT CLEANING
# ============================================================================
# A boilerplate phrase found past BOILERPLATE_MIN_OFFSET truncates the
# description right before the phrase.

BOILERPLATE_PHRASES = (
    "about us",
    "shipping",
    "returns",
    "payment",
    "contact us",
    "customer satisfaction",
    "we offer the best",
    "copyright",
)


# ============================================================================
# EXPORT FORMAT SETTINGS
# ============================================================================

OUTPUT_SETTINGS = {
    "workbook_name_pattern": "intake_{stem}_{timestamp}.xlsx",
    "timestamp_format": "%Y%m%d_%H%M%S",
    "currency_format": "#,##0.00",
    "percentage_format": "0.0",
    "integer_format": "#,##0",
}

GATE_COLORS = {
    "pass": "#4ECDC4",
    "warn": "#FFE66D",
    "fail": "#FF6B6B",
}


@dataclass(frozen=True)
class PipelineConfig:
    """Tunable constants shared by the cleaner, normalizer and gate evaluator."""

    markup_factor: float = MARKUP_FACTOR
    boilerplate_phrases: tuple[str, ...] = BOILERPLATE_PHRASES
    boilerplate_min_offset: int = 100
    description_max_length: int = 500
    clean_min_length: int = 10
    bullet_min_length: int = 10
    bullet_max_length: int = 300
    max_bullets: int = 6
    bullet_separator: str = " | "

    identifier_sample_rows: int = 30
    identifier_list_min_matches: int = 10
    identifier_list_max_columns: int = 4

    vendor_max_length: int = 30
    category_max_length: int = 40
    default_vendor: str = "Unknown"
    default_category: str = "General"
    default_status: str = "Active"
    default_quantity: int = 999
    fallback_title: str = "Unknown Product"
    fallback_source_label: str = "Amazon"
    identifier_list_status: str = "Draft"

    canonical_field_count: int = 11

    def with_overrides(self, overrides: dict[str, Any]) -> PipelineConfig:
        """Return a copy with known keys replaced; unknown keys are ignored with a warning."""
        known = {f.name for f in fields(self)}
        clean: dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                warnings.warn(f"Ignoring unknown pipeline setting: {key}")
                continue
            if key == "boilerplate_phrases" and isinstance(value, (list, tuple)):
                value = tuple(str(v).lower() for v in value)
            clean[key] = value
        return replace(self, **clean)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["boilerplate_phrases"] = list(self.boilerplate_phrases)
        return data


DEFAULT_CONFIG = PipelineConfig()


# ============================================================================
# CONFIG LOADING AND VALIDATION
# ============================================================================

def _load_pipeline_overrides_from_json(path: Path) -> dict[str, Any]:
    """Load the "pipeline" overrides object from a JSON file."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        overrides = data.get("pipeline", {})
        if not isinstance(overrides, dict):
            raise ValueError("'pipeline' must be an object")
        return overrides
    except Exception as e:
        # Fall back to defaults on a malformed file
        warnings.warn(f"Failed to load pipeline config from {path}: {e}. Using defaults.")
        return {}


def load_config(path: Path | str | None = None) -> PipelineConfig:
    """
    Build the pipeline configuration.

    Args:
        path: Optional JSON file. If None, uses config/pipeline.json when present.

    Returns:
        PipelineConfig with JSON overrides applied on top of the defaults.
    """
    config_path = Path(path) if path else PIPELINE_CONFIG_FILE
    overrides = _load_pipeline_overrides_from_json(config_path)
    if not overrides:
        return DEFAULT_CONFIG
    return DEFAULT_CONFIG.with_overrides(overrides)


def _check_field_types(config: PipelineConfig) -> list[str]:
    """Compare every field against the type of its default."""
    errors = []
    for f in fields(config):
        value = getattr(config, f.name)
        expected = type(getattr(DEFAULT_CONFIG, f.name))
        if isinstance(value, bool):
            ok = expected is bool
        elif expected is float:
            ok = isinstance(value, (int, float))
        elif expected is tuple:
            ok = isinstance(value, tuple)
        else:
            ok = isinstance(value, expected)
        if not ok:
            errors.append(f"{f.name} must be of type {expected.__name__}: {value!r}")
    return errors


def validate_config(config: PipelineConfig | None = None) -> tuple[bool, list[str]]:
    """
    Validate configuration settings.

    Returns:
        Tuple of (is_valid, list_of_errors).
    """
    config = config or DEFAULT_CONFIG
    errors = []

    type_errors = _check_field_types(config)
    if type_errors:
        return False, type_errors

    if config.markup_factor <= 0:
        errors.append(f"markup_factor must be positive: {config.markup_factor}")

    for name in (
        "description_max_length",
        "bullet_max_length",
        "max_bullets",
        "identifier_sample_rows",
        "identifier_list_max_columns",
        "vendor_max_length",
        "category_max_length",
    ):
        value = getattr(config, name)
        if not isinstance(value, int) or value <= 0:
            errors.append(f"{name} must be a positive integer: {value}")

    if config.bullet_min_length >= config.bullet_max_length:
        errors.append(
            f"bullet_min_length ({config.bullet_min_length}) must be below "
            f"bullet_max_length ({config.bullet_max_length})"
        )

    if config.boilerplate_min_offset < 0:
        errors.append(f"boilerplate_min_offset cannot be negative: {config.boilerplate_min_offset}")

    if not all(isinstance(p, str) and p.strip() for p in config.boilerplate_phrases):
        errors.append("boilerplate_phrases must be non-empty strings")

    return len(errors) == 0, errors


def ensure_directories() -> None:
    """Create required directories if they don't exist."""
    OUTPUT_PATH.mkdir(parents=True, exist_ok=True)
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def save_config_to_json(config: PipelineConfig | None = None, filepath: Path | str | None = None) -> Path:
    """
    Save configuration to a JSON file.

    Args:
        config: Configuration to save. Defaults to DEFAULT_CONFIG.
        filepath: Output path. If None, saves to CONFIG_DIR/pipeline.json.

    Returns:
        Path written.
    """
    if filepath is None:
        ensure_directories()
        filepath = PIPELINE_CONFIG_FILE

    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump({"pipeline": (config or DEFAULT_CONFIG).to_dict()}, f, indent=2)
    return filepath
