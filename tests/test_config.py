"""
Unit tests for pipeline configuration loading and validation.
"""

import json
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from catalog_intake.config import (
    DEFAULT_CONFIG,
    MARKUP_FACTOR,
    PipelineConfig,
    load_config,
    resolve_project_root,
    save_config_to_json,
    validate_config,
)


class TestLoadConfig:
    def test_defaults(self):
        assert DEFAULT_CONFIG.markup_factor == MARKUP_FACTOR == 1.70
        assert DEFAULT_CONFIG.description_max_length == 500
        assert "shipping" in DEFAULT_CONFIG.boilerplate_phrases

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.json") == DEFAULT_CONFIG

    def test_overrides(self, tmp_path):
        path = tmp_path / "pipeline.json"
        path.write_text(
            json.dumps({"pipeline": {"markup_factor": 2.0, "boilerplate_phrases": ["Warranty"]}}),
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.markup_factor == 2.0
        assert config.boilerplate_phrases == ("warranty",)
        assert config.max_bullets == DEFAULT_CONFIG.max_bullets

    def test_malformed_file_warns(self, tmp_path):
        path = tmp_path / "pipeline.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.warns(UserWarning):
            config = load_config(path)
        assert config == DEFAULT_CONFIG

    def test_unknown_key_warns(self):
        with pytest.warns(UserWarning):
            config = DEFAULT_CONFIG.with_overrides({"colour": "blue", "max_bullets": 3})
        assert config.max_bullets == 3

    def test_save_round_trip(self, tmp_path):
        config = PipelineConfig(markup_factor=1.5, default_vendor="House")
        path = save_config_to_json(config, tmp_path / "saved.json")
        assert load_config(path) == config


class TestValidateConfig:
    def test_default_is_valid(self):
        assert validate_config() == (True, [])

    def test_bad_values(self):
        config = PipelineConfig(markup_factor=0, bullet_min_length=300, max_bullets=0)
        is_valid, errors = validate_config(config)
        assert not is_valid
        assert len(errors) == 3

    def test_wrong_types_reported(self, tmp_path):
        path = tmp_path / "pipeline.json"
        path.write_text(
            json.dumps({"pipeline": {"markup_factor": "1.5", "max_bullets": True, "boilerplate_phrases": 3}}),
            encoding="utf-8",
        )
        is_valid, errors = validate_config(load_config(path))
        assert not is_valid
        assert len(errors) == 3
        assert errors[0].startswith("markup_factor must be of type float")

    def test_int_accepted_for_float(self):
        assert validate_config(PipelineConfig(markup_factor=2)) == (True, [])


class TestProjectRoot:
    def test_defaults_to_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CATALOG_INTAKE_HOME", raising=False)
        monkeypatch.chdir(tmp_path)
        assert resolve_project_root() == tmp_path.resolve()

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CATALOG_INTAKE_HOME", str(tmp_path / "home"))
        assert resolve_project_root() == (tmp_path / "home").resolve()
