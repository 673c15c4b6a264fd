# tests/unit/core/test_config.py
"""Tests for BridgeSettings and load_settings()."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from graphbridge.core.config import BridgeSettings, load_settings


class TestBridgeSettings:
    def test_defaults(self) -> None:
        settings = BridgeSettings()

        assert settings.max_depth == 64
        assert settings.hook_name == "run"
        assert settings.include_nulls is False
        assert settings.null_empty_collections is True
        assert settings.map_placeholder_key == "key"
        assert settings.root_name == "root"

    def test_settings_are_frozen(self) -> None:
        settings = BridgeSettings()

        with pytest.raises(ValidationError):
            settings.max_depth = 3  # type: ignore[misc]

    def test_max_depth_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="max_depth"):
            BridgeSettings(max_depth=0)

    @pytest.mark.parametrize("name", ["not valid", "1run", ""])
    def test_host_names_must_be_identifiers(self, name: str) -> None:
        with pytest.raises(ValidationError, match="not a valid identifier"):
            BridgeSettings(hook_name=name)

    def test_root_name_validated(self) -> None:
        with pytest.raises(ValidationError, match="not a valid identifier"):
            BridgeSettings(root_name="my-root")


class TestLoadSettings:
    def _write(self, tmp_path: Path, data: dict[str, object]) -> Path:
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump(data))
        return path

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, {"max_depth": 12, "hook_name": "invoke", "include_nulls": True})

        settings = load_settings(path)

        assert settings.max_depth == 12
        assert settings.hook_name == "invoke"
        assert settings.include_nulls is True
        assert settings.root_name == "root"

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = self._write(tmp_path, {"max_depth": 12})
        monkeypatch.setenv("GRAPHBRIDGE_MAX_DEPTH", "7")

        assert load_settings(path).max_depth == 7

    def test_env_var_placeholders_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = self._write(tmp_path, {"root_name": "${DOC_ALIAS:-document}", "hook_name": "${HOOK_ALIAS}"})
        monkeypatch.delenv("DOC_ALIAS", raising=False)
        monkeypatch.setenv("HOOK_ALIAS", "fire")

        settings = load_settings(path)

        assert settings.root_name == "document"
        assert settings.hook_name == "fire"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(tmp_path / "missing.yaml")

    def test_invalid_values_raise_validation_error(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, {"max_depth": -1})

        with pytest.raises(ValidationError):
            load_settings(path)
