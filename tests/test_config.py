from __future__ import annotations

from pathlib import Path

import pytest

from lightsync.core.config import load_config
from lightsync.core.errors import ConfigLoadError, ConfigValidationError
from lightsync.core.model import FailurePolicy


def _write_config(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_load_minimal_config_applies_defaults(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "lightsync.yaml",
        """
prefix: "ELK-"
num_lights: 2
light_wait_millis: 5000
capture_wait_millis: 100
""",
    )

    config = load_config(path)
    assert config.prefix == "ELK-"
    assert config.num_lights == 2
    assert config.light_wait_millis == 5000
    assert config.capture_wait_millis == 100
    assert config.connect_timeout_s == 10.0
    assert config.write_timeout_s == 2.0
    assert config.failure_policy is FailurePolicy.STRICT
    assert config.brightness is None
    assert config.source == path


def test_load_full_config(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "lightsync.yaml",
        """
prefix: "Lamp"
num_lights: 3
light_wait_millis: 2000
capture_wait_millis: 50
connect_timeout_s: 4.5
write_timeout_s: 0.5
failure_policy: lenient
brightness: 128
capture_downscale: 32
""",
    )

    config = load_config(path)
    assert config.connect_timeout_s == 4.5
    assert config.write_timeout_s == 0.5
    assert config.failure_policy is FailurePolicy.LENIENT
    assert config.brightness == 128
    assert config.capture_downscale == 32


def test_missing_required_keys_rejected(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "lightsync.yaml", "prefix: Lamp\nnum_lights: 1\n")
    with pytest.raises(ConfigValidationError) as exc:
        load_config(path)
    assert "required property" in str(exc.value)


@pytest.mark.parametrize(
    "extra",
    [
        "num_lights: 0",
        "failure_policy: sometimes",
        "brightness: 300",
        "unknown_key: 1",
    ],
)
def test_invalid_values_rejected(tmp_path: Path, extra: str) -> None:
    base = {
        "prefix": "prefix: Lamp",
        "num_lights": "num_lights: 1",
        "light_wait_millis": "light_wait_millis: 100",
        "capture_wait_millis": "capture_wait_millis: 100",
    }
    key = extra.split(":")[0]
    base[key] = extra
    path = _write_config(tmp_path / "lightsync.yaml", "\n".join(base.values()) + "\n")
    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "lightsync.yaml",
        """
prefix: Lamp
prefix: Other
num_lights: 1
light_wait_millis: 100
capture_wait_millis: 100
""",
    )
    with pytest.raises(ConfigValidationError) as exc:
        load_config(path)
    assert "duplicate key 'prefix'" in str(exc.value)


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "lightsync.yaml", "- prefix\n- Lamp\n")
    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_missing_explicit_file_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_config(tmp_path / "nope.yaml")


def test_search_prefers_working_directory(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    body = "num_lights: 1\nlight_wait_millis: 100\ncapture_wait_millis: 100\n"
    _write_config(tmp_path / "cfg" / "lightsync" / "config.yaml", "prefix: FromXdg\n" + body)
    _write_config(tmp_path / "lightsync.yaml", "prefix: FromCwd\n" + body)

    assert load_config().prefix == "FromCwd"


def test_search_falls_back_to_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    _write_config(
        tmp_path / "cfg" / "lightsync" / "config.yaml",
        "prefix: FromXdg\nnum_lights: 1\nlight_wait_millis: 100\ncapture_wait_millis: 100\n",
    )

    assert load_config().prefix == "FromXdg"


def test_no_config_anywhere(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    with pytest.raises(ConfigLoadError) as exc:
        load_config()
    assert "Searched" in str(exc.value)
