import json

import pytest

from klaviyo_prebuild.config import (
    load_props_file,
    merge_android_props,
    merge_ios_props,
    validate_android_config,
    validate_ios_config,
)
from klaviyo_prebuild.errors import ConfigError
from klaviyo_prebuild.types import AndroidProps, IosProps


def test_merge_defaults() -> None:
    assert merge_android_props(None) == AndroidProps(log_level=1, open_tracking=True)
    assert merge_ios_props(None) == IosProps(
        badge_autoclearing=True, code_signing_style="Automatic", project_version="1", marketing_version="1.0"
    )


def test_merge_overlays_given_fields_only() -> None:
    android = merge_android_props({"logLevel": 0, "openTracking": False, "notificationColor": None})
    assert android == AndroidProps(log_level=0, open_tracking=False)

    ios = merge_ios_props({"marketingVersion": "2.0.1", "swiftVersion": 5.0, "devTeam": "TEAM"})
    assert ios.marketing_version == "2.0.1"
    assert ios.project_version == "1"
    assert ios.swift_version == "5.0"
    assert ios.dev_team == "TEAM"


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({"logLevel": 7}, "logLevel must be an integer between 0 and 6"),
        ({"logLevel": -1}, "logLevel must be an integer between 0 and 6"),
        ({"logLevel": True}, "logLevel must be an integer"),
        ({"logLevel": "2"}, "logLevel must be an integer"),
        ({"openTracking": "yes"}, "openTracking must be a boolean"),
        ({"notificationColor": "red"}, "notificationColor must be a valid hex color"),
        ({"notificationColor": "#12345"}, "notificationColor must be a valid hex color"),
        ({"notificationIconFilePath": 3}, "notificationIconFilePath must be a string"),
    ],
)
def test_validate_android_rejects(raw, message) -> None:
    with pytest.raises(ConfigError, match=message):
        validate_android_config(raw, "/project")


def test_validate_android_accepts_valid_values(tmp_path) -> None:
    (tmp_path / "icon.png").write_bytes(b"")
    validate_android_config(
        {"logLevel": 6, "openTracking": False, "notificationColor": "#F0a", "notificationIconFilePath": "icon.png"},
        str(tmp_path),
    )
    validate_android_config(None)
    validate_android_config({"logLevel": 0})


def test_validate_android_icon_path_checks(tmp_path) -> None:
    with pytest.raises(ConfigError, match="projectRoot is required"):
        validate_android_config({"notificationIconFilePath": "icon.png"})
    with pytest.raises(ConfigError, match="does not exist: icon.png"):
        validate_android_config({"notificationIconFilePath": "icon.png"}, str(tmp_path))
    validate_android_config(
        {"notificationIconFilePath": "icon.png"}, "/virtual", file_exists=lambda p: p == "/virtual/icon.png"
    )


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({"badgeAutoclearing": 1}, "badgeAutoclearing must be a boolean"),
        ({"codeSigningStyle": "Auto"}, 'codeSigningStyle must be either "Automatic" or "Manual"'),
        ({"projectVersion": "1.2"}, "projectVersion must be a string containing only digits"),
        ({"projectVersion": 12}, "projectVersion must be a string containing only digits"),
        ({"marketingVersion": "1"}, 'marketingVersion must be in format "X.Y" or "X.Y.Z"'),
        ({"marketingVersion": "1.2.3.4"}, "marketingVersion must be in format"),
        ({"swiftVersion": "5.9"}, "swiftVersion must be one of: 4.0, 4.2, 5.0, 6.0"),
    ],
)
def test_validate_ios_rejects(raw, message) -> None:
    with pytest.raises(ConfigError, match=message):
        validate_ios_config(raw)


def test_validate_ios_accepts_valid_values() -> None:
    validate_ios_config(
        {
            "badgeAutoclearing": False,
            "codeSigningStyle": "Manual",
            "projectVersion": "42",
            "marketingVersion": "1.2.3",
            "swiftVersion": "6.0",
            "devTeam": "ABCDE12345",
        }
    )
    validate_ios_config(None)


def test_load_props_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"android": {"logLevel": 2}}), encoding="utf-8")
    assert load_props_file(str(path)) == {"android": {"logLevel": 2}}


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("[1, 2]", "must contain a JSON object"),
        ('{"ios": "x"}', "config section 'ios' must be an object"),
        ("{", "invalid JSON"),
    ],
)
def test_load_props_file_rejects(tmp_path, content, message) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_props_file(str(path))


def test_load_props_file_missing(tmp_path) -> None:
    with pytest.raises(ConfigError, match="cannot read config file"):
        load_props_file(str(tmp_path / "missing.json"))
