import json
from pathlib import Path

import pytest

from infohub import site_paths
from infohub.errors import ValidationError
from infohub.settings_store import DEFAULT_SITE, DEFAULT_THEME, SettingsStore, merge_defaults


def test_defaults_when_no_file(tmp_path: Path):
    settings = SettingsStore(tmp_path).get()
    assert settings == {"site": DEFAULT_SITE, "theme": DEFAULT_THEME}


def test_primary_color_fallback():
    merged = merge_defaults({"theme": {"primaryColor": "#112233"}})
    assert merged["theme"]["accentColor"] == "#112233"


def test_save_merges_and_preserves_other_keys(tmp_path: Path):
    path = site_paths.settings_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text(
        json.dumps({"site": {"title": "Old", "footerText": "Footer"}, "editor": {"lang": "de"}}),
        encoding="utf-8",
    )
    store = SettingsStore(tmp_path)

    result = store.save({"site": {"title": "New", "unknown": "x"}, "theme": {"accentColor": "#abcdef"}})

    assert result["site"]["title"] == "New"
    assert result["site"]["footerText"] == "Footer"
    assert result["theme"]["accentColor"] == "#abcdef"
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["editor"] == {"lang": "de"}
    assert "unknown" not in raw["site"]


def test_invalid_settings_are_rejected_without_writing(tmp_path: Path):
    store = SettingsStore(tmp_path)
    with pytest.raises(ValidationError) as excinfo:
        store.save(
            {
                "site": {"headerImage": "/media/header.svg", "headerFocusPoint": "middle"},
                "theme": {"backgroundColor": "red"},
            }
        )
    assert excinfo.value.errors == ["Invalid color for backgroundColor (#RRGGBB expected)"]

    with pytest.raises(ValidationError) as excinfo:
        store.save({"site": {"headerImage": "/media/header.svg", "headerFocusPoint": "middle"}})
    assert excinfo.value.errors == ["Invalid header image path", "Invalid header focus point: middle"]

    assert not site_paths.settings_path(tmp_path).exists()


def test_save_rejects_non_object(tmp_path: Path):
    with pytest.raises(ValidationError):
        SettingsStore(tmp_path).save(["site"])
