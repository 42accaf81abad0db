from pathlib import Path

import pytest

from infohub import config, site_paths


def test_normalize_rel_path_accepts_clean_values():
    assert site_paths.normalize_rel_path("media/images/a.jpg") == "media/images/a.jpg"
    assert site_paths.normalize_rel_path("/media/images/a.jpg") == "media/images/a.jpg"
    assert site_paths.normalize_rel_path("media\\images\\a.jpg") == "media/images/a.jpg"


def test_normalize_rel_path_rejects_traversal():
    with pytest.raises(site_paths.PathValidationError):
        site_paths.normalize_rel_path("../etc/passwd")

    with pytest.raises(site_paths.PathValidationError):
        site_paths.normalize_rel_path("  ")


def test_resolve_site_path_stays_inside_public(tmp_path: Path):
    base = tmp_path / "base"
    target = base / "public" / "media" / "a.jpg"
    target.parent.mkdir(parents=True)
    target.write_text("ok", encoding="utf-8")

    assert site_paths.resolve_site_path(base, "/media/a.jpg") == target.resolve()

    with pytest.raises(site_paths.PathValidationError):
        site_paths.resolve_site_path(base, "../data/tiles.json")


def test_layout_under_base_dir(tmp_path: Path):
    assert site_paths.tiles_path(tmp_path) == tmp_path / "data" / "tiles.json"
    assert site_paths.settings_path(tmp_path) == tmp_path / "data" / "settings.json"
    assert site_paths.page_path(tmp_path) == tmp_path / "public" / "index.html"
    assert site_paths.archive_root(tmp_path) == tmp_path / "archive"


def test_resolve_base_dir_prefers_cli_then_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv(config.BASE_DIR_ENV, str(tmp_path / "env"))
    assert site_paths.resolve_base_dir() == tmp_path / "env"
    assert site_paths.resolve_base_dir(str(tmp_path / "cli")) == tmp_path / "cli"


def test_resolve_base_dir_falls_back_to_config(monkeypatch, tmp_path: Path):
    monkeypatch.delenv(config.BASE_DIR_ENV, raising=False)
    monkeypatch.setattr(config, "BASE_DIR", tmp_path / "configured")
    assert site_paths.resolve_base_dir() == tmp_path / "configured"
