import json
import threading
from pathlib import Path

import pytest

from infohub import site_paths
from infohub.errors import NotFoundError, PersistenceError, UnknownTypeError, ValidationError
from infohub.tile_store import TileStore, new_tile_id, sort_tiles


def _infobox(title="Hello", **envelope):
    tile = {"type": "infobox", "data": {"title": title, "description": "Body"}}
    tile.update(envelope)
    return tile


def _stored(base_dir: Path):
    return json.loads(site_paths.tiles_path(base_dir).read_text(encoding="utf-8"))


def test_new_tile_id_format():
    tile_id = new_tile_id()
    prefix, seconds, suffix = tile_id.split("_")
    assert prefix == "tile"
    assert seconds.isdigit()
    assert len(suffix) == 8


def test_save_new_tile_fills_defaults(tmp_path: Path):
    store = TileStore(tmp_path)
    record = store.save(_infobox())

    assert record["id"].startswith("tile_")
    assert record["position"] == 10
    assert record["size"] == "medium"
    assert record["style"] == "card"
    assert record["colorScheme"] == "default"
    assert record["created"] == record["updated"]
    assert record["created"].endswith("Z")
    assert _stored(tmp_path) == [record]


def test_invalid_tile_leaves_collection_unchanged(tmp_path: Path):
    store = TileStore(tmp_path)
    store.save(_infobox())
    before = site_paths.tiles_path(tmp_path).read_bytes()

    with pytest.raises(ValidationError) as excinfo:
        store.save(_infobox(title=""))
    assert excinfo.value.errors == ["Title is required"]

    with pytest.raises(ValidationError):
        store.save(_infobox(size="huge"))

    assert site_paths.tiles_path(tmp_path).read_bytes() == before


def test_unknown_and_missing_type(tmp_path: Path):
    store = TileStore(tmp_path)
    with pytest.raises(UnknownTypeError):
        store.save({"type": "carousel", "data": {}})
    with pytest.raises(ValidationError) as excinfo:
        store.save({"data": {"title": "x"}})
    assert excinfo.value.errors == ["Tile type is required"]
    assert not site_paths.tiles_path(tmp_path).exists()


def test_update_replaces_tile_and_keeps_created(tmp_path: Path):
    store = TileStore(tmp_path)
    record = store.save(_infobox(position=5))

    updated = store.save({"id": record["id"], "type": "infobox", "data": {"title": "Changed"}, "created": "bogus"})

    assert updated["id"] == record["id"]
    assert updated["created"] == record["created"]
    assert updated["position"] == 5
    assert updated["data"] == {"title": "Changed"}
    assert len(store.list_tiles()) == 1


def test_update_unknown_id_is_not_found(tmp_path: Path):
    store = TileStore(tmp_path)
    with pytest.raises(NotFoundError):
        store.save(_infobox(id="tile_0_deadbeef"))


def test_type_cannot_change(tmp_path: Path):
    store = TileStore(tmp_path)
    record = store.save(_infobox())
    with pytest.raises(ValidationError) as excinfo:
        store.save({"id": record["id"], "type": "quote", "data": {"quote": "Q"}})
    assert "Tile type cannot be changed" in excinfo.value.errors


def test_forced_size_and_flat_white(tmp_path: Path):
    store = TileStore(tmp_path)
    separator = store.save({"type": "separator", "size": "small", "data": {}})
    assert separator["size"] == "full"

    flat = store.save(_infobox(style="flat", colorScheme="white"))
    assert flat["colorScheme"] == "default"


def test_list_is_ordered_by_position_and_stable(tmp_path: Path):
    store = TileStore(tmp_path)
    a = store.save(_infobox("A", position=20))
    b = store.save(_infobox("B", position=10))
    c = store.save(_infobox("C", position=20))

    assert [t["id"] for t in store.list_tiles()] == [b["id"], a["id"], c["id"]]
    assert [t["id"] for t in _stored(tmp_path)] == [b["id"], a["id"], c["id"]]


def test_sort_tiles_treats_bad_positions_as_zero():
    tiles = [{"id": "x", "position": 3}, {"id": "y", "position": "oops"}]
    assert [t["id"] for t in sort_tiles(tiles)] == ["y", "x"]


def test_visibility_fields(tmp_path: Path):
    store = TileStore(tmp_path)
    record = store.save(
        _infobox(
            visible=False,
            visibilitySchedule={"showFrom": "2030-01-01T08:00", "showUntil": ""},
        )
    )
    assert record["visible"] is False
    assert record["visibilitySchedule"] == {"showFrom": "2030-01-01T08:00"}

    with pytest.raises(ValidationError) as excinfo:
        store.save(_infobox(visibilitySchedule={"showFrom": "2030-02-01T00:00", "showUntil": "2030-01-01T00:00"}))
    assert excinfo.value.errors == ["showFrom must not be after showUntil"]

    with pytest.raises(ValidationError):
        store.save(_infobox(visibilitySchedule={"showFrom": "next week"}))

    with pytest.raises(ValidationError):
        store.save(_infobox(visible="no"))


@pytest.mark.parametrize("value", ["20200101T1000", "2026-W01-1", "2026-05-01"])
def test_schedule_rejects_non_browser_timestamps(tmp_path: Path, value):
    store = TileStore(tmp_path)
    with pytest.raises(ValidationError) as excinfo:
        store.save(_infobox(visibilitySchedule={"showUntil": value}))
    assert excinfo.value.errors == [f"Invalid timestamp for showUntil: {value} (YYYY-MM-DDTHH:MM expected)"]
    assert not site_paths.tiles_path(tmp_path).exists()


def test_delete(tmp_path: Path):
    store = TileStore(tmp_path)
    keep = store.save(_infobox("Keep"))
    drop = store.save(_infobox("Drop"))

    store.delete(drop["id"])
    assert [t["id"] for t in store.list_tiles()] == [keep["id"]]

    with pytest.raises(NotFoundError):
        store.delete(drop["id"])


def test_get(tmp_path: Path):
    store = TileStore(tmp_path)
    record = store.save(_infobox())
    assert store.get(record["id"]) == record
    with pytest.raises(NotFoundError):
        store.get("tile_missing")


def test_update_positions(tmp_path: Path):
    store = TileStore(tmp_path)
    a = store.save(_infobox("A", position=1))
    b = store.save(_infobox("B", position=2))

    moved = store.update_positions(
        [{"id": a["id"], "position": 30}, {"id": b["id"], "position": "5"}, {"id": "tile_unknown", "position": 1}]
    )

    assert moved == 2
    assert [(t["id"], t["position"]) for t in store.list_tiles()] == [(b["id"], 5), (a["id"], 30)]


def test_update_positions_rejects_malformed_input(tmp_path: Path):
    store = TileStore(tmp_path)
    a = store.save(_infobox("A", position=1))

    with pytest.raises(ValidationError):
        store.update_positions({"id": a["id"], "position": 3})
    with pytest.raises(ValidationError):
        store.update_positions([{"id": a["id"], "position": "first"}])
    with pytest.raises(ValidationError):
        store.update_positions([{"position": 3}])

    assert store.get(a["id"])["position"] == 1


def test_corrupt_collection_raises(tmp_path: Path):
    path = site_paths.tiles_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text('{"tiles": []}', encoding="utf-8")

    with pytest.raises(PersistenceError):
        TileStore(tmp_path).list_tiles()


def test_parallel_saves_and_reorders_lose_no_tiles(tmp_path: Path):
    seeded = [TileStore(tmp_path).save(_infobox(f"Seed {i}", position=i))["id"] for i in range(3)]
    failures: list[Exception] = []

    def saver(worker: int):
        store = TileStore(tmp_path)
        try:
            for n in range(5):
                store.save(_infobox(f"Worker {worker} tile {n}", position=100 + worker))
        except Exception as exc:
            failures.append(exc)

    def reorderer():
        store = TileStore(tmp_path)
        try:
            for _ in range(5):
                store.update_positions([{"id": tile_id, "position": -3 + i} for i, tile_id in enumerate(seeded)])
        except Exception as exc:
            failures.append(exc)

    threads = [threading.Thread(target=saver, args=(worker,)) for worker in range(8)]
    threads += [threading.Thread(target=reorderer) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert failures == []
    tiles = TileStore(tmp_path).list_tiles()
    assert len(tiles) == 3 + 8 * 5
    assert len({tile["id"] for tile in tiles}) == len(tiles)
    assert [tile["id"] for tile in tiles[:3]] == seeded
    assert [tile["position"] for tile in tiles[:3]] == [-3, -2, -1]
