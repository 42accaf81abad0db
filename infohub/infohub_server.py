#!/usr/bin/env python3
"""Local server for the Info-Hub editor API.

Features:
- Exposes tile, settings and publish actions under /api/*
- Serves an unsaved preview of the page at /preview
- Serves the published site (index.html and media) from BASE_DIR/public
"""

from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import sys
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Callable
from urllib.parse import parse_qs, unquote, urlparse

# Support direct execution: `python infohub/infohub_server.py ...`
if __package__ in (None, ""):
    _REPO_ROOT = Path(__file__).resolve().parents[1]
    if str(_REPO_ROOT) not in sys.path:
        sys.path.insert(0, str(_REPO_ROOT))

from infohub import config
from infohub.auth import TokenAuth
from infohub.errors import NotFoundError, PersistenceError, ValidationError
from infohub.generator import PageGenerator, PreviewService
from infohub.logs import setup_logging
from infohub.settings_store import SettingsStore
from infohub.site_paths import (
    PAGE_NAME,
    PathValidationError,
    logs_root,
    resolve_base_dir,
    resolve_site_path,
    site_root,
)
from infohub.tile_store import TileStore
from infohub.tiles import TileRegistry, default_registry
from infohub.visibility import effective_status

logger = logging.getLogger(__name__)

LOG_NAME = "infohub.log"


class ApiError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class InfoHubApp:
    def __init__(self, base_dir: Path, *, registry: TileRegistry | None = None, auth: TokenAuth | None = None):
        self.base_dir = base_dir
        self.registry = registry or default_registry()
        self.auth = auth or TokenAuth(None)
        self.tiles = TileStore(base_dir, self.registry)
        self.settings = SettingsStore(base_dir)
        self.generator = PageGenerator(base_dir, self.tiles, self.settings, self.registry)
        self.previewer = PreviewService(self.generator)

    @property
    def site_dir(self) -> Path:
        return site_root(self.base_dir)

    def api_list_tile_types(self) -> dict[str, object]:
        return self.registry.describe()

    def api_list_tiles(self) -> dict[str, object]:
        tiles = self.tiles.list_tiles()
        status = {str(tile.get("id")): effective_status(tile).as_dict() for tile in tiles}
        return {"tiles": tiles, "status": status}

    def api_get_tile(self, tile_id: str) -> dict[str, object]:
        return self.tiles.get(tile_id)

    def api_save_tile(self, payload: dict[str, object]) -> dict[str, object]:
        tile = payload.get("tile")
        if not isinstance(tile, dict):
            raise ApiError(400, "Field 'tile' must be an object")
        return self.tiles.save(tile)

    def api_delete_tile(self, payload: dict[str, object]) -> dict[str, object]:
        tile_id = _required_str(payload, "id")
        self.tiles.delete(tile_id)
        return {"deleted": tile_id}

    def api_update_positions(self, payload: dict[str, object]) -> dict[str, object]:
        moved = self.tiles.update_positions(payload.get("positions"))
        return {"updated": moved}

    def api_generate(self) -> dict[str, object]:
        return self.generator.generate()

    def api_preview(self) -> str:
        return self.previewer.preview()

    def api_get_settings(self) -> dict[str, object]:
        return self.settings.get()

    def api_save_settings(self, payload: dict[str, object]) -> dict[str, object]:
        settings = payload.get("settings")
        if not isinstance(settings, dict):
            raise ApiError(400, "Field 'settings' must be an object")
        return self.settings.save(settings)

    def handle_api(self, action: str, payload: dict[str, object]) -> dict[str, object]:
        action = action.strip("/")
        if action == "save-tile":
            return self.api_save_tile(payload)
        if action == "delete-tile":
            return self.api_delete_tile(payload)
        if action == "update-positions":
            return self.api_update_positions(payload)
        if action == "generate":
            return self.api_generate()
        if action == "save-settings":
            return self.api_save_settings(payload)

        raise ApiError(404, f"Unknown API action: {action}")

    def handle_get(self, action: str, query: dict[str, list[str]]) -> dict[str, object]:
        action = action.strip("/")
        if action == "tile-types":
            return self.api_list_tile_types()
        if action == "tiles":
            return self.api_list_tiles()
        if action == "tile":
            tile_id = query.get("id", [""])[0]
            if not tile_id.strip():
                raise ApiError(400, "Query parameter 'id' is required")
            return self.api_get_tile(tile_id)
        if action == "settings":
            return self.api_get_settings()

        raise ApiError(404, f"Unknown API action: {action}")

    def resolve_site_file(self, request_path: str) -> Path | None:
        if request_path == "/":
            target = self.site_dir / PAGE_NAME
            return target if target.is_file() else None

        try:
            candidate = resolve_site_path(self.base_dir, unquote(request_path))
        except PathValidationError:
            return None

        if candidate.is_dir():
            index = candidate / PAGE_NAME
            return index if index.is_file() else None
        if candidate.is_file():
            return candidate
        return None


def _required_str(payload: dict[str, object], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ApiError(400, f"Field '{key}' is required")
    return value


def _send_json(handler: BaseHTTPRequestHandler, status: int, payload: dict[str, object]) -> None:
    body = (json.dumps(payload, ensure_ascii=False) + "\n").encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json; charset=utf-8")
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def _send_html(handler: BaseHTTPRequestHandler, text: str) -> None:
    body = text.encode("utf-8")
    handler.send_response(HTTPStatus.OK)
    handler.send_header("Content-Type", "text/html; charset=utf-8")
    handler.send_header("Content-Length", str(len(body)))
    handler.send_header("Cache-Control", "no-store")
    handler.end_headers()
    handler.wfile.write(body)


def _send_file(handler: BaseHTTPRequestHandler, path: Path) -> None:
    data = path.read_bytes()
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

    handler.send_response(HTTPStatus.OK)
    handler.send_header("Content-Type", content_type)
    handler.send_header("Content-Length", str(len(data)))
    handler.end_headers()
    handler.wfile.write(data)


def _parse_json_body(handler: BaseHTTPRequestHandler) -> dict[str, object]:
    raw_len = handler.headers.get("Content-Length", "0")
    try:
        length = int(raw_len)
    except ValueError:
        raise ApiError(400, "Invalid Content-Length")

    if length <= 0:
        return {}

    body = handler.rfile.read(length)
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ApiError(400, "Invalid JSON body") from exc

    if not isinstance(payload, dict):
        raise ApiError(400, "JSON body must be an object")

    return payload


def _respond(handler: BaseHTTPRequestHandler, action: Callable[[], Any]) -> None:
    """Run an API action and map its outcome onto the JSON envelope."""
    try:
        data = action()
    except ApiError as exc:
        _send_json(handler, exc.status, {"ok": False, "error": exc.message})
    except ValidationError as exc:
        _send_json(handler, 400, {"ok": False, "error": str(exc), "errors": exc.errors})
    except NotFoundError as exc:
        _send_json(handler, 404, {"ok": False, "error": exc.message})
    except PersistenceError as exc:
        logger.error("Persistence failure: %s", exc)
        _send_json(handler, 500, {"ok": False, "error": str(exc)})
    except Exception:
        logger.exception("Unhandled error in %s %s", handler.command, handler.path)
        _send_json(handler, 500, {"ok": False, "error": "Internal server error"})
    else:
        _send_json(handler, 200, {"ok": True, "data": data})


def make_handler(app: InfoHubApp):
    class InfoHubHandler(BaseHTTPRequestHandler):
        def _authorized(self, path: str) -> bool:
            if not app.auth.requires_auth(path):
                return True
            if app.auth.is_authorized(self.headers.get("Authorization")):
                return True
            logger.warning("Rejected unauthenticated request: %s %s", self.command, path)
            _send_json(self, 401, {"ok": False, "error": "Authentication required"})
            return False

        def do_GET(self) -> None:  # type: ignore[override]
            parsed = urlparse(self.path)
            path = parsed.path
            if not self._authorized(path):
                return

            if path == "/preview":
                try:
                    html_text = app.api_preview()
                except Exception:
                    logger.exception("Preview failed")
                    _send_json(self, 500, {"ok": False, "error": "Preview failed"})
                    return
                _send_html(self, html_text)
                return

            if path.startswith("/api/"):
                action = path[len("/api/") :]
                query = parse_qs(parsed.query)
                _respond(self, lambda: app.handle_get(action, query))
                return

            site_file = app.resolve_site_file(path)
            if site_file and site_file.is_file():
                _send_file(self, site_file)
                return

            _send_json(self, 404, {"ok": False, "error": "Not found"})

        def do_POST(self) -> None:  # type: ignore[override]
            parsed = urlparse(self.path)
            if not parsed.path.startswith("/api/"):
                _send_json(self, 404, {"ok": False, "error": "Unknown endpoint"})
                return
            if not self._authorized(parsed.path):
                return

            action = parsed.path[len("/api/") :]
            _respond(self, lambda: app.handle_api(action, _parse_json_body(self)))

        def log_message(self, format: str, *args: object) -> None:  # type: ignore[override]
            logger.debug("%s - %s", self.address_string(), format % args)

    return InfoHubHandler


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Info-Hub editor API server.")
    parser.add_argument("--base-dir", help="BASE_DIR with data/, archive/, public/ and logs/")
    parser.add_argument("--host", default=config.HOST)
    parser.add_argument("--port", type=int, default=config.PORT)
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    base_dir = resolve_base_dir(args.base_dir)
    setup_logging(args.log_level, config.LOG_FILE or logs_root(base_dir) / LOG_NAME)

    auth = TokenAuth(config.API_TOKEN)
    auth.warn_if_open()
    app = InfoHubApp(base_dir, auth=auth)
    handler_cls = make_handler(app)

    with ThreadingHTTPServer((args.host, args.port), handler_cls) as server:
        print(f"Serving Info-Hub from {base_dir}")
        print(f"URL: http://{args.host}:{args.port}")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("Stopping server")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
