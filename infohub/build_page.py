#!/usr/bin/env python3
"""Publish (or preview) the Info-Hub page from the command line."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Support direct execution: `python infohub/build_page.py ...`
if __package__ in (None, ""):
    _REPO_ROOT = Path(__file__).resolve().parents[1]
    if str(_REPO_ROOT) not in sys.path:
        sys.path.insert(0, str(_REPO_ROOT))

from infohub import config
from infohub.errors import InfoHubError
from infohub.generator import PageGenerator, PreviewService
from infohub.logs import setup_logging
from infohub.settings_store import SettingsStore
from infohub.site_paths import resolve_base_dir
from infohub.storage import write_text_atomic
from infohub.tile_store import TileStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate public/index.html from the stored tiles.")
    parser.add_argument("--base-dir", help="BASE_DIR with data/, archive/ and public/")
    parser.add_argument("--preview", action="store_true", help="Print the page instead of publishing it")
    parser.add_argument("--output", help="With --preview, write the page to this file")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    base_dir = resolve_base_dir(args.base_dir)

    tiles = TileStore(base_dir)
    generator = PageGenerator(base_dir, tiles, SettingsStore(base_dir))

    try:
        if args.preview:
            html_text = PreviewService(generator).preview()
            if args.output:
                output = Path(args.output).expanduser()
                write_text_atomic(output, html_text)
                print(f"Preview written: {output}")
            else:
                sys.stdout.write(html_text)
            return 0

        result = generator.generate()
    except InfoHubError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1

    print(f"✅ Published {result['tilesPublishedCount']} tiles to {result['path']}")
    for skipped in result["skipped"]:
        print(f"⚠️ Skipped {skipped['id']} ({skipped['type']}): {skipped['reason']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
