"""Command-line interface for the photo gallery.

Environment variables:
    SPG_DATA_DIR: Data directory (default: ~/.spg)
    SPG_CONVERTER: HEIC converter executable (default: /usr/bin/heif-convert)
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from .config import load_settings
from .core.errors import GalleryError
from .core.monitor import CatalogMonitor
from .resources import build_scanner, init_data_dir, open_catalog

STAT_MESSAGES = {
    "missing": "Nothing is in the gallery with this path.",
    "modified": "The image in gallery at this path has a different md5 sum.",
    "current": "The image is in the gallery.",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def open_initialized(args):
    """Load settings and catalog, exiting if the data directory is missing."""
    settings = load_settings(args.config_path)
    if not settings.catalog_path.exists():
        print(f"Error: Data directory not found at {settings.data_dir}. Run 'spg init'.")
        sys.exit(1)
    catalog, database = open_catalog(settings)
    return settings, catalog, database


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def init(args):
    """Create the data directory."""
    settings = load_settings(args.config_path)
    init_data_dir(settings)
    print(f"Initialized gallery in {settings.data_dir}")


def add(args):
    """Add one image, or refresh it if it changed."""
    _, catalog, database = open_initialized(args)
    try:
        outcome = catalog.add(args.filename)
        print(f"{args.filename} {outcome}")
    finally:
        catalog.save(database)


def rm(args):
    """Remove one image and its derivatives."""
    _, catalog, database = open_initialized(args)
    try:
        catalog.remove(args.filename)
        print(f"{args.filename} removed")
    finally:
        catalog.save(database)


def sync(args):
    """Reconcile the catalog with a directory."""
    settings, catalog, database = open_initialized(args)
    monitor = CatalogMonitor(catalog, database, build_scanner(settings), progress=not args.quiet)

    print(f"Scanning {args.directory}...")
    report = monitor.sync(args.directory)

    print("\n=== Sync Report ===")
    print(report)
    if report.errors:
        print("\nErrors:")
        for err in report.errors[:10]:
            print(f"  {err}")
        if len(report.errors) > 10:
            print(f"  ... and {len(report.errors) - 10} more")


def stat(args):
    """Tell whether a file is in the gallery and unchanged."""
    _, catalog, _ = open_initialized(args)
    print(STAT_MESSAGES[catalog.stat(args.filename)])


def list_entries(args):
    """List all catalog entries."""
    _, catalog, _ = open_initialized(args)
    if not len(catalog):
        print("Gallery is empty")
        return

    print(f"{'Hash':<34} {'Gallery':<20} {'Original'}")
    print("-" * 80)
    for entry in catalog:
        print(f"{entry.hash_hex:<34} {entry.collection:<20} {entry.original_path}")
    print(f"\nTotal: {len(catalog)} image(s) in {len(catalog.list_collections())} gallery(ies)")


def serve(args):
    """Serve the gallery over HTTP."""
    settings, _, _ = open_initialized(args)
    from .api.server import run_server
    run_server(settings, host=args.bind_address, port=args.port)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simple Photo Gallery - thumbnails and web previews for a directory of photos",
        epilog="Environment variables: SPG_DATA_DIR, SPG_CONVERTER",
    )
    parser.add_argument(
        "--config-path", "-c",
        default=None,
        help="Path to the data directory (default: $SPG_DATA_DIR or ~/.spg)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug messages")

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create the data directory")
    init_parser.set_defaults(func=init)

    add_parser = subparsers.add_parser("add", help="Add or refresh an image")
    add_parser.add_argument("filename", help="Image file")
    add_parser.set_defaults(func=add)

    rm_parser = subparsers.add_parser("rm", help="Remove an image from the gallery")
    rm_parser.add_argument("filename", help="Image file")
    rm_parser.set_defaults(func=rm)

    sync_parser = subparsers.add_parser("sync", help="Add new and drop vanished images under a directory")
    sync_parser.add_argument("directory", help="Directory to reconcile")
    sync_parser.add_argument("--quiet", "-q", action="store_true", help="Hide the progress bar")
    sync_parser.set_defaults(func=sync)

    stat_parser = subparsers.add_parser("stat", help="Check whether an image is in the gallery")
    stat_parser.add_argument("filename", help="Image file")
    stat_parser.set_defaults(func=stat)

    list_parser = subparsers.add_parser("list", help="List all images in the gallery")
    list_parser.set_defaults(func=list_entries)

    serve_parser = subparsers.add_parser("serve", help="Serve the gallery over HTTP")
    serve_parser.add_argument("--port", "-p", type=int, required=True, help="Port to listen on")
    serve_parser.add_argument(
        "--bind-address", "-b",
        default="127.0.0.1",
        help="Address to bind to (default: 127.0.0.1)",
    )
    serve_parser.set_defaults(func=serve)

    return parser


def main(argv=None):
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except GalleryError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
