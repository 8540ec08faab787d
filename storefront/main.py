from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn
from rich import print as rprint

from .api import create_app
from .config import load_settings
from .logs import configure_logging
from .store import create_store


def build_parser() -> argparse.ArgumentParser:
    defaults = load_settings()
    parser = argparse.ArgumentParser(description="Serve the storefront REST API.")
    parser.add_argument("--host", default=defaults.host, help=f"Bind address (default: {defaults.host})")
    parser.add_argument("--port", type=int, default=defaults.port, help=f"Port (default: {defaults.port})")
    parser.add_argument(
        "--catalog",
        default=defaults.catalog_path,
        help="Path to a product catalog YAML file (default: bundled catalog)",
    )
    parser.add_argument("--log-level", default=defaults.log_level, help="Logging level (default: %(default)s)")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    settings = load_settings(host=args.host, port=args.port, catalog_path=args.catalog, log_level=args.log_level)
    configure_logging(settings.log_level)

    store = create_store(settings)
    app = create_app(store)

    rprint(f"[bold green]{settings.app_title} v{settings.version}[/bold green]")
    rprint(f"  [cyan]Catalog:[/cyan] {settings.resolved_catalog_path()} ({len(store.catalog)} products)")
    rprint(f"  [cyan]Listening on:[/cyan] http://{settings.host}:{settings.port}")

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
