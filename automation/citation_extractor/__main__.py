"""Entry point: python -m automation.citation_extractor [--plain] [--style STYLE]"""

from __future__ import annotations

import argparse
import logging
import sys
import warnings

from dotenv import load_dotenv
from pydantic import ValidationError

from .config import Settings
from .models import CitationStyle


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Citation Extractor: turn a URL, DOI, ISBN or YouTube link into a citation",
    )
    parser.add_argument(
        "--style",
        default=None,
        help=f"Citation style ({', '.join(s.value for s in CitationStyle)}; default APA)",
    )
    parser.add_argument(
        "--library",
        dest="library_path",
        default=None,
        help="Path to the saved-citation JSON file (default: bibliography/citations.json)",
    )
    parser.add_argument(
        "--export-dir",
        default=None,
        help="Directory shared citations are written to (default: citations/)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    parser.add_argument(
        "--mailto",
        default=None,
        help="Contact address sent to Crossref and OpenAlex (env: CITATION_MAILTO)",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Use a plain prompt loop instead of the TUI",
    )
    parser.add_argument(
        "--no-copy",
        action="store_true",
        help="In --plain mode, do not copy each citation to the clipboard",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    # Suppress harmless asyncio pipe cleanup warnings on Windows
    warnings.filterwarnings("ignore", message="unclosed transport", category=ResourceWarning)
    load_dotenv()
    args = parse_args(argv)

    try:
        settings = Settings.from_env(
            default_style=args.style,
            library_path=args.library_path,
            export_dir=args.export_dir,
            timeout=args.timeout,
            mailto=args.mailto,
        )
    except ValidationError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    level = args.log_level.upper()
    if args.plain:
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
        from .cli import run

        run(settings, copy=not args.no_copy)
        return

    from textual.logging import TextualHandler

    logging.basicConfig(level=level, handlers=[TextualHandler()])

    from .app import CitationApp

    CitationApp(settings=settings).run()


if __name__ == "__main__":
    main()
