# src/main.py - v1
"""CLI entry point: serve, craft, fingerprint commands.

Usage:
    alchemy4d serve [--host HOST] [--port PORT]
    alchemy4d craft --material cobalt_echo:10:ml --material snow_ash:5:g --incantation "warm gently"
    alchemy4d fingerprint --material ... --incantation ...
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from alchemy4d.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="alchemy4d",
        description=f"alchemy4d v{__version__}: potion recipe crafting backend",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Run the HTTP server")
    p_serve.add_argument("--host", default=None, help="Bind host (default: HOST setting)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting)")
    p_serve.set_defaults(func=_cmd_serve)

    # --- craft ---
    p_craft = subparsers.add_parser("craft", help="Craft one recipe and print it")
    _add_request_arguments(p_craft)
    p_craft.set_defaults(func=_cmd_craft)

    # --- fingerprint ---
    p_fp = subparsers.add_parser("fingerprint", help="Print the fingerprint of a request")
    _add_request_arguments(p_fp)
    p_fp.set_defaults(func=_cmd_fingerprint)

    return parser


def _add_request_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--material", dest="materials", action="append", required=True,
        type=parse_material_arg, metavar="NAME:QTY:UNIT",
        help="Material entry; repeat for each material",
    )
    parser.add_argument(
        "-i", "--incantation", required=True,
        help="Free-text incantation",
    )


def parse_material_arg(value: str) -> dict[str, object]:
    """Parse ``name:qty:unit`` into a raw material dict.

    The name may itself contain ':'; quantity and unit are taken from the right.
    """
    parts = value.rsplit(":", 2)
    if len(parts) != 3 or not parts[0]:
        raise argparse.ArgumentTypeError(f"expected NAME:QTY:UNIT, got {value!r}")
    name, qty, unit = parts
    try:
        quantity: int | float = int(qty)
    except ValueError:
        try:
            quantity = float(qty)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid quantity {qty!r} in {value!r}") from None
    return {"name": name, "quantity": quantity, "unit": unit}


async def _cmd_serve(args: argparse.Namespace) -> int:
    """Run the FastAPI app under uvicorn."""
    import uvicorn

    from alchemy4d.api.app import create_app
    from alchemy4d.config.settings import load_settings
    from alchemy4d.logging.logger import configure_logging

    settings = load_settings()
    configure_logging(settings, verbose=args.verbose)
    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level="debug" if args.verbose else "info",
    )
    await uvicorn.Server(config).serve()
    return 0


async def _cmd_craft(args: argparse.Namespace) -> int:
    """Run one craft in-process, printing chunks live."""
    from alchemy4d.api.app import build_coordinator
    from alchemy4d.config.settings import load_settings
    from alchemy4d.core.models import CompleteEvent, ErrorEvent

    request = _request_from_args(args)
    if request is None:
        return 1

    coordinator = build_coordinator(load_settings())
    status = 1
    try:
        async for event in coordinator.stream(request):
            if isinstance(event, CompleteEvent):
                source = "cache" if event.cached else "generator"
                print(f"\n\nRecipe ({source}):")
                print(event.recipe.model_dump_json(indent=2))
                status = 0
            elif isinstance(event, ErrorEvent):
                print(f"\nError: {event.message}", file=sys.stderr)
            else:
                print(event.content, end="", flush=True)
    finally:
        coordinator.cache.close()
    return status


async def _cmd_fingerprint(args: argparse.Namespace) -> int:
    """Print the cache fingerprint of a request."""
    from alchemy4d.cache.fingerprint import compute_fingerprint

    request = _request_from_args(args)
    if request is None:
        return 1
    print(compute_fingerprint(request.materials, request.incantation))
    return 0


def _request_from_args(args: argparse.Namespace):
    from alchemy4d.core.models import CraftValidationError, parse_craft_request

    try:
        return parse_craft_request(
            {"materials": args.materials, "incantation": args.incantation}
        )
    except CraftValidationError as e:
        logger.error("Invalid request: %s", e)
        return None


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
