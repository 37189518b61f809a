"""Command-line interface for calp-distiller."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from urllib.parse import urljoin

from pydantic import ValidationError

from calp_distiller.clients import CalpClient, ClientError
from calp_distiller.pipeline.orchestrator import Orchestrator
from schemas.config import DEFAULT_BASE_URL, HarvestConfig
from schemas.publication import Publication
from schemas.result import PublicationResult

DEFAULT_OUTPUT_DIR = Path("./Downloads")
DEFAULT_PARALLELISM = 5


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def build_config(args: argparse.Namespace) -> HarvestConfig:
    """Map parsed command-line arguments onto a HarvestConfig.

    Raises:
        pydantic.ValidationError: If an option value is out of range
    """
    output_dir = args.output
    work_dir = args.work_dir or output_dir / "work"
    return HarvestConfig(
        base_url=args.base_url,
        output_dir=output_dir,
        work_dir=work_dir,
        parallelism=args.parallelism,
        timeout=args.timeout,
        probe_ceiling=args.probe_ceiling,
        miss_threshold=args.miss_threshold,
        placeholder_mode=args.placeholders,
        include_colophon=not args.no_colophon,
        keep_work_files=args.keep_work_files,
        retrieval_mode=args.mode,
        font_path=args.font,
    )


def resolve_publication(reference: str, config: HarvestConfig) -> Publication:
    """Build a Publication from a slug such as ``pha_91_4`` or a full URL."""
    if reference.startswith(("http://", "https://")):
        url = reference
    else:
        url = urljoin(config.base_url, f"{config.publication_prefix}{reference.strip('/')}/")
    publication = Publication(url=url, title="")
    publication.title = publication.slug
    return publication


async def _harvest(
    config: HarvestConfig, publications: list[Publication] | None = None
) -> list[PublicationResult]:
    async with CalpClient(config.client_config()) as client:
        if publications is None:
            publications = await client.fetch_catalog()
        orchestrator = Orchestrator(config, client)
        return await orchestrator.run(publications)


async def _list(config: HarvestConfig) -> list[Publication]:
    async with CalpClient(config.client_config()) as client:
        return await client.fetch_catalog()


def _report(results: list[PublicationResult], logger: logging.Logger) -> None:
    for result in results:
        if result.status == "completed":
            logger.info(f"  {result.title}: {result.output_path}")
        elif result.status == "skipped":
            logger.warning(f"  {result.title}: skipped ({result.message}) {result.url}")
        else:
            logger.error(f"  {result.title}: failed ({result.message}) {result.url}")


def harvest(args: argparse.Namespace) -> int:
    """Execute the harvest command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 when the batch completes, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = build_config(args)
    except ValidationError as e:
        logger.error(f"Invalid options: {e}")
        return 1

    config.output_dir.mkdir(parents=True, exist_ok=True)

    try:
        results = asyncio.run(_harvest(config))
    except ClientError as e:
        logger.error(f"Failed to load catalog: {e.message}")
        return 1

    _report(results, logger)
    logger.info(f"Output: {config.output_dir}")
    return 0


def harvest_publication(args: argparse.Namespace) -> int:
    """Execute the harvest-publication command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = build_config(args)
    except ValidationError as e:
        logger.error(f"Invalid options: {e}")
        return 1

    config.output_dir.mkdir(parents=True, exist_ok=True)

    publications = [resolve_publication(ref, config) for ref in args.publication]
    results = asyncio.run(_harvest(config, publications))

    _report(results, logger)
    return 0 if all(r.ok for r in results) else 1


def list_catalog(args: argparse.Namespace) -> int:
    """Execute the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    config = HarvestConfig(base_url=args.base_url, timeout=args.timeout)

    try:
        publications = asyncio.run(_list(config))
    except ClientError as e:
        logger.error(f"Failed to load catalog: {e.message}")
        return 1

    for publication in publications:
        print(f"{publication.slug}\t{publication.title}")

    logger.info(f"Catalog lists {len(publications)} publications")
    return 0


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--base-url",
        type=str,
        default=DEFAULT_BASE_URL,
        help=f"CALP archive base URL (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for every HTTP request (default: 30)",
    )


def _add_harvest_options(parser: argparse.ArgumentParser) -> None:
    _add_common_options(parser)
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for PDFs (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--work-dir",
        type=Path,
        default=None,
        help="Scratch directory for downloaded images (default: <output>/work)",
    )
    parser.add_argument(
        "--parallelism",
        type=int,
        default=DEFAULT_PARALLELISM,
        help=f"Publications processed at once (default: {DEFAULT_PARALLELISM})",
    )
    parser.add_argument(
        "--mode",
        choices=["pages", "archive"],
        default="pages",
        help="Fetch page images one by one, or unpack the .cbz archive (default: pages)",
    )
    parser.add_argument(
        "--placeholders",
        choices=["text", "image"],
        default="text",
        help="Render missing pages as text pages or as images (default: text)",
    )
    parser.add_argument(
        "--probe-ceiling",
        type=int,
        default=999,
        help="Highest page index probed when the page count is unknown (default: 999)",
    )
    parser.add_argument(
        "--miss-threshold",
        type=int,
        default=2,
        help="Consecutive missing pages that end probing (default: 2)",
    )
    parser.add_argument(
        "--font",
        type=Path,
        default=None,
        help="Font file for generated pages",
    )
    parser.add_argument(
        "--no-colophon",
        action="store_true",
        help="Do not append the colophon page",
    )
    parser.add_argument(
        "--keep-work-files",
        action="store_true",
        help="Keep downloaded images after the PDF is written",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="calp-distiller",
        description="Download CALP publications and assemble them into PDFs",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    harvest_parser = subparsers.add_parser(
        "harvest",
        help="Build a PDF for every publication in the catalog",
        description="Read the CALP catalog and build one PDF per publication.",
    )
    _add_harvest_options(harvest_parser)
    harvest_parser.set_defaults(func=harvest)

    single_parser = subparsers.add_parser(
        "harvest-publication",
        help="Build PDFs for selected publications",
        description="Build PDFs for publications given by folder name or URL.",
    )
    single_parser.add_argument(
        "--publication",
        action="append",
        required=True,
        help="Publication folder name (e.g. pha_91_4) or URL; may be repeated",
    )
    _add_harvest_options(single_parser)
    single_parser.set_defaults(func=harvest_publication)

    list_parser = subparsers.add_parser(
        "list",
        help="List the publications in the catalog",
        description="Print the folder name and title of every catalog publication.",
    )
    _add_common_options(list_parser)
    list_parser.set_defaults(func=list_catalog)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
