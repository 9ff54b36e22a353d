#!/usr/bin/env python3
"""
Gryffs Archiver - saves a user's gryffs for offline keeping.

Opens a browser on gryffs.com, waits for the operator to log in, lists the
user's gryffs and archives each one with its images and an info.json
manifest.

Usage:
    python -m gryffs_archiver.main --output ./archive

Features:
    - Operator-driven login in a visible browser, optionally saved for reuse
    - Extracts name, species, level, experience and battle statistics
    - Downloads the main image, thumbnail and description images
    - Rewrites description images to the local copies
    - Generates a listing index and an error log
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from gryffs_archiver.archive import CatalogArchiver, CatalogSession
from gryffs_archiver.config import ArchiveConfig, FieldSelectors
from gryffs_archiver.errors import ArchiverError
from gryffs_archiver.utils.log import (
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_info,
    print_warning,
)
from gryffs_archiver.utils.constants import (
    DEFAULT_ARCHIVE_ROOT,
    DEFAULT_BASE_URL,
    DEFAULT_ENTRY_DELAY,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_TIMEOUT,
)


LOGIN_PROMPT = "Once you are logged in, press ENTER here to continue."


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list, defaults to ``sys.argv[1:]``

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='gryffs-archiver',
        description='Archive your gryffs from gryffs.com',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --output ./archive
    %(prog)s --output ./archive --session-file ./session.json
    %(prog)s --only 5193 5194 --verbose
        """
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default=DEFAULT_ARCHIVE_ROOT,
        help=f'Archive root directory (default: {DEFAULT_ARCHIVE_ROOT})'
    )

    parser.add_argument(
        '--base-url',
        type=str,
        default=DEFAULT_BASE_URL,
        help=f'Catalog URL (default: {DEFAULT_BASE_URL})'
    )

    parser.add_argument(
        '--user-id',
        type=str,
        default=None,
        help='User whose gryffs to archive (default: the logged-in user)'
    )

    parser.add_argument(
        '--only',
        nargs='+',
        metavar='ID',
        default=[],
        help='Archive only these gryff ids, skipping the listing'
    )

    parser.add_argument(
        '--limit', '-l',
        type=int,
        default=None,
        help='Archive at most this many gryffs'
    )

    parser.add_argument(
        '--delay',
        type=float,
        default=DEFAULT_ENTRY_DELAY,
        help=f'Delay between gryffs in seconds (default: {DEFAULT_ENTRY_DELAY})'
    )

    parser.add_argument(
        '--timeout',
        type=int,
        default=DEFAULT_PAGE_TIMEOUT,
        help=f'Page load timeout in milliseconds (default: {DEFAULT_PAGE_TIMEOUT})'
    )

    parser.add_argument(
        '--request-timeout',
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f'Image download timeout in seconds (default: {DEFAULT_TIMEOUT})'
    )

    parser.add_argument(
        '--session-file',
        type=str,
        default=None,
        help='Load the login from this file if it exists, save it there otherwise'
    )

    parser.add_argument(
        '--headless',
        action='store_true',
        help='Run the browser hidden (requires a saved --session-file)'
    )

    parser.add_argument(
        '--stats-selector',
        type=str,
        default=None,
        help='CSS selector of the element holding "Wins / Losses"'
    )

    parser.add_argument(
        '--hunting-selector',
        type=str,
        default=None,
        help='CSS selector of the element holding "Hunting Exp"'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ArchiveConfig:
    """
    Build the archive configuration from parsed arguments.

    Raises:
        ValueError: If the arguments are inconsistent
    """
    if args.limit is not None and args.limit < 1:
        raise ValueError("--limit must be at least 1")
    if args.delay < 0:
        raise ValueError("--delay cannot be negative")
    for entry_id in args.only:
        if not (entry_id.isdigit() and entry_id.isascii()):
            raise ValueError(f"Gryff ids must be numeric: {entry_id!r}")
    if args.headless and not (args.session_file and os.path.exists(args.session_file)):
        raise ValueError("--headless needs an existing --session-file to log in")

    return ArchiveConfig(
        archive_root=args.output,
        base_url=args.base_url,
        timeout=args.timeout,
        request_timeout=args.request_timeout,
        headless=args.headless,
        session_file=args.session_file,
        delay=args.delay,
        limit=args.limit,
        only_ids=list(args.only),
        selectors=FieldSelectors(
            stats=args.stats_selector,
            hunting=args.hunting_selector,
        ),
    )


async def wait_for_login(session: CatalogSession) -> None:
    """
    Block until the operator confirms the login, then mark the session ready.

    A saved session file skips the prompt.
    """
    if session.has_saved_state:
        print_info(f"Using saved login from {session.session_file}")
        session.mark_ready()
        return

    print_info(
        'Please log in to your Gryffs account in the opened browser. '
        'Do not attempt to use a different browser, as this terminal '
        'will not have access to it.'
    )
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, input, LOGIN_PROMPT)
    session.mark_ready()

    if session.session_file:
        await session.save_state()


def print_banner() -> None:
    """Print the application banner."""
    banner = """
╔═══════════════════════════════════════════════════════════════╗
║                     GRYFFS ARCHIVER v1.0                      ║
║              Offline archive of your gryffs.com pets          ║
╚═══════════════════════════════════════════════════════════════╝
    """
    print_status(banner, "bold cyan")


def print_summary(result) -> None:
    """
    Print the run summary.

    Args:
        result: ArchiveRunResult object
    """
    images = sum(o.images_downloaded for o in result.archived)
    missing = sum(len(o.images_failed) for o in result.archived)

    print("\n" + "=" * 60)
    print_success("ARCHIVE SUMMARY")
    print("=" * 60)
    if result.user_id:
        print(f"  User:               {result.user_id}")
    print(f"  Gryffs archived:    {len(result.archived)}")
    print(f"  Gryffs failed:      {len(result.failed)}")
    print(f"  Description images: {images} ({missing} left remote)")
    print(f"  Duration:           {result.duration_seconds:.1f} seconds")

    if result.failed:
        print("")
        print("  Failures:")
        for outcome in result.failed:
            print(f"    {outcome.entry.id}: {outcome.error_type}: {outcome.error}")

    print("=" * 60 + "\n")


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the gryffs archiver.

    Returns:
        Exit code (0 when every gryff was archived, 1 otherwise)
    """
    args = parse_arguments(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level, log_file=args.log_file)

    if not args.quiet:
        print_banner()

    try:
        config = build_config(args)

        if not args.quiet:
            print_info(f"Catalog: {config.base_url}")
            print_info(f"Output: {config.archive_root}")

        session = CatalogSession(
            base_url=config.base_url,
            timeout=config.timeout,
            request_timeout=config.request_timeout,
            headless=config.headless,
            user_agent=config.user_agent,
            session_file=config.session_file,
        )

        async with session:
            await session.navigate(f"{config.base_url}/")
            await wait_for_login(session)

            archiver = CatalogArchiver(config, session)
            result = await archiver.archive_all(user_id=args.user_id)

        if not args.quiet:
            print_summary(result)

        print_success(f"Gryffs archived to: {config.archive_root}")

        if result.failed:
            print_warning(f"{len(result.failed)} gryffs could not be archived")
            return 1
        return 0

    except KeyboardInterrupt:
        print_error("\nArchiving interrupted by user")
        return 1
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except ArchiverError as e:
        print_error(f"Error: {e}")
        return 1
    except Exception as e:
        print_error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
