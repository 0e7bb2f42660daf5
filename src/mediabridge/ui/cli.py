from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from mediabridge.app import (
    build_media_bridge,
    open_mapping_store,
    resolve_reference,
    verify_mapping,
)
from mediabridge.config import ConfigurationError, configure_logging, get_provider_ranking_config
from mediabridge.domain.model import MediaCategory, Reference
from mediabridge.domain.ports import MappingNotFound
from mediabridge.domain.resolution import AllProvidersExhausted, ProviderRankingTable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from mediabridge.app import MediaBridge
    from mediabridge.domain.ports import MappingCatalog

log = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Could not find this title on this source. Try searching manually."


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve media references across providers")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve a reference to a provider id")
    resolve.add_argument("reference", type=str, help='Reference such as "tmdb:1429"')
    resolve.add_argument("--provider", type=str, help="Target provider (defaults to primary)")
    resolve.add_argument("--title", type=str, help="Title to search for")
    resolve.add_argument(
        "--media-type",
        type=MediaCategory,
        choices=list(MediaCategory),
        help="Media type hint; also selects the fallback chain",
    )
    resolve.add_argument(
        "--fallback",
        action="store_true",
        help="Try the remaining working providers if the target fails",
    )
    resolve.add_argument("--info", action="store_true", help="Also fetch full media info")

    providers = subparsers.add_parser("providers", help="Show the provider ranking table")
    providers.add_argument(
        "--media-type",
        type=MediaCategory,
        choices=list(MediaCategory),
        help="Only show one category",
    )

    mappings = subparsers.add_parser("mappings", help="Inspect or delete stored mappings")
    mappings_sub = mappings.add_subparsers(dest="mappings_command", required=True)
    show = mappings_sub.add_parser("show", help="Show mappings for a reference or provider")
    target = show.add_mutually_exclusive_group(required=True)
    target.add_argument("--reference", type=str, help="List every provider for a reference")
    target.add_argument("--provider", type=str, help="List mappings stored for a provider")
    show.add_argument("--limit", type=int, default=50, help="Page size for --provider")
    show.add_argument("--offset", type=int, default=0, help="Offset for --provider")
    remove = mappings_sub.add_parser("delete", help="Delete one mapping")
    remove.add_argument("reference", type=str)
    remove.add_argument("provider", type=str)

    verify = subparsers.add_parser("verify", help="Store a human-confirmed mapping")
    verify.add_argument("reference", type=str)
    verify.add_argument("provider", type=str)
    verify.add_argument("native_id", type=str, help="Provider-native id")
    verify.add_argument("--title", type=str, required=True, help="Provider display title")
    verify.add_argument("--user-id", type=str, required=True, help="Confirming user")

    return parser.parse_args(list(argv))


def _run_resolve(bridge: MediaBridge, args: argparse.Namespace) -> None:
    resolution, prompt = resolve_reference(
        bridge,
        args.reference,
        provider=args.provider,
        title=args.title,
        media_type=args.media_type,
        fetch_info=args.info,
        allow_fallback=args.fallback,
    )
    log.info(
        f"{resolution.reference} -> {resolution.provider}:{resolution.native_id} "
        f"{resolution.title!r} confidence={resolution.confidence:.2f} "
        f"verified={resolution.verified} via={resolution.origin}"
    )
    if resolution.used_fallback:
        log.info(f"Used fallback; tried {', '.join(resolution.tried_providers)}")
    if resolution.media_info is not None:
        log.info(f"Episodes: {resolution.media_info.total_episodes}")
    if prompt is not None:
        if prompt.multiple_matches:
            log.info("Several sources share this name")
        for candidate in prompt.alternatives:
            log.info(
                f"  alternative {candidate.native_id} {candidate.title!r} {candidate.score:.2f}"
            )


def _show_providers(ranking: ProviderRankingTable, category: MediaCategory | None) -> None:
    categories = [category] if category is not None else list(ranking.categories)
    for current in categories:
        log.info(f"{current}:")
        for rank, provider in enumerate(ranking.providers(current), start=1):
            state = "working" if provider.working else "broken"
            log.info(f"  {rank}. {provider.name} ({provider.display_name}) {state}")


def _run_mappings(store: MappingCatalog, args: argparse.Namespace) -> None:
    if args.mappings_command == "delete":
        store.delete(Reference.parse(args.reference), args.provider)
        return

    if args.reference is not None:
        mappings = store.list_for_reference(Reference.parse(args.reference))
        total = len(mappings)
    else:
        mappings, total = store.list_for_provider(
            args.provider, limit=args.limit, offset=args.offset
        )
    log.info(f"{total} mapping(s)")
    for mapping in mappings:
        verified = f"verified by {mapping.verified_by}" if mapping.is_verified else "auto"
        log.info(
            f"  {mapping.reference} -> {mapping.provider}:{mapping.provider_native_id} "
            f"{mapping.provider_display_title!r} {mapping.confidence:.2f} {verified}"
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    if parsed_args.command == "providers":
        try:
            ranking = ProviderRankingTable.from_config(get_provider_ranking_config())
        except ConfigurationError:
            log.exception("Configuration error")
            sys.exit(2)
        _show_providers(ranking, parsed_args.media_type)
        return

    try:
        if parsed_args.command == "resolve":
            with build_media_bridge() as bridge:
                _run_resolve(bridge, parsed_args)
        elif parsed_args.command == "mappings":
            _run_mappings(open_mapping_store(), parsed_args)
        elif parsed_args.command == "verify":
            mapping = verify_mapping(
                parsed_args.reference,
                parsed_args.provider,
                native_id=parsed_args.native_id,
                title=parsed_args.title,
                user_id=parsed_args.user_id,
            )
            log.info(
                f"Verified {mapping.reference} -> {mapping.provider}:{mapping.provider_native_id}"
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except AllProvidersExhausted as exc:
        log.error(f"{NOT_FOUND_MESSAGE} ({exc})")  # noqa: TRY400
        sys.exit(1)
    except MappingNotFound as exc:
        log.error(str(exc))  # noqa: TRY400
        sys.exit(1)
    except (ConfigurationError, ValueError):
        log.exception("Invalid input or configuration")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
