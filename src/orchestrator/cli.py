"""
Storelens CLI
=============

Command-line interface for the app-store tools. Each command runs one
tool and prints its JSON report on stdout.

Commands:
    tools                   - List available tools
    search_app              - Search apps by term
    get_app_details         - Full listing for one app
    analyze_top_keywords    - Brand-dominance competition for a keyword
    analyze_keyword_volume  - Install-volume competition for a keyword
    analyze_reviews         - Review sentiment, keywords, versions, trend
    get_pricing_details     - Price, in-app purchases and monetization model
    get_developer_info      - Developer portfolio
    get_version_history     - Current version and release notes

Usage:
    python -m src.orchestrator.cli search_app --term "meditation" --platform ios
    python -m src.orchestrator.cli analyze_reviews --app-id com.spotify.music --platform android --num 200
    python -m src.orchestrator.cli get_pricing_details --app-id 284882215 --platform ios --json-logs

Exit code is 1 when the tool returns an error report or the parameters
are invalid.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..api.services import ToolService, list_tools
from ..stores import get_settings
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def _add_common(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--platform",
        required=True,
        choices=["ios", "android"],
        help="Store to query",
    )
    parser.add_argument(
        "--country",
        default="us",
        help="Two-letter country code (default: us)",
    )


def _add_app(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--app-id",
        dest="appId",
        required=True,
        help="Package name (Android) or numeric id / bundle id (iOS)",
    )
    parser.add_argument(
        "--lang",
        default="en",
        help="Language code (default: en)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storelens",
        description="Storelens app store intelligence CLI",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines on stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("tools", help="List available tools")

    search_parser = subparsers.add_parser("search_app", help="Search apps by term")
    _add_common(search_parser)
    search_parser.add_argument("--term", required=True, help="Search term")
    search_parser.add_argument("--num", type=int, default=10, help="Number of results (default: 10)")

    details_parser = subparsers.add_parser("get_app_details", help="Full listing for one app")
    _add_common(details_parser)
    _add_app(details_parser)

    for name, help_text in (
        ("analyze_top_keywords", "Brand-dominance competition for a keyword"),
        ("analyze_keyword_volume", "Install-volume competition for a keyword"),
    ):
        keyword_parser = subparsers.add_parser(name, help=help_text)
        _add_common(keyword_parser)
        keyword_parser.add_argument("--keyword", required=True, help="Keyword to analyze")
        keyword_parser.add_argument("--num", type=int, default=10, help="Number of top apps (default: 10)")

    reviews_parser = subparsers.add_parser("analyze_reviews", help="Analyze app reviews")
    _add_common(reviews_parser)
    _add_app(reviews_parser)
    reviews_parser.add_argument(
        "--sort",
        default="newest",
        choices=["newest", "relevance", "rating", "helpful"],
        help="Review order (default: newest)",
    )
    reviews_parser.add_argument("--num", type=int, default=100, help="Number of reviews (default: 100)")
    reviews_parser.add_argument(
        "--sentiment-scale",
        dest="sentimentScale",
        choices=["five_level", "three_level"],
        help="Override the configured sentiment scale",
    )

    pricing_parser = subparsers.add_parser("get_pricing_details", help="Pricing and monetization")
    _add_common(pricing_parser)
    _add_app(pricing_parser)

    developer_parser = subparsers.add_parser("get_developer_info", help="Developer portfolio")
    _add_common(developer_parser)
    developer_parser.add_argument(
        "--developer-id",
        dest="developerId",
        required=True,
        help="Developer id (iOS artist id, Play developer id or name)",
    )
    developer_parser.add_argument("--num", type=int, default=50, help="Maximum apps (default: 50)")

    versions_parser = subparsers.add_parser("get_version_history", help="Version history")
    _add_common(versions_parser)
    _add_app(versions_parser)

    return parser


def tool_params(args: argparse.Namespace) -> Dict[str, Any]:
    """Namespace -> tool parameters, dropping CLI-only flags and unset options."""
    skip = {"command", "verbose", "json_logs"}
    return {
        key: value
        for key, value in vars(args).items()
        if key not in skip and value is not None
    }


def cmd_tools(args) -> int:
    """List available tools."""
    tools = list_tools()
    print("=" * 60)
    print("STORELENS TOOLS")
    print("=" * 60)
    for tool in tools:
        print(f"  {tool['name']:24} {tool['description']}")
    print()
    print(f"Total: {len(tools)} tools")
    return 0


def cmd_tool(args, service: Optional[ToolService] = None) -> int:
    """Run one tool and print its JSON report."""
    service = service or ToolService()
    try:
        result = service.call(args.command, tool_params(args))
    except ValidationError as e:
        print(f"ERROR: Invalid parameters for {args.command}:", file=sys.stderr)
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            print(f"  - {location}: {error['msg']}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 1 if result.get("isError") else 0


def main(argv: Optional[List[str]] = None, service: Optional[ToolService] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(
        level="DEBUG" if args.verbose else settings.logging.level,
        json_output=args.json_logs or settings.logging.json_logs,
        log_file=settings.logging.log_file,
    )

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "tools":
        return cmd_tools(args)
    return cmd_tool(args, service)


if __name__ == "__main__":
    sys.exit(main())
