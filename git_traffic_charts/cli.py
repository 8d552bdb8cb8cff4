#!/usr/bin/env python3
"""
Command-line interface for git-traffic-charts.
"""

import argparse
import logging
import sys
from typing import Optional

from .config import load_configuration
from .errors import ConfigurationError, TrafficChartsError

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="git-traffic-charts",
        description="GitHub repository visitor charts"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    subparsers.add_parser("server", help="Start the chart web server")

    # Chart command
    chart_parser = subparsers.add_parser("chart", help="Render a repository's visitor chart to a file")
    chart_parser.add_argument("repo", help="Repository in owner/name form")
    chart_parser.add_argument("-o", "--output", required=True, help="Path of the PNG to write")
    chart_parser.add_argument(
        "--user",
        default=None,
        help="User whose registered token should be used (default: the repository owner)"
    )

    return parser


def render_chart_to_file(repo: str, output: str, auth_user: Optional[str] = None) -> int:
    """Render one chart through the same cache and token store the server uses."""
    from .context import create_app_context

    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name or "/" in name:
        print(f"Invalid repository {repo!r}, expected owner/name", file=sys.stderr)
        return 2

    context = create_app_context(load_configuration())
    result = context.charts.render_chart(owner, name, auth_user)
    with open(output, "wb") as f:
        f.write(result.png)
    print(f"Wrote {result.repo_id} chart to {output} (data expires {result.expires})")
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        if args.command == "server":
            from .server import run_server
            run_server(load_configuration())
            return 0
        elif args.command == "chart":
            return render_chart_to_file(args.repo, args.output, args.user)
        else:
            parser.print_help()
            return 1
    except ConfigurationError as e:
        logger.error(f"Couldn't load configuration: {e}")
        return 1
    except TrafficChartsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nServer stopped by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
