#!/usr/bin/env python3
"""CLI entry point for prmirror.

Usage:
    python -m prmirror <command> [options]

Commands:
    files       List the changed files of a pull request with their document tokens
    show        Print the base or head content of a changed file
    ranges      Print the commenting ranges of a changed file
    parse-diff  Parse a file patch and output structured hunk information
"""

import argparse
import logging
import sys

from prmirror.commands.document import cmd_ranges, cmd_show
from prmirror.commands.files import cmd_files
from prmirror.commands.parse_diff import cmd_parse_diff
from prmirror.config import FILE_LIST_LAYOUTS, ConfigError, MirrorConfig
from prmirror.domain.diff_source import DiffSource


def _add_pr_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "pr_number",
        type=int,
        help="Pull request number",
    )
    parser.add_argument(
        "--repo",
        help="Repository in owner/repo format (default: from config or PRMIRROR_REPO)",
    )
    parser.add_argument(
        "--source",
        choices=[s.value for s in DiffSource],
        help="Where file content is read from (default: github)",
    )
    parser.add_argument(
        "--repo-path",
        help="Path to a local clone, used with --source local (default: current directory)",
    )
    parser.add_argument(
        "--config",
        help="Path to a YAML config file (default: .prmirror.yaml if present)",
    )


def _add_document_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--uri",
        help="Document token as printed by the files command",
    )
    parser.add_argument(
        "--file",
        dest="file_name",
        help="Head-side path of the changed file",
    )
    parser.add_argument(
        "--side",
        choices=["base", "head"],
        default="head",
        help="Which side of the file (default: head)",
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Mirror the changed files of a GitHub pull request",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  files       List the changed files of a pull request with their document tokens
  show        Print the base or head content of a changed file
  ranges      Print the commenting ranges of a changed file
  parse-diff  Parse a file patch and output structured hunk information

Examples:
  prmirror files 42 --repo owner/repo --layout tree
  prmirror show 42 --repo owner/repo --file src/app.py --side base
  prmirror ranges 42 --repo owner/repo --uri 'pr:/src/app.py?...'
  prmirror show 42 --source local --repo-path ~/src/repo --file src/app.py
  gh api repos/owner/repo/pulls/42/files --jq '.[0].patch' | prmirror parse-diff --format text
        """,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # files command
    parser_files = subparsers.add_parser(
        "files",
        help="List the changed files of a pull request",
    )
    _add_pr_arguments(parser_files)
    parser_files.add_argument(
        "--layout",
        choices=list(FILE_LIST_LAYOUTS),
        help="Flat list or grouped by directory (default: from config)",
    )
    parser_files.add_argument(
        "--json",
        action="store_true",
        help="Print records as JSON",
    )

    # show command
    parser_show = subparsers.add_parser(
        "show",
        help="Print the base or head content of a changed file",
    )
    _add_pr_arguments(parser_show)
    _add_document_arguments(parser_show)

    # ranges command
    parser_ranges = subparsers.add_parser(
        "ranges",
        help="Print the commenting ranges of a changed file",
    )
    _add_pr_arguments(parser_ranges)
    _add_document_arguments(parser_ranges)

    # parse-diff command
    parser_parse_diff = subparsers.add_parser(
        "parse-diff",
        help="Parse a file patch and output structured hunk information",
    )
    parser_parse_diff.add_argument(
        "--input-file",
        help="Path to patch file. If not provided, reads from stdin",
    )
    parser_parse_diff.add_argument(
        "--format",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)",
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "parse-diff":
        logging.basicConfig(
            level=logging.INFO if args.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
        return cmd_parse_diff(
            input_file=args.input_file,
            output_format=args.format,
        )

    try:
        config = MirrorConfig.load(
            config_path=args.config,
            overrides={
                "repo": args.repo,
                "source": args.source,
                "local_repo_path": args.repo_path,
                "log_level": "INFO" if args.verbose else None,
            },
        )
        if not config.repo:
            raise ConfigError("No repository configured; pass --repo or set PRMIRROR_REPO")
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Route to command implementations with explicit parameters
    try:
        if args.command == "files":
            return cmd_files(
                config=config,
                pr_number=args.pr_number,
                layout=args.layout,
                as_json=args.json,
            )

        elif args.command == "show":
            return cmd_show(
                config=config,
                pr_number=args.pr_number,
                uri=args.uri,
                file_name=args.file_name,
                side=args.side,
            )

        elif args.command == "ranges":
            return cmd_ranges(
                config=config,
                pr_number=args.pr_number,
                uri=args.uri,
                file_name=args.file_name,
                side=args.side,
            )
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
