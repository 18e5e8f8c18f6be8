"""Main CLI entry point for the restricted-xml command-line tool.

Provides value and node queries, tree dumps and batch checks of documents
written in the restricted XML dialect.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from restricted_xml_parser import __version__
from restricted_xml_parser.api import ParseResult, parse_file
from restricted_xml_parser.shared import (
    ConfigError,
    NullDiagnosticSink,
    ParserConfig,
    get_logger,
)

logger = get_logger(__name__, component="cli")


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig()
        self.output_format = "text"

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        The file holds a serialized ParserConfig, optionally next to an
        ``output_format`` key.

        Raises:
            ConfigError: when the file is unreadable or invalid
        """
        config = cls()
        try:
            data = json.loads(config_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must hold a JSON object")

        config.output_format = data.pop("output_format", config.output_format)
        config.parser_config = ParserConfig.from_dict(data)
        return config


def _load(path: Path, config: CLIConfig) -> ParseResult:
    # Diagnostics are kept on the result only; commands report failures themselves.
    return parse_file(path, config.parser_config, NullDiagnosticSink())


def _report_failure(result: ParseResult, path: Path) -> None:
    error = result.error
    message = f"{error.kind.name}: {error.message}" if error else "unknown error"
    print(f"Failed to parse {path}: {message}", file=sys.stderr)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="restricted-xml",
        description="Parse restricted XML documents and query them by path",
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path (JSON)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    get_parser = subparsers.add_parser("get", help="Read a value or attribute")
    get_parser.add_argument("file", type=Path, help="XML file")
    get_parser.add_argument("query", help="Value path, e.g. root/foo/bar$ or root/foo:attr")
    get_parser.add_argument(
        "--type", "-t",
        choices=["str", "int", "bool", "double"],
        default="str",
        help="Value type (default: str)",
    )
    get_parser.add_argument("--default", "-d", help="Value printed when the path misses")

    find_parser = subparsers.add_parser("find", help="Find a node by predicate path")
    find_parser.add_argument("file", type=Path, help="XML file")
    find_parser.add_argument("query", help="Predicate path, e.g. root/item?id=2")
    find_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Print the whole subtree of the found node",
    )

    dump_parser = subparsers.add_parser("dump", help="Print a parsed tree")
    dump_parser.add_argument("file", type=Path, help="XML file")
    dump_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default=None,
        help="Output format (default: text)",
    )

    check_parser = subparsers.add_parser("check", help="Check that files parse")
    check_parser.add_argument("paths", nargs="+", type=Path, help="XML files")
    check_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default=None,
        help="Output format (default: text)",
    )

    return parser


_DEFAULT_TYPES = {"int": int, "double": float}


def cmd_get(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle get command."""
    default: Any = args.default
    if default is not None and args.type in _DEFAULT_TYPES:
        try:
            default = _DEFAULT_TYPES[args.type](default)
        except ValueError:
            print(f"Error: --default {default!r} is not a valid {args.type}", file=sys.stderr)
            return 2

    result = _load(args.file, config)
    if not result.success:
        _report_failure(result, args.file)
        return 1

    document = result.document
    value = document.get_value(args.query)
    if value is None:
        if default is None:
            print(f"Not found: {args.query}", file=sys.stderr)
            return 1
        print(args.default)
        return 0

    if args.type == "int":
        print(document.get_int(args.query))
    elif args.type == "double":
        print(document.get_double(args.query))
    elif args.type == "bool":
        print("true" if document.get_bool(args.query, default == "true") else "false")
    else:
        print(value)
    return 0


def cmd_find(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle find command."""
    result = _load(args.file, config)
    if not result.success:
        _report_failure(result, args.file)
        return 1

    handle = result.document.get_node(args.query)
    if handle is None:
        print(f"Not found: {args.query}", file=sys.stderr)
        return 1
    print(result.document.render(handle, recursive=args.recursive))
    return 0


def cmd_dump(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle dump command."""
    result = _load(args.file, config)
    if not result.success:
        _report_failure(result, args.file)
        return 1

    output_format = args.format or config.output_format
    if output_format == "json":
        print(json.dumps(result.document.to_dict(), indent=2))
    else:
        print(result.document.render())
    return 0


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format check results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    if not results:
        return "No results to display."

    successful = sum(1 for r in results if r.get("success", False))
    lines = [f"Checked {len(results)} files, {successful} parsed", "-" * 60]
    for result in results:
        status = "OK  " if result.get("success", False) else "FAIL"
        lines.append(f"{status} {result['file']}")
        if "declaration_ok" in result:
            lines.append(
                f"     Declaration: {'ok' if result['declaration_ok'] else 'mismatch'}, "
                f"Nodes: {result.get('node_count', 0)}, "
                f"Time: {result.get('processing_time_ms', 0):.1f}ms"
            )
        if "error" in result:
            error = result["error"]
            if isinstance(error, dict):
                lines.append(f"     Error: {error['kind']}: {error['message']}")
            else:
                lines.append(f"     Error: {error}")
    return "\n".join(lines)


def cmd_check(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle check command."""
    results: List[Dict[str, Any]] = []
    for path in args.paths:
        try:
            result = _load(path, config)
        except OSError as e:
            logger.warning("Could not open file", extra={"file": str(path)})
            results.append({"file": str(path), "success": False, "error": str(e)})
            continue
        entry = result.to_dict()
        entry["file"] = str(path)
        results.append(entry)

    print(format_results(results, args.format or config.output_format))
    successful = sum(1 for r in results if r.get("success", False))
    return 0 if results and successful == len(results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    handlers = {
        "get": cmd_get,
        "find": cmd_find,
        "dump": cmd_dump,
        "check": cmd_check,
    }
    try:
        return handlers[args.command](args, config)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
