"""
CLI interface for Spanmark.

Pipe-friendly access to span extraction, rendering and tag application on
markup fragments.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .config import get_config
from .dom import text_content
from .editor import RichText, get_format
from .extract import extract
from .formats import html as _html  # noqa: F401 - ensure html format is registered
from .formats import xml as _xml  # noqa: F401 - ensure xml format is registered
from .formats.base import FormatStrategy, registry
from .positions import enclosing_elements
from .render import render
from .spans import SelectionRange, formatting_from_dict, formatting_to_dict

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG when verbose."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    package_logger = logging.getLogger("spanmark")
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    get_config()

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "file",
        nargs="?",
        help="Input file (reads from stdin if not provided)",
    )
    common.add_argument(
        "--type",
        type=str,
        dest="format_type",
        help="Force markup format (html or xml)",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug information to stderr",
    )

    parser = argparse.ArgumentParser(
        prog="spanmark",
        description="Convert rich-text markup to formatting spans and back",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser(
        "extract",
        parents=[common],
        help="Print text and formatting spans as JSON",
    )
    commands.add_parser(
        "render",
        parents=[common],
        help="Render JSON text and formatting spans as markup",
    )
    commands.add_parser(
        "normalize",
        parents=[common],
        help="Re-render markup with minimal nested tags",
    )

    apply = commands.add_parser(
        "apply",
        parents=[common],
        help="Apply (or remove) a tag over a character range",
    )
    _add_range_args(apply)
    apply.add_argument(
        "--tag",
        "-t",
        required=True,
        help="Tag name to apply (e.g., b, i, u, a)",
    )
    apply.add_argument(
        "--attr",
        "-a",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Attribute for the new tag (repeatable)",
    )
    apply.add_argument(
        "--remove",
        action="store_true",
        help="Remove the tag from the range instead",
    )

    selected = commands.add_parser(
        "selected",
        parents=[common],
        help="List elements that completely contain a character range",
    )
    _add_range_args(selected)

    return parser.parse_args(args)


def _add_range_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--start",
        "-s",
        type=int,
        required=True,
        help="Range start (character offset)",
    )
    extent = parser.add_mutually_exclusive_group(required=True)
    extent.add_argument(
        "--end",
        "-e",
        type=int,
        help="Range end (exclusive character offset)",
    )
    extent.add_argument(
        "--length",
        "-l",
        type=int,
        help="Range length in characters",
    )


def read_input(filepath: str | None) -> tuple[str, str | None]:
    """Read from file or stdin, return (content, filename)."""
    if filepath:
        with open(filepath, encoding="utf-8") as f:
            return f.read(), filepath
    return sys.stdin.read(), None


def parse_attrs(pairs: list[str]) -> dict[str, str]:
    """Parse NAME=VALUE pairs into an attribute dict."""
    attrs: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Invalid attribute: {pair!r}. Use NAME=VALUE (e.g., href=https://example.com)")
        attrs[name] = value
    return attrs


def parse_selection(parsed: argparse.Namespace) -> SelectionRange:
    if parsed.end is not None:
        return SelectionRange(parsed.start, parsed.end)
    return SelectionRange.from_length(parsed.start, parsed.length)


def get_strategy(
    content: str,
    filename: str | None,
    force_type: str | None,
) -> FormatStrategy:
    """Get markup format via override, detection, or the configured default."""
    if force_type:
        strategy = registry.get_by_name(force_type) or registry.get_by_extension(force_type)
        if strategy:
            return strategy
        raise ValueError(f"Unknown markup format: {force_type}")

    match = registry.detect(content, filename)
    if match:
        return match.strategy

    return get_format()


def run_command(parsed: argparse.Namespace, content: str, filename: str | None) -> str:
    """Execute one subcommand and return its output."""
    if parsed.command == "render":
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON input: {e}") from e
        if not isinstance(payload, dict) or not isinstance(payload.get("text"), str):
            raise ValueError('JSON input must be an object with a "text" string')
        formatting = formatting_from_dict(payload.get("formatting") or {})
        strategy = get_strategy("", None, parsed.format_type)
        return render(formatting, payload["text"], leading_space_marker=strategy.leading_space_marker)

    strategy = get_strategy(content, filename, parsed.format_type)
    root = strategy.parse(content)

    if parsed.command == "extract":
        return json.dumps(
            {"text": text_content(root), "formatting": formatting_to_dict(extract(root))},
            ensure_ascii=False,
            indent=2,
        )

    if parsed.command == "normalize":
        return render(extract(root), text_content(root), leading_space_marker=strategy.leading_space_marker)

    selection = parse_selection(parsed)

    if parsed.command == "selected":
        return "\n".join(
            element.tag for element in enclosing_elements(root, selection.start, selection.end)
        )

    # apply
    doc = RichText(root, markup_format=strategy)
    doc.apply_tag(parsed.tag, parse_attrs(parsed.attr), remove=parsed.remove, selection=selection)
    return doc.markup()


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)
    setup_logging(parsed.verbose)

    try:
        content, filename = read_input(parsed.file)
    except FileNotFoundError:
        print(f"Error: File not found: {parsed.file}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    try:
        output = run_command(parsed, content, filename)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
