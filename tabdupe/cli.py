#!/usr/bin/env python3
"""
tabdupe - duplicate tab finder

Command-line interface for analyzing a snapshot of open browser tabs.
Follows Unix philosophy: read a snapshot, print a report, compose with pipes.
"""
import sys
import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.table import Table

from tabdupe.analyzer import analyze, badge_text, count_exact_duplicates
from tabdupe.classifier import classify
from tabdupe.config import get_config, init_config
from tabdupe.exporters import export_file, render_result
from tabdupe.importers import load_tabs
from tabdupe.models import AnalysisResult, TabRecord

logger = logging.getLogger(__name__)


console = Console()


def _truncate(text: Optional[str], width: int) -> str:
    text = text or ""
    return text if len(text) <= width else text[:width - 1] + "…"


def output_result(result: AnalysisResult, limit: Optional[int] = None):
    """Print an analysis result as rich tables."""
    if result.is_empty:
        console.print("[green]No duplicate or similar tabs found[/green]")
        return

    if result.duplicate_groups:
        table = Table(title="Exact Duplicates")
        table.add_column("Group", style="cyan")
        table.add_column("ID", style="magenta")
        table.add_column("Title", style="green")
        table.add_column("URL", style="blue")
        table.add_column("Action", style="yellow")

        for number, group in enumerate(result.duplicate_groups, 1):
            for index, tab in enumerate(group.tabs):
                table.add_row(
                    str(number) if index == 0 else "",
                    str(tab.id),
                    _truncate(tab.title or "Untitled", 40),
                    _truncate(tab.url, 50),
                    "keep" if index == 0 else "close",
                )

        console.print(table)

    pairs = result.similar_pairs[:limit] if limit else result.similar_pairs
    if pairs:
        table = Table(title="Similar Tabs")
        table.add_column("Score", style="cyan")
        table.add_column("Reason", style="yellow")
        table.add_column("Tab A", style="green")
        table.add_column("Tab B", style="green")

        for pair in pairs:
            table.add_row(
                f"{pair.score}%",
                pair.reason,
                f"[{pair.a.id}] {_truncate(pair.a.title or pair.a.url, 35)}",
                f"[{pair.b.id}] {_truncate(pair.b.title or pair.b.url, 35)}",
            )

        console.print(table)
        if len(pairs) < result.total_similar_pair_count:
            console.print(f"[dim]... and {result.total_similar_pair_count - len(pairs)} more pairs[/dim]")

    console.print(f"Duplicates to close: {result.total_duplicate_tab_count}")
    console.print(f"Similar pairs: {result.total_similar_pair_count}")
    if result.pool_truncated:
        console.print(f"[yellow]Only the first {result.compared_tab_count} tabs "
                      f"were compared for similarity[/yellow]")


def cmd_analyze(args):
    """Analyze a tab snapshot."""
    config = get_config()
    tabs = load_tabs(Path(args.file), args.format)

    result = analyze(tabs, threshold=config.threshold, max_pool=config.max_comparison_pool)
    limit = config.pair_display_limit

    if args.save:
        export_file(result, Path(args.save), limit=limit)
        if not args.quiet:
            console.print(f"[green]Saved report to {args.save}[/green]")

    if args.output == "table":
        output_result(result, limit)
    else:
        text = render_result(result, args.output, limit)
        if text:
            print(text)


def cmd_compare(args):
    """Compare two URLs."""
    config = get_config()
    tab_a = TabRecord(id="a", url=args.url_a, title=args.title_a)
    tab_b = TabRecord(id="b", url=args.url_b, title=args.title_b)

    verdict = classify(tab_a, tab_b, threshold=config.threshold)

    if args.output == "json":
        print(json.dumps(verdict.to_dict(), indent=2))
    elif verdict.is_similar:
        console.print(f"[green]Similar[/green] ({verdict.score}%): {verdict.reason}")
    else:
        console.print(f"[yellow]Not similar[/yellow] ({verdict.score}%)")


def cmd_badge(args):
    """Print the exact-duplicate count shown on the toolbar badge."""
    tabs = load_tabs(Path(args.file), args.format)
    count = count_exact_duplicates(tabs)
    if args.text:
        print(badge_text(count))
    else:
        print(count)


def cmd_config(args):
    """Manage configuration."""
    config = get_config()

    if args.action == "show":
        if args.key:
            if not hasattr(config, args.key):
                console.print(f"[red]Unknown config key: {args.key}[/red]")
                sys.exit(1)
            print(getattr(config, args.key))
        else:
            print(json.dumps(asdict(config), indent=2))

    elif args.action == "set":
        if not args.key or args.value is None:
            console.print("[red]Error: config set requires KEY and VALUE[/red]")
            sys.exit(1)
        setattr(config, args.key, config.coerce(args.key, args.value))
        config.validate()
        config.save(Path(args.path) if args.path else None)
        if not args.quiet:
            console.print(f"[green]Set {args.key} = {getattr(config, args.key)}[/green]")


def setup_logging(level: str, verbose: bool = False):
    """Configure the root logger for command-line use."""
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format='%(levelname)s: %(message)s')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabdupe",
        description="tabdupe - find duplicate and similar browser tabs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tabdupe analyze tabs.json
  tabdupe analyze tabs.json --threshold 90 -o json
  tabdupe analyze tabs.json -o ids | xargs -n1 close-tab
  tabdupe compare https://example.com/a https://www.example.com/a
  tabdupe badge tabs.json
  tabdupe config set threshold 85

Configuration:
  Config file: ~/.config/tabdupe/config.toml or ./tabdupe.toml
  Environment: TABDUPE_THRESHOLD, TABDUPE_PAIR_DISPLAY_LIMIT
        """
    )

    # Global options
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    # analyze
    analyze_parser = subparsers.add_parser("analyze", help="Find duplicate and similar tabs")
    analyze_parser.add_argument("file", help="Tab snapshot (json, csv or text)")
    analyze_parser.add_argument("--format", choices=["json", "csv", "text"],
                                help="Snapshot format (default: from extension)")
    analyze_parser.add_argument("--threshold", type=int, help="Similarity threshold 0-100")
    analyze_parser.add_argument("--max-pool", type=int, help="Maximum tabs compared pairwise")
    analyze_parser.add_argument("--limit", type=int, help="Similar pairs to show (0 for all)")
    analyze_parser.add_argument("-o", "--output", choices=["table", "json", "markdown", "ids"],
                                help="Output format")
    analyze_parser.add_argument("--save", help="Also write the report to a file")
    analyze_parser.set_defaults(func=cmd_analyze)

    # compare
    compare_parser = subparsers.add_parser("compare", help="Compare two URLs")
    compare_parser.add_argument("url_a", help="First URL")
    compare_parser.add_argument("url_b", help="Second URL")
    compare_parser.add_argument("--title-a", help="Title of the first tab")
    compare_parser.add_argument("--title-b", help="Title of the second tab")
    compare_parser.add_argument("--threshold", type=int, help="Similarity threshold 0-100")
    compare_parser.add_argument("-o", "--output", choices=["plain", "json"], default="plain",
                                help="Output format")
    compare_parser.set_defaults(func=cmd_compare)

    # badge
    badge_parser = subparsers.add_parser("badge", help="Count exact duplicates")
    badge_parser.add_argument("file", help="Tab snapshot (json, csv or text)")
    badge_parser.add_argument("--format", choices=["json", "csv", "text"],
                              help="Snapshot format (default: from extension)")
    badge_parser.add_argument("--text", action="store_true",
                              help="Print badge text (empty when there are no duplicates)")
    badge_parser.set_defaults(func=cmd_badge)

    # config
    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("action", choices=["show", "set"], help="Action")
    config_parser.add_argument("key", nargs="?", help="Setting name")
    config_parser.add_argument("value", nargs="?", help="New value (for set)")
    config_parser.add_argument("--path", help="Config file to write (default: user config)")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Initialize configuration with CLI overrides
    config_args = {
        "threshold": getattr(args, "threshold", None),
        "max_comparison_pool": getattr(args, "max_pool", None),
        "pair_display_limit": getattr(args, "limit", None),
    }
    if args.no_color:
        config_args["color_output"] = False
    if args.command == "analyze" and args.output:
        config_args["output_format"] = args.output

    try:
        config = init_config(config_file=Path(args.config) if args.config else None, **config_args)
        config.validate()
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    setup_logging(config.log_level, args.verbose)
    console.no_color = not config.color_output

    # Set default output format if not specified
    if args.command == "analyze" and not args.output:
        args.output = config.output_format

    # Execute command
    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
