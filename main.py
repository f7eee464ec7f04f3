"""
relayfetch - CLI Entry Point

Fetch upstream API URLs directly or through the rotating relay.
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from relayfetch.config import config
from relayfetch.exceptions import ConfigurationError, RedirectError
from relayfetch.export import JSONExporter, outcome_to_record
from relayfetch.orchestrator import FetchOrchestrator


console = Console()


def setup_logging(level: str = "INFO") -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_urls_from_file(filepath: str) -> list[str]:
    """Load URLs from a text file (one per line)."""
    path = Path(filepath)
    if not path.exists():
        console.print(f"[red]File not found: {filepath}[/red]")
        sys.exit(1)

    urls = []
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                urls.append(line)

    return urls


async def resolve_async(orchestrator: FetchOrchestrator, url: str) -> None:
    """Print the target of a share short link."""
    try:
        target = await orchestrator.resolve_redirect(url)
    except RedirectError as e:
        console.print(f"[red]Could not resolve {url}: {e}[/red]")
        sys.exit(1)
    console.print(target)


async def main_async(args: argparse.Namespace) -> None:
    """Async main function."""
    setup_logging(args.log_level)

    try:
        orchestrator = FetchOrchestrator()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        console.print("Set RELAYFETCH_RELAY_KEYS to a semicolon-delimited list of relay keys.")
        sys.exit(2)

    async with orchestrator:
        if args.resolve:
            await resolve_async(orchestrator, args.resolve)
            return

        urls = []
        if args.url:
            urls.append(args.url)
        if args.file:
            urls.extend(load_urls_from_file(args.file))

        if not urls:
            console.print("[red]No URLs provided. Use --url, --file or --resolve[/red]")
            sys.exit(1)

        console.print(f"URLs to fetch: {len(urls)}")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Fetching...", total=None)
            outcomes = await orchestrator.fetch_many(urls, concurrency=args.workers)
            progress.update(task, description="Complete!")

        records = [outcome_to_record(outcome) for outcome in outcomes]

        if args.output:
            exporter = JSONExporter(jsonl=args.format == "jsonl")
            export_path = await exporter.export(records, args.output)
            console.print(f"\n[green]Results exported to: {export_path}[/green]")
        else:
            console.print_json(json.dumps(records, ensure_ascii=False, default=str))

        stats = orchestrator.get_stats()
        console.print("\n[bold]Final Statistics:[/bold]")
        for section in ("fetcher", "credentials"):
            for key, value in stats[section].items():
                console.print(f"  {key}: {value}")

        if any(not outcome.success for outcome in outcomes):
            sys.exit(1)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="relayfetch - Direct-first API fetching with relay fallback",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --url "https://api.example.com/x/v2/reply?oid=1"
  %(prog)s --file urls.txt --workers 5 --output results.jsonl --format jsonl
  %(prog)s --resolve https://b23.tv/abc123
        """,
    )

    # URL sources
    parser.add_argument(
        "--url", "-u",
        help="Single upstream URL to fetch",
    )
    parser.add_argument(
        "--file", "-f",
        help="File containing URLs (one per line)",
    )
    parser.add_argument(
        "--resolve", "-r",
        help="Share short link to resolve instead of fetching",
    )

    # Execution options
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=config.concurrency,
        help=f"Number of concurrent fetches (default: {config.concurrency})",
    )

    # Output options
    parser.add_argument(
        "--format",
        choices=["json", "jsonl"],
        default="json",
        help="Export format (default: json)",
    )
    parser.add_argument(
        "--output", "-o",
        help="Output filename (prints to the console if not specified)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=config.log_level,
        help=f"Logging level (default: {config.log_level})",
    )

    args = parser.parse_args()

    # Run async main
    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
