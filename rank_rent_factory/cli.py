"""CLI entry point for business plan generation."""

import argparse
import asyncio
import logging
import sys
from functools import partial
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .bundle import write_plan_json, write_site_bundle
from .config import Settings
from .main import generate_business_plan
from .models import LANGUAGES, LogEntry
from .report import generate_plan_pdf
from .session import InputState, PlanSession

LOG_STYLES = {
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
}


def main(argv: list[str] | None = None):
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="rank-rent-factory",
        description="Generate a rank & rent business plan and Astro site bundle for a local market.",
    )
    parser.add_argument("--location", required=True, help='Target location, e.g. "Milano, IT"')
    parser.add_argument("--niche", required=True, help='Target niche, e.g. "Idraulico"')
    parser.add_argument(
        "--language",
        choices=LANGUAGES,
        default="en",
        help="Output language (default: en)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("blueprint"),
        help="Where to write plan.json and the site/ bundle (default: ./blueprint)",
    )
    parser.add_argument("--pdf", action="store_true", help="Also render report.pdf")
    parser.add_argument("--verbose", action="store_true", help="Show diagnostic logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )

    console = Console()

    def on_log(entry: LogEntry):
        style = LOG_STYLES[entry.type]
        console.print(f"[dim]\\[{entry.timestamp}][/] [{style}]{escape(entry.message)}[/]", highlight=False)

    settings = Settings.from_env()
    session = PlanSession(generate=partial(generate_business_plan, settings=settings), on_log=on_log)

    try:
        state = asyncio.run(session.submit(args.location, args.niche, args.language))
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"\n[bold red]Error:[/] {e}\n")
        sys.exit(1)

    if isinstance(state, InputState):
        console.print(f"\n[bold red]Error:[/] {state.error}\n")
        sys.exit(1)

    plan = state.plan
    plan_path = write_plan_json(plan, args.output_dir / "plan.json")
    files = write_site_bundle(plan, args.output_dir / "site")
    console.print(f"\n[bold green]Done![/] Plan saved to [bold]{plan_path}[/]")
    console.print(f"Wrote {len(files)} site files under [bold]{args.output_dir / 'site'}[/]")

    if args.pdf:
        pdf_path = generate_plan_pdf(plan, args.output_dir / "report.pdf")
        console.print(f"Report saved to [bold]{pdf_path}[/]")
    console.print()


if __name__ == "__main__":
    main()
