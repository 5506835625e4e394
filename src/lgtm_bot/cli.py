"""CLI entry point for lgtm-bot.

Runs polling passes over a repository's pull requests:
1. List pull requests
2. Sync needs-review / reviewed labels from approval comments
3. Post the instructions comment once per PR
4. Merge approved PRs (when auto-merge is enabled)
"""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .bot import ReviewBot
from .config import Config
from .evaluator import compute_label_delta
from .runner import PassReport, run_forever

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_config(repo: str | None) -> Config:
    config = Config()
    if repo:
        config.target_repo = repo
    return config


def _exit_on_issues(config: Config) -> None:
    issues = config.validate()
    if issues:
        for issue in issues:
            console.print(f"[red]✗ {issue}")
        console.print("\n[yellow]Copy .env.example to .env and fill in your settings.")
        sys.exit(1)


@click.group()
def cli():
    """lgtm-bot — label pull requests by review state."""
    pass


@cli.command()
@click.option(
    "--repo",
    default=None,
    help="Repository to watch (owner/name). Default: from .env",
)
@click.option("--once", is_flag=True, help="Run a single pass and exit.")
@click.option(
    "--interval",
    type=int,
    default=None,
    help="Seconds between passes. Default: from .env or 300",
)
@click.option(
    "--max-passes",
    type=int,
    default=None,
    help="Stop after this many passes.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would change without editing labels, commenting or merging.",
)
@click.option(
    "--auto-merge/--no-auto-merge",
    default=None,
    help="Merge approved PRs. Default: from .env (AUTO_MERGE)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def run(repo, once, interval, max_passes, dry_run, auto_merge, verbose):
    """Poll the repository and keep review labels in sync."""
    _setup_logging(verbose)
    config = _load_config(repo)
    if interval is not None:
        config.poll_interval = interval
    if auto_merge is not None:
        config.auto_merge = auto_merge
    _exit_on_issues(config)

    console.print(
        Panel(
            f"[bold cyan]lgtm-bot[/bold cyan] watching {config.target_repo}\n"
            f"{config.reviews_needed} approval(s) needed, "
            f"auto-merge {'on' if config.auto_merge else 'off'}"
            + (" [yellow](dry run)[/yellow]" if dry_run else ""),
            border_style="cyan",
        )
    )

    bot = ReviewBot(config)
    try:
        passes = run_forever(
            bot,
            interval=config.poll_interval,
            max_passes=1 if once else max_passes,
            dry_run=dry_run,
            on_pass=_print_pass,
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.")
        return
    finally:
        bot.close()
    console.print(f"[bold green]✓ Finished after {passes} pass(es)")


@cli.command()
@click.option("--repo", default=None, help="Repository (owner/name). Default: from .env")
def check(repo):
    """Verify configuration."""
    config = _load_config(repo)
    issues = config.validate()

    if issues:
        console.print("[bold red]Configuration issues found:\n")
        for issue in issues:
            console.print(f"  [red]✗ {issue}")
        console.print("\n[yellow]Copy .env.example to .env and fill in your settings.")
        sys.exit(1)

    credentials = config.credentials
    console.print("[bold green]✓ Configuration looks good!")
    console.print(f"  Repository: {config.target_repo}")
    console.print(f"  Credentials: {credentials.kind}")
    console.print(
        f"  Labels: {config.label_needs_review} → {config.label_reviewed}"
    )
    console.print(f"  Reviews needed: {config.reviews_needed}")
    console.print(f"  Approval pattern: {escape(config.approval_pattern)}")
    console.print(f"  Label transitions: {config.label_transitions}")
    console.print(f"  Auto-merge: {config.auto_merge} ({config.merge_method})")
    console.print(f"  Poll interval: {config.poll_interval}s")


@cli.command()
@click.argument("number", type=int)
@click.option("--repo", default=None, help="Repository (owner/name). Default: from .env")
def inspect(number, repo):
    """Show the review state of a single PR without changing it."""
    config = _load_config(repo)
    _exit_on_issues(config)
    bot = ReviewBot(config)
    try:
        labeled = bot.check_for_label(number)
        counted = bot.count_approval_comments(number)
        instructed = bot.check_for_instructions_comment(number)
    finally:
        bot.close()

    for name, result in (
        ("labels", labeled),
        ("comments", counted),
        ("instructions", instructed),
    ):
        if not result.ok:
            console.print(f"[red]✗ Could not read {name} for #{number}: {result.outcome.value}")
            sys.exit(1)

    approved = counted.value >= config.reviews_needed
    delta = compute_label_delta(
        labeled.value.labels,
        approved,
        config.label_needs_review,
        config.label_reviewed,
        mode=config.label_transitions,
    )

    table = Table(title=f"{config.target_repo}#{number}", border_style="cyan")
    table.add_column("Property", style="bold")
    table.add_column("Value")
    table.add_row("Labels", ", ".join(labeled.value.labels) or "—")
    table.add_row("Approvals", f"{counted.value}/{config.reviews_needed}")
    table.add_row("Approved", "yes" if approved else "no")
    table.add_row("Instructions posted", "yes" if instructed.value else "no")
    table.add_row("Would add", ", ".join(delta.to_add) or "—")
    table.add_row("Would remove", ", ".join(delta.to_remove) or "—")
    console.print(table)


def _print_pass(report: PassReport) -> None:
    """Print a summary table for one pass."""
    if report.outcome != "success":
        console.print(f"[yellow]No pull requests processed ({report.outcome})")
        return

    table = Table(title="Pass Summary", border_style="cyan")
    table.add_column("PR", justify="right", style="bold")
    table.add_column("Approved")
    table.add_column("Labels")
    table.add_column("Instructions")
    table.add_column("Merged")

    for pr in report.pull_requests:
        if pr.skipped:
            table.add_row(f"#{pr.number}", "—", f"skipped ({pr.skipped})", "", "")
            continue
        changes = [f"+{name}" for name in pr.labels_added] + [
            f"-{name}" for name in pr.labels_removed
        ]
        table.add_row(
            f"#{pr.number}",
            "yes" if pr.approved else "no",
            " ".join(changes) or pr.label_outcome,
            "posted" if pr.instructions_posted else "",
            "yes" if pr.merged else "",
        )

    console.print(table)


if __name__ == "__main__":
    cli()
