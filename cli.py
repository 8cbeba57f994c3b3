#!/usr/bin/env python3
"""
Article Analyzer - CLI Entry Point

Check whether AI answer engines find and cite an article.
"""

import sys
import time

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from config import Settings, load_settings, make_client
from analyzer import AnalysisError, build_orchestrator, validate_url
from models import InvalidTransition, Submission, SubmissionStatus
from repositories import Repository, configure_backend, get_repository

console = Console()

STATUS_STYLES = {
    SubmissionStatus.PENDING: "yellow",
    SubmissionStatus.PROCESSING: "cyan",
    SubmissionStatus.COMPLETED: "green",
    SubmissionStatus.FAILED: "red",
}


def open_repository(settings: Settings) -> Repository:
    configure_backend("json", base_path=settings.submissions_dir)
    return get_repository()


def _fmt_rate(value) -> str:
    return "-" if value is None else f"{value:.1f}%"


def _status(status: SubmissionStatus) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def list_submissions(repo: Repository, limit: int = 10):
    """List recent submissions"""
    submissions = repo.submissions.list_recent(limit)
    if not submissions:
        console.print("[dim]No submissions yet. Start one with: analyze submit URL[/dim]")
        return []

    table = Table(title="Recent Submissions", box=box.ROUNDED)
    table.add_column("ID", style="cyan")
    table.add_column("URL")
    table.add_column("Status")
    table.add_column("Sources", justify="right")
    table.add_column("Citations", justify="right")
    table.add_column("Created", style="dim")

    for s in submissions:
        m = s.metrics
        table.add_row(
            s.id[:12],
            s.url[:60],
            _status(s.status),
            f"{m.in_sources_count}/{m.total_probes}" if m else "-",
            f"{m.in_citations_count}/{m.total_probes}" if m else "-",
            s.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)
    return submissions


def show_submission(repo: Repository, submission: Submission):
    """Print a submission with its metrics and per-probe results"""
    lines = [
        f"[bold]{submission.article_title or submission.url}[/bold]",
        f"URL: {submission.url}",
        f"Status: {_status(submission.status)} (phase: {submission.phase.value}, run {submission.attempts})",
    ]
    if submission.error_message:
        where = f" (during {submission.failed_phase.value})" if submission.failed_phase else ""
        lines.append(f"[red]Error{where}: {submission.error_message}[/red]")

    m = submission.metrics
    if m:
        lines.append(
            f"Accessible: {'yes' if m.is_accessible else 'no'}  |  "
            f"In sources: {m.in_sources_count}/{m.total_probes} ({_fmt_rate(m.tier2_rate)})  |  "
            f"Cited: {m.in_citations_count}/{m.total_probes} ({_fmt_rate(m.tier3_rate)})"
        )
        if m.average_citation_rank is not None:
            lines.append(f"Average citation rank: {m.average_citation_rank}")

    console.print(Panel("\n".join(lines), title=submission.id, box=box.ROUNDED))

    results = repo.results.list_for_submission(submission.id, attempt=submission.attempts)
    if not results:
        return

    table = Table(title="Probe Results", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Question")
    table.add_column("Source", justify="center")
    table.add_column("Cited", justify="center")
    table.add_column("Rank", justify="right")
    table.add_column("Time", justify="right", style="dim")

    for r in results:
        table.add_row(
            str(r.probe_index + 1),
            r.question,
            "[green]yes[/green]" if r.found_in_sources else "[dim]no[/dim]",
            "[green]yes[/green]" if r.found_in_citations else "[dim]no[/dim]",
            str(r.citation_rank) if r.citation_rank else "-",
            f"{r.response_time_ms}ms",
        )

    console.print(table)


def run_submission(repo: Repository, settings: Settings, submission: Submission) -> Submission:
    """Process a submission synchronously"""
    orchestrator = build_orchestrator(repo, make_client(), settings)
    with console.status(f"Analyzing {submission.url}..."):
        return orchestrator.execute(submission.id, submission.url)


def run_worker(repo: Repository, settings: Settings):
    """Process pending submissions until interrupted"""
    from workers import AnalysisWorker

    orchestrator = build_orchestrator(repo, make_client(), settings)
    worker = AnalysisWorker(repo, orchestrator, interval=settings.worker_interval)
    worker.start()
    console.print("[dim]Worker running. Ctrl+C to stop.[/dim]")
    try:
        while worker.is_running():
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        worker.stop()
        console.print(worker.get_stats())


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(
        description="Test whether AI search engines cite an article",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  analyze submit https://example.com/post --run   # Submit and analyze now
  analyze submit https://example.com/post         # Queue for the worker
  analyze worker                                  # Process queued submissions
  analyze show <id>                               # Results for a submission
  analyze list                                    # Recent submissions
        """
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_submit = sub.add_parser("submit", help="Submit a URL")
    p_submit.add_argument("url")
    p_submit.add_argument("--run", action="store_true", help="Analyze immediately")

    p_run = sub.add_parser("run", help="Run (or retry) a submission")
    p_run.add_argument("id")

    p_show = sub.add_parser("show", help="Show a submission")
    p_show.add_argument("id")

    p_list = sub.add_parser("list", help="List recent submissions")
    p_list.add_argument("--limit", "-n", type=int, default=10)

    sub.add_parser("worker", help="Run the background worker")

    args = parser.parse_args(argv)
    settings = load_settings()
    repo = open_repository(settings)

    if args.command == "list":
        list_submissions(repo, args.limit)
        return 0

    if args.command == "worker":
        run_worker(repo, settings)
        return 0

    if args.command == "submit":
        try:
            url = validate_url(args.url)
        except AnalysisError as e:
            console.print(f"[red]{e.message}[/red]")
            return 2
        submission = repo.submissions.create(url)
        console.print(f"Created submission [cyan]{submission.id}[/cyan]")
        if not args.run:
            return 0
    else:
        submission = repo.submissions.get(args.id)
        if submission is None:
            console.print(f"[red]No submission with id {args.id}[/red]")
            return 1
        if args.command == "show":
            show_submission(repo, submission)
            return 0

    try:
        submission = run_submission(repo, settings, submission)
    except InvalidTransition as e:
        console.print(f"[red]{e}[/red]")
        return 1
    show_submission(repo, submission)
    return 0 if submission.status == SubmissionStatus.COMPLETED else 1


if __name__ == "__main__":
    sys.exit(main())
