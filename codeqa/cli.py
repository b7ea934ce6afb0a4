"""CLI entrypoint for codeqa."""

from __future__ import annotations

import click

from codeqa import __version__
from codeqa.config import LANGUAGE_EXTENSIONS, load_config
from codeqa.errors import EmptyInputError, InputError, SourceFetchError
from codeqa.logging import configure_logging
from codeqa.models import Report
from codeqa.providers import create_provider
from codeqa.reporter import EXPORT_FORMATS, export_report, format_summary
from codeqa.runner import run_analysis
from codeqa.session import QASession

CONSOLE_ISSUES = 10
HISTORY_PREVIEW = 150

SEVERITY_ICONS = {"critical": "🔴", "high": "🟠", "medium": "🟡", "low": "🟢"}


def _print_console_report(report: Report) -> None:
    click.echo(format_summary(report))

    if report.issues:
        click.echo("")
        click.echo("Top issues:")
        for issue in report.issues[:CONSOLE_ISSUES]:
            icon = SEVERITY_ICONS[issue.severity.value]
            loc = f"{issue.file}:{issue.line}" if issue.line else issue.file
            click.echo(f"  {icon} [{issue.severity.value.upper()}] {issue.title} @ {loc}")
        if len(report.issues) > CONSOLE_ISSUES:
            click.echo(f"  ... and {len(report.issues) - CONSOLE_ISSUES} more")

    click.echo("")
    click.echo("Recommendations:")
    for rec in report.recommendations:
        click.echo(f"  {rec}")


def _show_suggestions(session: QASession) -> None:
    click.echo("\n💡 Suggested questions:")
    for n, question in enumerate(session.suggested_questions(), 1):
        click.echo(f"  {n}. {question}")
    click.echo("")


def _show_history(session: QASession) -> None:
    history = session.history()
    if not history:
        click.echo("\n📝 No conversation history yet")
        return
    click.echo("\n📝 Conversation history:")
    for n, turn in enumerate(history, 1):
        answer = turn.answer
        if len(answer) > HISTORY_PREVIEW:
            answer = answer[:HISTORY_PREVIEW] + "..."
        click.echo(f"\nQ{n}: {turn.question}")
        click.echo(f"A{n}: {answer}")
    click.echo("")


def interactive_loop(session: QASession) -> None:
    """Read questions until `exit`/`quit` or end of input."""
    click.echo("\n🤖 Interactive Q&A Session")
    click.echo("Ask questions about your codebase. Type 'exit' to quit, 'help' for suggestions.")
    click.echo("=" * 60)

    while True:
        try:
            question = click.prompt("Your question", prompt_suffix="> ").strip()
        except click.Abort:
            click.echo("\n👋 Session ended")
            return

        command = question.lower()
        if not command:
            continue
        if command in ("exit", "quit"):
            click.echo("\n👋 Goodbye!")
            return
        if command in ("help", "suggestions"):
            _show_suggestions(session)
            continue
        if command == "history":
            _show_history(session)
            continue
        if command == "clear":
            session.clear_history()
            click.echo("✅ Conversation history cleared")
            continue

        click.echo("\n🤔 Thinking...")
        click.echo(f"\n🤖 Answer:\n{session.ask(question)}\n")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=None, help="Path to codeqa.yml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, config_path, verbose):
    """codeqa: code quality analysis with AI-assisted Q&A."""
    configure_logging(verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command()
@click.argument("target")
@click.option(
    "--format",
    "-F",
    "output_format",
    type=click.Choice(["console"] + EXPORT_FORMATS),
    default="console",
    help="Output format: console (default), markdown, json, sarif or all",
)
@click.option("--output", "-o", default=None, help="Directory for exported reports")
@click.option("--no-ai", is_flag=True, help="Skip AI analysis (static analysis only)")
@click.option("--question", "-q", default=None, help="Ask one question about the results")
@click.option("--interactive", "-i", is_flag=True, help="Start an interactive Q&A session")
@click.pass_context
def analyze(ctx, target, output_format, output, no_ai, question, interactive):
    """Analyze a local PATH or a GITHUB_URL."""
    try:
        config = load_config(ctx.obj["config_path"])
    except ValueError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"🔍 Analyzing {target}...")
    try:
        result = run_analysis(target, config, use_ai=not no_ai)
    except EmptyInputError:
        click.echo(f"No supported code files found in {target}", err=True)
        raise SystemExit(1)
    except SourceFetchError as e:
        click.echo(f"Failed to fetch {target}: {e}", err=True)
        raise SystemExit(1)
    except InputError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    report = result.report
    if output_format == "console":
        _print_console_report(report)
    else:
        for path in export_report(report, output or config.reports_dir, output_format):
            click.echo(f"Report saved: {path}")

    if not (question or interactive):
        return

    provider = result.provider or create_provider(config.provider, config.model)
    session = QASession(report, result.source.units, provider)
    if question:
        click.echo(f"\n❓ {question}")
        click.echo(session.ask(question))
    if interactive:
        interactive_loop(session)


@main.command()
def languages():
    """List supported file extensions."""
    for ext, language in sorted(LANGUAGE_EXTENSIONS.items()):
        click.echo(f"  {ext:<8} {language.value}")


@main.command("mcp-server")
def mcp_server():
    """Start the MCP server for AI coding tool integration."""
    from codeqa.mcp.server import run_server

    run_server()
