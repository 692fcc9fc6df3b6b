"""
AI Project Tracker - Report Rendering

Turns a ProjectReport into human-readable text (rich) or a standalone
HTML page. Both return strings; nothing is printed here because stdout
carries the MCP protocol when running as a server.
"""

import io
from datetime import datetime
from html import escape

from rich.console import Console
from rich.markup import escape as escape_markup
from rich.panel import Panel
from rich.table import Table

from aitracker.persistence.models import ProjectReport, StepStatus

MAX_TEXT_INSIGHTS = 5

STEP_STYLES = {
    StepStatus.COMPLETED: "green",
    StepStatus.FAILED: "red",
    StepStatus.SKIPPED: "yellow",
    StepStatus.IN_PROGRESS: "cyan",
    StepStatus.PENDING: "dim",
}


def _format_time(value: datetime | None) -> str:
    return value.strftime("%d/%m/%Y %H:%M") if value else "-"


def _seconds(ms: int | None) -> str:
    return f"{round(ms / 1000)}s" if ms else "N/A"


def render_text(report: ProjectReport, width: int = 100) -> str:
    """Render a report as plain text using rich layout."""
    console = Console(file=io.StringIO(), record=True, width=width, color_system=None)
    session = report.session
    summary = report.summary
    metrics = report.metrics

    header = (
        f"[bold]{escape_markup(session.project_name)}[/bold]\n"
        f"{escape_markup(session.description)}\n"
        f"AI Model: {escape_markup(session.ai_model)} | Status: {session.status.value}\n"
        f"Started: {_format_time(session.start_time)} | Ended: {_format_time(session.end_time)}"
    )
    console.print(Panel(header, title="PROJECT REPORT"))

    console.print("[bold]SUMMARY[/bold]")
    console.print(f"  Completion: {summary.completion_percentage}%")
    console.print(f"  Efficiency: {summary.efficiency_score}%")
    console.print(f"  Total time: {round(summary.total_time_spent / 1000)}s")
    console.print(f"  Status: {summary.overall_status.value}")

    if summary.key_achievements:
        console.print("\n[bold green]ACHIEVEMENTS[/bold green]")
        for title in summary.key_achievements:
            console.print(f"  • {escape_markup(title)}")

    if summary.main_challenges:
        console.print("\n[bold red]CHALLENGES[/bold red]")
        for title in summary.main_challenges:
            console.print(f"  • {escape_markup(title)}")

    if summary.next_steps:
        console.print("\n[bold]NEXT STEPS[/bold]")
        for title in summary.next_steps:
            console.print(f"  • {escape_markup(title)}")

    if report.steps:
        table = Table(title="Steps")
        table.add_column("#", justify="right")
        table.add_column("Type")
        table.add_column("Title")
        table.add_column("Status")
        table.add_column("Duration", justify="right")
        for step in report.steps:
            style = STEP_STYLES.get(step.status, "")
            table.add_row(
                str(step.step_number),
                step.step_type.value,
                escape_markup(step.title),
                f"[{style}]{step.status.value}[/{style}]" if style else step.status.value,
                _seconds(step.duration),
            )
        console.print(table)

    console.print("\n[bold]METRICS[/bold]")
    console.print(f"  Total files: {metrics.total_files}")
    console.print(f"  Created: {metrics.files_created}")
    console.print(f"  Modified: {metrics.files_modified}")
    console.print(f"  Lines of code: {metrics.lines_of_code}")
    console.print(f"  Commands: {metrics.commands_executed}")
    console.print(f"  Errors: {metrics.errors_encountered}")

    if report.insights:
        console.print("\n[bold magenta]INSIGHTS[/bold magenta]")
        for insight in report.insights[:MAX_TEXT_INSIGHTS]:
            console.print(f"  • {escape_markup(insight.title)} ({insight.confidence}%)")

    return console.export_text()


HTML_STYLE = """
body { font-family: Arial, sans-serif; margin: 20px; background-color: #f5f5f5; }
.container { max-width: 1200px; margin: 0 auto; background: white; padding: 20px; border-radius: 8px; }
.header { background: #4b5fc2; color: white; padding: 20px; border-radius: 8px; margin-bottom: 20px; }
.metric-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 15px; }
.metric-card { background: #f8f9fa; padding: 15px; border-radius: 6px; border-left: 4px solid #007bff; }
.step { border: 1px solid #dee2e6; border-radius: 6px; padding: 15px; margin: 10px 0; }
.step.completed { border-left: 4px solid #28a745; }
.step.failed { border-left: 4px solid #dc3545; }
.step.in_progress { border-left: 4px solid #ffc107; }
.insight { background: #e7f3ff; border: 1px solid #b8daff; border-radius: 6px; padding: 12px; margin: 8px 0; }
.timeline-event { padding: 8px 0; border-bottom: 1px solid #eee; }
"""


def render_html(report: ProjectReport) -> str:
    """Render a report as a self-contained HTML page. All content is escaped."""
    session = report.session
    summary = report.summary

    steps_html = "".join(
        f"""
        <div class="step {escape(step.status.value)}">
            <h4>{escape(step.title)} <small>({escape(step.step_type.value)})</small></h4>
            <p>{escape(step.description)}</p>
            <small>Status: {escape(step.status.value)} | Duration: {_seconds(step.duration)}</small>
        </div>"""
        for step in report.steps
    )

    insights_html = ""
    if report.insights:
        insights_html = "<h3>Insights</h3>" + "".join(
            f"""
        <div class="insight">
            <h4>{escape(insight.title)} <small>({insight.confidence}% confidence)</small></h4>
            <p>{escape(insight.description)}</p>
            <small>Type: {escape(insight.insight_type.value)}</small>
        </div>"""
            for insight in report.insights
        )

    timeline_html = "".join(
        f"""
        <div class="timeline-event {escape(event.event_type.value)}">
            <strong>{escape(event.title)}</strong>
            <div><small>{escape(event.timestamp.isoformat())}</small></div>
            <div>{escape(event.description or "")}</div>
        </div>"""
        for event in report.timeline
    )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>AI Project Report - {escape(session.project_name)}</title>
    <style>{HTML_STYLE}</style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>AI Project Report</h1>
            <h2>{escape(session.project_name)}</h2>
            <p>{escape(session.description)}</p>
            <p><strong>AI Model:</strong> {escape(session.ai_model)} | <strong>Status:</strong> {escape(session.status.value)}</p>
        </div>
        <div class="metric-grid">
            <div class="metric-card"><h3>Completion</h3><p>{summary.completion_percentage}%</p></div>
            <div class="metric-card"><h3>Efficiency</h3><p>{summary.efficiency_score}%</p></div>
            <div class="metric-card"><h3>Total Time</h3><p>{round(summary.total_time_spent / 1000)}s</p></div>
            <div class="metric-card"><h3>Files</h3><p>{report.metrics.total_files}</p></div>
        </div>
        <h3>Steps</h3>{steps_html}
        {insights_html}
        <h3>Timeline</h3>{timeline_html}
    </div>
</body>
</html>"""
