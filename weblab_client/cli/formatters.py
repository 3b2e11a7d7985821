"""
Functions for formatting and displaying data in the console using Rich.
"""

from datetime import datetime
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from weblab_client.models.records import Submission, SubmissionInfo
from weblab_client.models.responses import (
    ResponseInfo,
    SubmissionResponseData,
    SubmissionsResponseData,
)
from weblab_client.storage.config_manager import SECRET_KEYS
from weblab_client.utils.dates import is_unknown


def format_timestamp(value: datetime | None) -> str:
    if value is None or is_unknown(value):
        return "[dim]unknown[/dim]"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def _flag(value: bool) -> str:
    return "[green]✓[/green]" if value else "[red]✗[/red]"


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AuthenticationError": [
            "• Pass --cookie for page scraping or --api-key for the REST API.",
            "• Or store them with `weblab init`.",
        ],
        "ConfigurationError": [
            "• Check the values in the configuration file.",
            "• Run `weblab init --force` to write a fresh configuration.",
        ],
        "ScrapeError": [
            "• Your session cookie may have expired. Copy a fresh one from the browser.",
            "• Check that the assignment id is correct.",
        ],
        "PageLayoutError": [
            "• The WebLab page layout may have changed.",
            "• Try the REST API commands (api-submissions, api-submission) instead.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• WebLab might be temporarily unavailable.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding sensitive data."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key in SECRET_KEYS and value:
            value = "<hidden>"
        content += f"{key} = {escape(str(value))}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_submissions_table(submissions: list[SubmissionInfo], assignment_id: str):
    """Displays the rows of a scraped submissions list."""
    console = Console()
    table = Table(
        title=f"Submissions for assignment {assignment_id}",
        box=box.ROUNDED,
        header_style="bold cyan",
    )
    table.add_column("Name")
    table.add_column("NetID")
    table.add_column("Student #")
    table.add_column("WebLab ID", style="dim")
    table.add_column("Started", justify="center")
    table.add_column("Spec tests", justify="right")
    table.add_column("Completed", justify="center")
    table.add_column("Grade", justify="right")
    table.add_column("Passed", justify="center")
    table.add_column("Last saved")

    for info in submissions:
        name = escape(info.student.name)
        if not info.student.enrolled_for_grade:
            name += " [dim](not for grade)[/dim]"
        table.add_row(
            name,
            info.student.netid,
            info.student.student_number,
            info.student.platform_id,
            _flag(info.started),
            str(info.spec_tests),
            _flag(info.completed),
            f"{info.grade:.2f}",
            _flag(info.passed),
            format_timestamp(info.last_saved),
        )

    console.print(table)


def print_submission(submission: Submission):
    """Displays the solution and test code of a scraped submission."""
    console = Console()
    student = submission.student
    console.print(
        f"[bold]{student.name}[/bold] ({student.netid}, {student.student_number}, "
        f"WebLab ID {student.platform_id}) - last saved "
        f"{format_timestamp(submission.last_saved)}"
    )
    console.print(
        Panel(Syntax(submission.solution, "python"), title="Solution", border_style="cyan")
    )
    console.print(
        Panel(Syntax(submission.test, "python"), title="Tests", border_style="magenta")
    )


def print_api_submissions_table(result: ResponseInfo[SubmissionsResponseData]):
    """Displays a SUBMISSIONS response."""
    console = Console()
    data = result.data
    table = Table(
        title=(
            f"Submissions for assignment {result.request.assignment} "
            f"(API {data.api_version}, data from {format_timestamp(data.data_timestamp_date)})"
        ),
        box=box.ROUNDED,
        header_style="bold cyan",
    )
    table.add_column("WebLab ID")
    table.add_column("For grade", justify="center")
    table.add_column("Grade", justify="right")
    table.add_column("Last saved")

    for summary in data.submissions:
        table.add_row(
            str(summary.student),
            _flag(summary.student_for_grade),
            f"{summary.grade:.2f}",
            format_timestamp(summary.last_saved_at_date),
        )

    console.print(table)


def print_api_submission(result: ResponseInfo[SubmissionResponseData]):
    """Displays a SUBMISSION response, including the spec test run if present."""
    console = Console()
    data = result.data

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Student:", str(data.student))
    table.add_row("For grade:", _flag(data.student_for_grade))
    table.add_row("Grade:", f"{data.grade:.2f}")
    table.add_row("Assignment type:", data.assignment_type or "-")
    table.add_row("Deadline:", format_timestamp(data.deadline_date))
    table.add_row("Last saved:", format_timestamp(data.last_saved_at_date))

    task = data.task_for_grade
    if task is not None:
        table.add_row("Spec tests ran:", format_timestamp(task.ran_at_date))
        table.add_row("Build status:", task.build_status or "-")
        table.add_row(
            "Spec tests:",
            f"[green]{task.num_passed_tests} passed[/green], "
            f"[red]{task.num_failed_tests} failed[/red] of {task.num_total_tests}",
        )

    console.print(Panel(table, title="Submission", border_style="cyan", expand=False))
    console.print(
        Panel(Syntax(data.solution_code, "python"), title="Solution", border_style="cyan")
    )
    console.print(
        Panel(
            Syntax(data.user_test_code, "python"), title="Tests", border_style="magenta"
        )
    )
