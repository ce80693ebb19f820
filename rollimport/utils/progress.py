# progress.py
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from ..models import JobProgress


def get_progress(console=None):
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
    )


def progress_callback(progress: Progress, task_id):
    """Adapt a rich task to the pipeline's per-page progress callback."""

    def on_progress(update: JobProgress) -> None:
        description = f"{update.stage} {update.page}" if update.page else update.stage
        progress.update(task_id, total=update.total or None, completed=update.current, description=description)

    return on_progress
