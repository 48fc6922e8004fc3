"""Progress display for analysis runs."""

import sys
from typing import Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

# stage -> (label, share of the bar where it starts, where it ends)
STAGES = {
    "scan": ("Reading plugins", 0.0, 0.6),
    "dependencies": ("Validating dependencies", 0.6, 0.8),
    "conflicts": ("Detecting override conflicts", 0.8, 1.0),
}


class ProgressIndicator:
    """
    One progress bar on stderr, split into the analysis stages.

    The scan stage advances per plugin file; the others jump to their end
    when completed. A disabled indicator ignores every call.
    """

    def __init__(self, enabled: bool = True, stream=None):
        self.enabled = enabled
        self.console = Console(file=stream or sys.stderr)
        self._bar = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=self.console,
        )
        self._task: Optional[TaskID] = None
        self.stage: Optional[str] = None

    def _update(self, description: str, fraction: Optional[float] = None) -> None:
        if self._task is None:
            self._bar.start()
            self._task = self._bar.add_task(description, total=100)
        completed = None if fraction is None else round(fraction * 100)
        self._bar.update(self._task, description=description, completed=completed)

    def start_stage(self, stage: str) -> None:
        if not self.enabled:
            return
        label, start, _ = STAGES[stage]
        self.stage = stage
        self._update(f"[cyan]{label}[/cyan]", start)

    def advance(self, done: int, total: int) -> None:
        """Move within the current stage, e.g. after each plugin file."""
        if not self.enabled or self.stage is None or total <= 0:
            return
        label, start, end = STAGES[self.stage]
        self._update(f"[cyan]{label} ({done}/{total})[/cyan]", start + (end - start) * done / total)

    def complete_stage(self, summary: str) -> None:
        if not self.enabled or self.stage is None:
            return
        _, _, end = STAGES[self.stage]
        self._update(f"[green]✓[/green] {summary}", end)
        self.stage = None

    def note(self, message: str, level: str = "warning") -> None:
        """Print a warning or error line above the bar."""
        if self.enabled:
            marker = "[red]✗[/red]" if level == "error" else "[yellow]⚠[/yellow]"
            self.console.print(f"  {marker} {message}")

    def finish(self) -> None:
        if self._task is not None:
            self._bar.stop()
            self._task = None
        self.stage = None
