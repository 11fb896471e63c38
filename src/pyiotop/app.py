"""pyiotop - Main Textual application."""

import structlog
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.timer import Timer
from textual.widgets import DataTable, Footer, Static

from pyiotop import logging as pyiotop_logging
from pyiotop.config import Config
from pyiotop.dashboard import DashboardLoop, Frame
from pyiotop.models import SortKey
from pyiotop.monitor import MonitorUnavailableError, ProcessMonitor

log = structlog.get_logger()

# Width of every column except the open-files preview
_FIXED_COLUMNS_WIDTH = 2 + 8 + 16 + 7 + 7 + 13 + 13


def _gauge(percent: float, color: str) -> str:
    """Render a 20-cell usage bar."""
    bar_len = min(max(int(percent / 5), 0), 20)
    return f"[{color}]█[/{color}]" * bar_len + "[dim]░[/dim]" * (20 - bar_len)


class HeaderStats(Static):
    """Header line with system CPU and memory gauges and the active sort key."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        padding: 0 1;
        background: $surface;
    }
    """

    def show(self, frame: Frame) -> None:
        """Update the header from a frame."""
        # Escaped brackets keep Rich from reading the bar frame as markup
        self.update(
            f"CPU \\[{_gauge(frame.cpu_percent, 'green')}] {frame.cpu_percent:5.1f}%   "
            f"Mem \\[{_gauge(frame.memory_percent, 'cyan')}] {frame.memory_percent:5.1f}%   "
            f"Sort: [b]{frame.sort_key.label}[/b]"
        )


class ProcessGrid(DataTable, can_focus=False):
    """Process table. Not focusable, so navigation keys reach the app."""


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield ProcessGrid(id="process-table", cursor_type="none")

    def on_mount(self) -> None:
        """Add the columns when mounted."""
        self._ensure_columns(self.query_one("#process-table", ProcessGrid))

    @staticmethod
    def _ensure_columns(table: ProcessGrid) -> None:
        if table.columns:
            return
        table.add_column("", key="cursor", width=1)
        table.add_column("PID", key="pid", width=7)
        table.add_column("Name", key="name", width=15)
        table.add_column("CPU%", key="cpu", width=6)
        table.add_column("MEM%", key="mem", width=6)
        table.add_column("Read/s", key="read", width=12)
        table.add_column("Write/s", key="write", width=12)
        table.add_column("Open files", key="files")

    def show(self, frame: Frame) -> None:
        """
        Replace the table contents with the rows of a frame.

        The whole table is rebuilt each time, matching the per-tick batch
        replacement of the rows themselves.
        """
        table = self.query_one("#process-table", ProcessGrid)
        self._ensure_columns(table)
        files_width = max(frame.width - _FIXED_COLUMNS_WIDTH, 10)

        table.clear()
        for index, row in enumerate(frame.rows):
            # Names and paths are plain text, never markup
            table.add_row(
                ">" if index == frame.selected else " ",
                row.pid,
                Text(row.name[:15]),
                row.cpu,
                row.mem,
                row.read,
                row.write,
                Text(row.files[:files_width]),
                key=row.pid,
            )

    @property
    def row_count(self) -> int:
        """Number of rows currently displayed."""
        return self.query_one("#process-table", ProcessGrid).row_count


class FilesPanel(Static):
    """Expanded list of the selected process's open files."""

    DEFAULT_CSS = """
    FilesPanel {
        height: auto;
        max-height: 12;
        padding: 0 1;
        border-top: solid $primary;
    }
    """

    def show(self, frame: Frame) -> None:
        """Show or hide the panel for a frame."""
        self.display = frame.show_files
        if not frame.show_files:
            return
        if frame.selected_files:
            lines = "\n".join(f"  {path}" for path in frame.selected_files)
        else:
            lines = "  (none)"
        self.update(Text(f"Open files:\n{lines}"))


class PyiotopApp(App):
    """Main pyiotop application."""

    TITLE = "pyiotop"
    SUB_TITLE = "Per-process I/O monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("c", "sort('cpu')", "CPU"),
        Binding("r", "sort('read')", "Read"),
        Binding("w", "sort('write')", "Write"),
        Binding("up", "select(-1)", "Up", show=False),
        Binding("down", "select(1)", "Down", show=False),
        Binding("enter", "toggle_files", "Files"),
    ]

    def __init__(
        self,
        monitor: ProcessMonitor | None = None,
        config: Config | None = None,
    ) -> None:
        """
        Initialize the PyiotopApp.

        Args:
            monitor: Metrics provider. Defaults to a psutil ProcessMonitor.
            config: Runtime settings. Defaults to Config().
        """
        super().__init__()
        self._config = config or Config()
        self._monitor = monitor if monitor is not None else ProcessMonitor()
        self._dashboard = DashboardLoop(self._monitor.collect, self.render_frame, self._config)
        self._timer: Timer | None = None

    @property
    def dashboard(self) -> DashboardLoop:
        return self._dashboard

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats("Loading...", id="header-stats")
        yield ProcessTable()
        yield FilesPanel(id="files-panel")
        yield Footer()

    def on_mount(self) -> None:
        """Draw the first frame, then start the refresh timer."""
        self.query_one(FilesPanel).display = False
        self._dashboard.start(self.size.width, self.size.height)
        self._timer = self.set_interval(self._config.sample_interval, self._dashboard.tick)

    def on_resize(self, event: events.Resize) -> None:
        """Redraw the last rows for the new terminal size."""
        if self._dashboard.running:
            self._dashboard.resize(event.size.width, event.size.height)

    def render_frame(self, frame: Frame) -> None:
        """Draw a frame produced by the dashboard loop."""
        self.query_one("#header-stats", HeaderStats).show(frame)
        self.query_one(ProcessTable).show(frame)
        self.query_one(FilesPanel).show(frame)

    def action_sort(self, key: str) -> None:
        """Switch the sort key and refresh immediately."""
        self._dashboard.set_sort_key(SortKey(key))

    def action_select(self, delta: int) -> None:
        """Move the selected row."""
        self._dashboard.move_selection(delta)

    def action_toggle_files(self) -> None:
        """Show or hide the open files of the selected row."""
        self._dashboard.toggle_files()

    def action_quit(self) -> None:
        """Stop the timer and the loop, then leave the terminal."""
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._dashboard.stop()
        self.exit()


def main() -> None:
    """Entry point for pyiotop application."""
    config = Config()
    pyiotop_logging.configure(config)

    try:
        monitor = ProcessMonitor()
    except MonitorUnavailableError as exc:
        log.error("startup_failed", error=str(exc))
        raise SystemExit(f"pyiotop: {exc}") from exc

    app = PyiotopApp(monitor=monitor, config=config)
    try:
        app.run()
    except Exception:
        log.exception("app_failed")
        raise
    raise SystemExit(app.return_code or 0)


if __name__ == "__main__":
    main()
