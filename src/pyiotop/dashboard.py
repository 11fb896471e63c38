"""Sampling and refresh state machine driving the dashboard."""

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from pyiotop.config import Config
from pyiotop.formatting import DisplayRow, build_row
from pyiotop.models import Batch, ProcessSample, RateSample, SortKey
from pyiotop.monitor import CollectionError
from pyiotop.ranking import rank
from pyiotop.rates import derive, index_by_pid

log = structlog.get_logger()


@dataclass(slots=True, frozen=True)
class Frame:
    """Everything the terminal needs to draw one screen."""

    rows: list[DisplayRow]
    sort_key: SortKey
    selected: int
    show_files: bool
    selected_files: tuple[str, ...]
    width: int = 0
    height: int = 0
    cpu_percent: float = 0.0
    memory_percent: float = 0.0


@dataclass(slots=True)
class DashboardState:
    """Mutable state owned by the loop; replaced piecewise only by the loop."""

    previous_batch: dict[int, ProcessSample] = field(default_factory=dict)
    sort_key: SortKey = SortKey.CPU
    width: int = 0
    height: int = 0
    running: bool = False
    ranked: list[RateSample] = field(default_factory=list)
    selected: int = 0
    show_files: bool = False
    cpu_percent: float = 0.0
    memory_percent: float = 0.0


class DashboardLoop:
    """
    Tie sampling, rate derivation, ranking and rendering together.

    The loop reacts to three events: a timer tick, a terminal resize and a
    user action. Every reaction runs to completion before the next one is
    dispatched, so the state needs no locking. The caller multiplexes the
    events and calls the matching method.
    """

    def __init__(
        self,
        fetch: Callable[[], Batch],
        render: Callable[[Frame], None],
        config: Config | None = None,
    ) -> None:
        """
        Initialize the DashboardLoop.

        Args:
            fetch: Returns a fresh batch; raises CollectionError on failure.
            render: Draws a frame. Assumed to always succeed.
            config: Row budget and preview sizes. Defaults to Config().
        """
        self._fetch = fetch
        self._render = render
        self._config = config or Config()
        self.state = DashboardState()

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def sort_key(self) -> SortKey:
        return self.state.sort_key

    @property
    def ranked(self) -> list[RateSample]:
        """Rows of the last successful tick, in display order."""
        return list(self.state.ranked)

    def start(self, width: int, height: int) -> None:
        """Record the geometry and draw the first frame synchronously."""
        self.state.running = True
        self.state.width = width
        self.state.height = height
        log.info("dashboard_started", width=width, height=height)
        # No baseline yet: every rate on the first frame is 0
        self.refresh()

    def stop(self) -> None:
        """Stop reacting to ticks."""
        if self.state.running:
            self.state.running = False
            log.info("dashboard_stopped")

    def tick(self) -> None:
        """Timer reaction: re-sample and redraw."""
        if self.state.running:
            self.refresh()

    def refresh(self) -> bool:
        """
        Sample, derive rates, rank and render one tick.

        On a failed fetch the redraw is skipped: the last frame stays on
        screen and the previous batch is kept as the baseline.

        Returns:
            True if a new frame was rendered.
        """
        try:
            batch = self._fetch()
        except CollectionError as exc:
            log.warning("batch_fetch_failed", error=str(exc))
            return False

        state = self.state
        derived = derive(batch.samples, state.previous_batch)
        state.ranked = rank(derived, state.sort_key, self._config.row_limit)
        state.cpu_percent = batch.cpu_percent
        state.memory_percent = batch.memory_percent
        self._clamp_selection()
        self._render(self.frame())

        # Wholesale replacement: exited processes drop out with the old batch
        state.previous_batch = index_by_pid(batch.samples)
        return True

    def resize(self, width: int, height: int) -> None:
        """Record the new geometry and redraw the last rows without sampling."""
        self.state.width = width
        self.state.height = height
        self._render(self.frame())

    def set_sort_key(self, key: SortKey) -> None:
        """Change the sort key and redraw immediately with a fresh sample."""
        self.state.sort_key = key
        log.info("sort_key_changed", sort_key=key.value)
        self.refresh()

    def move_selection(self, delta: int) -> None:
        """Move the row cursor by ``delta``, clamped to the visible rows."""
        self.state.selected += delta
        self._clamp_selection()
        self._render(self.frame())

    def toggle_files(self) -> None:
        """Show or hide the full open-files list of the selected process."""
        self.state.show_files = not self.state.show_files
        self._render(self.frame())

    def frame(self) -> Frame:
        """Build the frame for the current state."""
        state = self.state
        rows = [build_row(sample, self._config.files_preview) for sample in state.ranked]
        selected_files: tuple[str, ...] = ()
        if state.show_files and state.ranked:
            selected_files = state.ranked[state.selected].open_files
        return Frame(
            rows=rows,
            sort_key=state.sort_key,
            selected=state.selected,
            show_files=state.show_files,
            selected_files=selected_files,
            width=state.width,
            height=state.height,
            cpu_percent=state.cpu_percent,
            memory_percent=state.memory_percent,
        )

    def _clamp_selection(self) -> None:
        last = max(len(self.state.ranked) - 1, 0)
        self.state.selected = min(max(self.state.selected, 0), last)
