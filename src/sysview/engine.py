"""Monitoring engine: owns the row set, the histories and the view state."""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, replace

from sysview.formatting import scale_bytes
from sysview.history import MAX_LEN, ChartWindow, HistoryStore, project
from sysview.models import GlobalSnapshot, ProcessRow, SortKey
from sysview.sorting import sort_rows

logger = logging.getLogger(__name__)

SnapshotProvider = Callable[[], tuple[list[ProcessRow], GlobalSnapshot]]

# Columns shown in the process table, one per sort key except USER.
COLUMNS: tuple[SortKey, ...] = tuple(SortKey)[: SortKey.TOTAL_WRITTEN.index + 1]


@dataclass(slots=True, frozen=True)
class ChartView:
    """What the chart pane draws: a title, the series and y-axis labels."""

    title: str
    window: ChartWindow
    labels: tuple[str, str, str]


class MonitorEngine:
    """
    Turns periodic snapshots into a sorted row set and rolling histories.

    The snapshot provider is injected so tests can drive the engine with
    canned data. All state is mutated only through the methods below.
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        history_len: int = MAX_LEN,
        paused: bool = False,
    ) -> None:
        """
        Initialize the MonitorEngine.

        Args:
            provider: Callable returning (rows, global snapshot).
            history_len: Number of samples kept per metric and chart width.
            paused: Start with ticking suspended.
        """
        self._provider = provider
        self.history = HistoryStore(history_len)
        self.rows: list[ProcessRow] = []
        self.global_snapshot = GlobalSnapshot()
        self.sort_key = SortKey.CPU
        self.descending = True
        self.paused = paused
        self.selected_row = 0
        self.selected_column = 0
        self.chart_pid = os.getpid()
        self.chart_column = SortKey.MEM
        self.plot_cpu = True

    def tick(self) -> bool:
        """
        Pull a fresh snapshot and fold it into the row set and histories.

        Returns False without touching the provider while paused.
        """
        if self.paused:
            return False

        try:
            rows, global_snapshot = self._provider()
        except Exception:
            logger.exception("snapshot provider failed")
            raise

        divisor = global_snapshot.physical_core_count or 1
        normalized = [
            row if row.cpu is None else replace(row, cpu=row.cpu / divisor)
            for row in rows
        ]

        self.history.global_cpu.push(global_snapshot.average_cpu_usage())
        self.global_snapshot = global_snapshot
        self.rows = normalized
        self.sort()
        for row in self.rows:
            self.history.record(row)

        self._clamp_selection()
        logger.debug("tick: %d processes, %d tracked", len(self.rows), len(self.history))
        return True

    def sort(self) -> None:
        """Re-order the row set by the active sort key and direction."""
        self.rows = sort_rows(self.rows, self.sort_key, self.descending)

    def next_sort_key(self) -> SortKey:
        self.sort_key = self.sort_key.succ()
        self.sort()
        return self.sort_key

    def previous_sort_key(self) -> SortKey:
        self.sort_key = self.sort_key.pred()
        self.sort()
        return self.sort_key

    def set_descending(self, descending: bool) -> None:
        self.descending = descending
        self.sort()

    def toggle_pause(self) -> bool:
        """Flip the paused flag and return the new value."""
        self.paused = not self.paused
        logger.info("monitoring %s", "paused" if self.paused else "resumed")
        return self.paused

    def next_row(self) -> None:
        if self.rows:
            self.selected_row = (self.selected_row + 1) % len(self.rows)

    def previous_row(self) -> None:
        if self.rows:
            self.selected_row = (self.selected_row - 1) % len(self.rows)

    def next_column(self) -> None:
        self.selected_column = (self.selected_column + 1) % len(COLUMNS)

    def previous_column(self) -> None:
        self.selected_column = (self.selected_column - 1) % len(COLUMNS)

    @property
    def selected_pid(self) -> int | None:
        if not self.rows:
            return None
        return self.rows[self.selected_row].pid

    def select_chart_target(self) -> bool:
        """Chart the highlighted cell. Returns False if nothing is highlighted."""
        pid = self.selected_pid
        if pid is None:
            return False
        self.chart_pid = pid
        self.chart_column = COLUMNS[self.selected_column]
        self.plot_cpu = False
        logger.info("charting pid %d %s", pid, self.chart_column.value)
        return True

    def show_cpu_chart(self) -> None:
        self.plot_cpu = True

    def chart(self) -> ChartView:
        """Build the chart for the global CPU average or the chart target."""
        window_len = self.history.capacity
        if self.plot_cpu:
            window = project(self.history.global_cpu, window_len)
            return ChartView("Cpu avg usage", window, _percent_labels(window.maximum))

        # The target may have exited; history_for degrades to an empty series.
        buffer = self.history.history_for(self.chart_pid, self.chart_column.metric)
        window = project(buffer, window_len)
        if self.chart_column.is_percent:
            labels = _percent_labels(window.maximum)
        else:
            labels = ("0", scale_bytes(window.maximum / 2), scale_bytes(window.maximum))
        title = f"{self.chart_pid} {self.chart_column.metric.name}"
        return ChartView(title, window, labels)

    def _clamp_selection(self) -> None:
        self.selected_row = min(self.selected_row, max(len(self.rows) - 1, 0))


def _percent_labels(maximum: float) -> tuple[str, str, str]:
    return ("0", f"{round(maximum / 2)}%", f"{round(maximum)}%")
