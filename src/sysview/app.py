"""sysview - Main Textual application."""

import logging
from collections.abc import Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Label, Sparkline, Static

from sysview.config import MonitorConfig, configure_logging, parse_args
from sysview.engine import COLUMNS, ChartView, MonitorEngine, SnapshotProvider
from sysview.formatting import format_optional, format_optional_bytes
from sysview.models import GlobalSnapshot, ProcessRow, SortKey
from sysview.monitor import PsutilProvider

logger = logging.getLogger(__name__)

COLUMN_LABELS = {
    SortKey.PID: "PID",
    SortKey.NAME: "Name",
    SortKey.CPU: "CPU %",
    SortKey.MEM: "Mem",
    SortKey.READ: "R",
    SortKey.WRITE: "W",
    SortKey.TOTAL_READ: "T.Read",
    SortKey.TOTAL_WRITTEN: "T.Write",
}


def format_row(row: ProcessRow) -> tuple[str, ...]:
    """Cell texts for one process, in column order."""
    return (
        str(row.pid),
        row.name,
        format_optional(f"{row.cpu:.1f}" if row.cpu is not None else None),
        format_optional_bytes(row.mem_mb),
        format_optional_bytes(row.read_bytes),
        format_optional_bytes(row.write_bytes),
        format_optional_bytes(row.total_read),
        format_optional_bytes(row.total_written),
    )


def column_label(key: SortKey, sort_key: SortKey, descending: bool) -> str:
    """Header text, marked with the sort direction on the active column."""
    label = COLUMN_LABELS[key]
    if key is sort_key:
        label += " (v)" if descending else " (^)"
    return label


class SystemPanel(Container):
    """Panel showing RAM, per-core usage and disks."""

    DEFAULT_CSS = """
    SystemPanel {
        width: 1fr;
        height: 1fr;
        border: solid $primary;
        overflow-y: auto;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize SystemPanel."""
        super().__init__(*args, **kwargs)
        self._snapshot = GlobalSnapshot()

    def compose(self) -> ComposeResult:
        """Compose the panel layout."""
        yield Static(self._get_ram_info(), id="ram-info", markup=False)
        yield Static(self._get_cpu_info(), id="cpu-info", markup=False)
        yield Static(self._get_disk_info(), id="disk-info", markup=False)

    def update_stats(self, snapshot: GlobalSnapshot) -> None:
        """Update the panel from a global snapshot."""
        self._snapshot = snapshot
        self.query_one("#ram-info", Static).update(self._get_ram_info())
        self.query_one("#cpu-info", Static).update(self._get_cpu_info())
        self.query_one("#disk-info", Static).update(self._get_disk_info())

    def _get_ram_info(self) -> str:
        snap = self._snapshot
        return (
            f"Ram total memory      {format_optional_bytes(snap.ram_total)}\n"
            f"Ram available memory  {format_optional_bytes(snap.ram_available)}\n"
            f"Ram used memory       {format_optional_bytes(snap.ram_used)}\n"
        )

    def _get_cpu_info(self) -> str:
        if not self._snapshot.cores:
            return "Loading CPU info..."
        lines = ["Cpu name  Usage %"]
        for core in self._snapshot.cores:
            usage = f"{core.usage:.1f}" if core.usage is not None else None
            lines.append(f"{core.name:<9} {format_optional(usage)}")
        return "\n".join(lines) + "\n"

    def _get_disk_info(self) -> str:
        lines = ["Disk name  Mount point  Total space  Available space"]
        for disk in self._snapshot.disks:
            lines.append(
                f"{format_optional(disk.name)}  {format_optional(disk.mount_point)}  "
                f"{format_optional_bytes(disk.total_space)}  "
                f"{format_optional_bytes(disk.available_space)}"
            )
        return "\n".join(lines)


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
        yield DataTable(id="process-table", cursor_type="cell", zebra_stripes=True)

    def update_rows(self, engine: MonitorEngine) -> None:
        """
        Redraw the table from the engine's sorted rows.

        Rows are re-added in full since the order changes with every sort.
        """
        table = self.query_one("#process-table", DataTable)
        table.clear(columns=True)
        for key in COLUMNS:
            table.add_column(column_label(key, engine.sort_key, engine.descending), key=key.value)
        for row in engine.rows:
            table.add_row(*format_row(row), key=str(row.pid))
        self.move_cursor(engine)

    def move_cursor(self, engine: MonitorEngine) -> None:
        """Place the cursor on the engine's selected cell."""
        table = self.query_one("#process-table", DataTable)
        if table.row_count:
            table.move_cursor(row=engine.selected_row, column=engine.selected_column)


class HistoryChart(Container):
    """Rolling chart of the global CPU average or the selected cell."""

    DEFAULT_CSS = """
    HistoryChart {
        width: 2fr;
        height: 1fr;
        border: solid $primary;
    }

    #chart-body {
        height: 1fr;
    }

    #chart-scale {
        width: 8;
        height: 1fr;
    }

    #chart-line {
        width: 1fr;
        height: 1fr;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the chart layout."""
        yield Label("", id="chart-title")
        yield Horizontal(
            Static("", id="chart-scale", markup=False),
            Sparkline([], summary_function=max, id="chart-line"),
            id="chart-body",
        )

    def update_chart(self, view: ChartView) -> None:
        """Show a new chart view."""
        zero, mid, top = view.labels
        self.query_one("#chart-title", Label).update(view.title)
        scale = self.query_one("#chart-scale", Static)
        scale.update(f"{top}\n{mid}\n{zero}")
        self.query_one("#chart-line", Sparkline).data = view.window.values


class SysviewApp(App):
    """Main sysview application."""

    TITLE = "sysview"
    SUB_TITLE = "Process & Resource Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #bottom {
        height: 14;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("escape", "quit", "Quit", show=False),
        Binding("up", "row_up", "Up", show=False, priority=True),
        Binding("down", "row_down", "Down", show=False, priority=True),
        Binding("left", "column_left", "Left", show=False, priority=True),
        Binding("right", "column_right", "Right", show=False, priority=True),
        Binding("shift+left", "sort_prev", "Sort col <", priority=True),
        Binding("shift+right", "sort_next", "Sort col >", priority=True),
        Binding("shift+up", "sort_ascending", "Sort asc", priority=True),
        Binding("shift+down", "sort_descending", "Sort desc", priority=True),
        Binding("space", "toggle_pause", "Pause", priority=True),
        Binding("enter", "chart_cell", "Chart cell", priority=True),
        Binding("tab", "chart_cpu", "CPU chart", priority=True),
    ]

    def __init__(
        self,
        config: MonitorConfig | None = None,
        provider: SnapshotProvider | None = None,
    ) -> None:
        """
        Initialize the SysviewApp.

        Args:
            config: Session settings. Defaults to MonitorConfig().
            provider: Snapshot source. Defaults to a PsutilProvider.
        """
        super().__init__()
        self._config = config or MonitorConfig()
        self._engine = MonitorEngine(
            provider if provider is not None else PsutilProvider(),
            history_len=self._config.history_len,
        )

    @property
    def engine(self) -> MonitorEngine:
        return self._engine

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield ProcessTable()
        yield Horizontal(
            HistoryChart(),
            SystemPanel(id="system-panel"),
            id="bottom",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Load the first snapshot and start the tick timer."""
        self._engine.tick()
        if self._config.start_paused:
            self._engine.toggle_pause()
        self._refresh_view()
        self.set_interval(self._config.interval, self._on_tick)

    def _on_tick(self) -> None:
        # Provider errors propagate; Textual restores the terminal on exit.
        if self._engine.tick():
            self._refresh_view()

    def _refresh_view(self) -> None:
        """Redraw every pane from the engine state."""
        self.query_one(ProcessTable).update_rows(self._engine)
        self.query_one(HistoryChart).update_chart(self._engine.chart())
        self.query_one(SystemPanel).update_stats(self._engine.global_snapshot)
        self.sub_title = "paused" if self._engine.paused else self.SUB_TITLE

    def _move_cursor(self) -> None:
        self.query_one(ProcessTable).move_cursor(self._engine)

    def action_row_up(self) -> None:
        self._engine.previous_row()
        self._move_cursor()

    def action_row_down(self) -> None:
        self._engine.next_row()
        self._move_cursor()

    def action_column_left(self) -> None:
        self._engine.previous_column()
        self._move_cursor()

    def action_column_right(self) -> None:
        self._engine.next_column()
        self._move_cursor()

    def action_sort_prev(self) -> None:
        self._engine.previous_sort_key()
        self.query_one(ProcessTable).update_rows(self._engine)

    def action_sort_next(self) -> None:
        self._engine.next_sort_key()
        self.query_one(ProcessTable).update_rows(self._engine)

    def action_sort_ascending(self) -> None:
        self._engine.set_descending(False)
        self.query_one(ProcessTable).update_rows(self._engine)

    def action_sort_descending(self) -> None:
        self._engine.set_descending(True)
        self.query_one(ProcessTable).update_rows(self._engine)

    def action_toggle_pause(self) -> None:
        """Freeze or resume sampling. Input and redraw continue."""
        paused = self._engine.toggle_pause()
        self.sub_title = "paused" if paused else self.SUB_TITLE

    def action_chart_cell(self) -> None:
        """Chart the metric under the cursor for the highlighted process."""
        if self._engine.select_chart_target():
            self.query_one(HistoryChart).update_chart(self._engine.chart())

    def action_chart_cpu(self) -> None:
        self._engine.show_cpu_chart()
        self.query_one(HistoryChart).update_chart(self._engine.chart())

    def action_quit(self) -> None:
        """Handle quit action."""
        logger.info("quitting")
        self.exit()


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for sysview application."""
    config = parse_args(argv)
    configure_logging(config)
    app = SysviewApp(config)
    app.run()


if __name__ == "__main__":
    main()
