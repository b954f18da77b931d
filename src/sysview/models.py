"""Data models for sysview."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(slots=True, frozen=True)
class ProcessRow:
    """Immutable snapshot of one process, rebuilt every tick."""

    pid: int
    name: str
    cpu: float | None = None  # percent of the whole machine once normalized
    mem_mb: float | None = None  # Bytes, scaled at display time
    read_bytes: int | None = None
    write_bytes: int | None = None
    total_read: int | None = None
    total_written: int | None = None
    user: str | None = None  # never resolved


@dataclass(slots=True, frozen=True)
class CpuCore:
    """Usage of a single logical CPU."""

    name: str
    usage: float | None = None


@dataclass(slots=True, frozen=True)
class DiskInfo:
    """Capacity of a mounted disk."""

    name: str | None = None
    mount_point: str | None = None
    total_space: int | None = None
    available_space: int | None = None


@dataclass(slots=True)
class GlobalSnapshot:
    """Snapshot of overall hardware state."""

    ram_total: int | None = None
    ram_available: int | None = None
    ram_used: int | None = None
    cores: list[CpuCore] = field(default_factory=list)
    disks: list[DiskInfo] = field(default_factory=list)
    physical_core_count: int | None = None

    def average_cpu_usage(self) -> float:
        """Mean usage over the cores that report one, 0.0 if none do."""
        usages = [core.usage for core in self.cores if core.usage is not None]
        if not usages:
            return 0.0
        return sum(usages) / len(usages)


class Metric(Enum):
    """Per-process metrics that keep a history. Values are ProcessRow fields."""

    CPU = "cpu"
    MEM = "mem_mb"
    READ = "read_bytes"
    WRITE = "write_bytes"
    TOTAL_READ = "total_read"
    TOTAL_WRITTEN = "total_written"


class SortKey(Enum):
    """Sort keys for the process table, in column order."""

    PID = "pid"
    NAME = "name"
    CPU = "cpu"
    MEM = "mem"
    READ = "read"
    WRITE = "write"
    TOTAL_READ = "total-read"
    TOTAL_WRITTEN = "total-written"
    USER = "user"

    @property
    def index(self) -> int:
        """Position of the key, which is also its table column."""
        return list(SortKey).index(self)

    @classmethod
    def from_index(cls, index: int) -> "SortKey":
        return list(cls)[index]

    def succ(self) -> "SortKey":
        """Next key, saturating at the last key that has a table column."""
        return SortKey.from_index(min(self.index + 1, SortKey.TOTAL_WRITTEN.index))

    def pred(self) -> "SortKey":
        """Previous key, saturating at the first."""
        return SortKey.from_index(max(self.index - 1, 0))

    @property
    def metric(self) -> Metric:
        """Metric charted for this column. Non-numeric columns chart CPU."""
        return _KEY_METRICS.get(self, Metric.CPU)

    @property
    def is_percent(self) -> bool:
        """Whether charts for this column are labelled in percent."""
        return self in (SortKey.PID, SortKey.NAME, SortKey.CPU)


_KEY_METRICS = {
    SortKey.CPU: Metric.CPU,
    SortKey.MEM: Metric.MEM,
    SortKey.READ: Metric.READ,
    SortKey.WRITE: Metric.WRITE,
    SortKey.TOTAL_READ: Metric.TOTAL_READ,
    SortKey.TOTAL_WRITTEN: Metric.TOTAL_WRITTEN,
}
