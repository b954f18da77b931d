"""Rolling metric history and chart windows for sysview."""

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass

from sysview.models import Metric, ProcessRow

MAX_LEN = 60


class BoundedBuffer:
    """
    Fixed-capacity sliding window of samples, oldest first.

    Once full, every push evicts the oldest sample before appending.
    """

    __slots__ = ("_samples",)

    def __init__(self, capacity: int = MAX_LEN) -> None:
        self._samples: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen  # type: ignore[return-value]

    def push(self, sample: float) -> None:
        """Append a sample, evicting the oldest one when at capacity."""
        self._samples.append(sample)

    def max(self) -> float:
        """Largest sample held, 0.0 when empty."""
        return max(self._samples, default=0.0)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[float]:
        return iter(self._samples)

    def __getitem__(self, index: int) -> float:
        return self._samples[index]

    def __repr__(self) -> str:
        return f"BoundedBuffer({list(self._samples)!r}, capacity={self.capacity})"


class HistoryStore:
    """
    Per-process metric histories plus the system-wide CPU average history.

    A record is created the first time a pid is recorded and is kept for the
    rest of the session, including after the process exits.
    """

    def __init__(self, capacity: int = MAX_LEN) -> None:
        self._capacity = capacity
        self._records: dict[int, dict[Metric, BoundedBuffer]] = {}
        self.global_cpu = BoundedBuffer(capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def record(self, row: ProcessRow) -> None:
        """Push one sample of every metric of the row. Absent values count as 0."""
        buffers = self._records.get(row.pid)
        if buffers is None:
            buffers = {metric: BoundedBuffer(self._capacity) for metric in Metric}
            self._records[row.pid] = buffers

        for metric, buffer in buffers.items():
            value = getattr(row, metric.value)
            buffer.push(value if value is not None else 0)

    def history_for(self, pid: int, metric: Metric) -> BoundedBuffer:
        """History of a pid's metric, or an empty buffer for unknown pids."""
        buffers = self._records.get(pid)
        if buffers is None:
            return BoundedBuffer(self._capacity)
        return buffers[metric]

    def __contains__(self, pid: object) -> bool:
        return pid in self._records

    def __len__(self) -> int:
        return len(self._records)


@dataclass(slots=True, frozen=True)
class ChartWindow:
    """Fixed-length series ready for plotting, plus its axis maximum."""

    values: list[float]
    maximum: float


def project(buffer: BoundedBuffer, window: int = MAX_LEN) -> ChartWindow:
    """
    Right-justify a history into a fixed-length window.

    Missing older samples are padded with 0.0 so that the newest sample
    always sits at the last index. The maximum is taken over the real
    samples only.
    """
    samples = list(buffer)
    offset = window - len(samples)
    values = []
    for i in range(window):
        index = i - offset
        values.append(float(samples[index]) if 0 <= index < len(samples) else 0.0)
    return ChartWindow(values=values, maximum=float(buffer.max()))
