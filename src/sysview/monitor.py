"""psutil-backed snapshot provider for sysview."""

import logging

import psutil

from sysview.models import CpuCore, DiskInfo, GlobalSnapshot, ProcessRow

logger = logging.getLogger(__name__)

# Attributes fetched for every process in one pass. io_counters is missing on macOS.
PROCESS_ATTRS = [
    attr
    for attr in ("pid", "name", "cpu_percent", "memory_info", "io_counters")
    if hasattr(psutil.Process, attr)
]


class PsutilProvider:
    """
    Snapshot provider that collects process and hardware data using psutil.

    Each call returns a fresh (rows, global snapshot) pair. Disk I/O deltas
    are computed against the previous call, so one instance should be used
    for the whole session. Handles AccessDenied and ZombieProcess errors
    by skipping the affected process.
    """

    def __init__(self) -> None:
        """Initialize the PsutilProvider."""
        # pid -> (total_read, total_written) seen on the previous call
        self._last_io: dict[int, tuple[int, int]] = {}
        # Initialize CPU percent (first call returns 0.0)
        psutil.cpu_percent(percpu=True)

    def __call__(self) -> tuple[list[ProcessRow], GlobalSnapshot]:
        return self.collect_processes(), self.collect_global()

    def collect_processes(self) -> list[ProcessRow]:
        """
        Collect rows for all running processes.

        CPU is reported raw (percent of one core); the engine normalizes it.
        """
        rows: list[ProcessRow] = []
        seen_io: dict[int, tuple[int, int]] = {}

        for proc in psutil.process_iter(attrs=PROCESS_ATTRS):
            try:
                info = proc.info
                pid = info["pid"]

                mem_info = info.get("memory_info")
                io = info.get("io_counters")

                read_bytes = write_bytes = total_read = total_written = None
                if io is not None:
                    total_read, total_written = io.read_bytes, io.write_bytes
                    last_read, last_written = self._last_io.get(pid, (total_read, total_written))
                    read_bytes = max(total_read - last_read, 0)
                    write_bytes = max(total_written - last_written, 0)
                    seen_io[pid] = (total_read, total_written)

                cpu = info.get("cpu_percent")
                rows.append(
                    ProcessRow(
                        pid=pid,
                        name=info.get("name") or "",
                        cpu=float(cpu) if cpu is not None else None,
                        mem_mb=float(mem_info.rss) if mem_info else None,
                        read_bytes=read_bytes,
                        write_bytes=write_bytes,
                        total_read=total_read,
                        total_written=total_written,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                # Process died mid-poll or is off limits
                continue

        # Drop counters of processes that are gone
        self._last_io = seen_io
        return rows

    def collect_global(self) -> GlobalSnapshot:
        """Collect RAM, per-core usage and disk capacity."""
        mem = psutil.virtual_memory()
        cores = [
            CpuCore(name=f"cpu{i}", usage=usage)
            for i, usage in enumerate(psutil.cpu_percent(percpu=True))
        ]
        return GlobalSnapshot(
            ram_total=mem.total,
            ram_available=mem.available,
            ram_used=mem.used,
            cores=cores,
            disks=self.collect_disks(),
            physical_core_count=psutil.cpu_count(logical=False),
        )

    def collect_disks(self) -> list[DiskInfo]:
        disks: list[DiskInfo] = []
        for part in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError:
                logger.debug("no usage for %s", part.mountpoint, exc_info=True)
                disks.append(DiskInfo(name=part.device or None, mount_point=part.mountpoint))
                continue
            disks.append(
                DiskInfo(
                    name=part.device or None,
                    mount_point=part.mountpoint,
                    total_space=usage.total,
                    available_space=usage.free,
                )
            )
        return disks
