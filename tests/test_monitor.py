"""Tests for the psutil snapshot provider."""

import os
from collections import namedtuple

import psutil

from sysview.models import CpuCore, DiskInfo, GlobalSnapshot, ProcessRow
from sysview.monitor import PROCESS_ATTRS, PsutilProvider

pio = namedtuple("pio", ["read_count", "write_count", "read_bytes", "write_bytes"])
sdiskpart = namedtuple("sdiskpart", ["device", "mountpoint", "fstype", "opts"])


class FakeProcess:
    """Stand-in for psutil.Process exposing only .info."""

    def __init__(self, **info):
        self.info = info


class TestPsutilProvider:
    """Tests for PsutilProvider class."""

    def test_call_returns_rows_and_global(self):
        """Test provider returns a (rows, global snapshot) pair."""
        provider = PsutilProvider()

        rows, global_snapshot = provider()

        assert isinstance(rows, list)
        assert isinstance(global_snapshot, GlobalSnapshot)

    def test_collect_processes_returns_list(self):
        """Test collect_processes returns a list of ProcessRow."""
        provider = PsutilProvider()

        rows = provider.collect_processes()

        assert len(rows) > 0
        for row in rows:
            assert isinstance(row, ProcessRow)

    def test_collect_processes_includes_self(self):
        provider = PsutilProvider()

        rows = provider.collect_processes()

        pids = {row.pid for row in rows}
        assert os.getpid() in pids

    def test_process_row_has_required_fields(self):
        """Test collected rows have valid types, None where unavailable."""
        provider = PsutilProvider()

        rows = provider.collect_processes()

        for row in rows[:5]:
            assert row.pid >= 0
            assert isinstance(row.name, str)
            assert row.cpu is None or isinstance(row.cpu, float)
            assert row.mem_mb is None or isinstance(row.mem_mb, float)
            assert row.read_bytes is None or row.read_bytes >= 0
            assert row.write_bytes is None or row.write_bytes >= 0
            assert row.user is None

    def test_own_memory_is_reported(self):
        provider = PsutilProvider()

        rows = provider.collect_processes()

        own = next(row for row in rows if row.pid == os.getpid())
        assert own.mem_mb is not None
        assert own.mem_mb > 0

    def test_collect_global(self):
        provider = PsutilProvider()

        snapshot = provider.collect_global()

        assert snapshot.ram_total is not None
        assert snapshot.ram_total > 0
        assert len(snapshot.cores) == psutil.cpu_count()
        assert all(isinstance(core, CpuCore) for core in snapshot.cores)
        assert snapshot.cores[0].name == "cpu0"
        assert all(isinstance(disk, DiskInfo) for disk in snapshot.disks)
        assert snapshot.physical_core_count == psutil.cpu_count(logical=False)

    def test_process_attrs_are_valid(self):
        for attr in PROCESS_ATTRS:
            assert hasattr(psutil.Process, attr)

    def test_io_deltas(self, monkeypatch):
        """Test read/write bytes are deltas of the cumulative counters."""
        snapshots = [
            [FakeProcess(pid=1, name="a", cpu_percent=1.0, memory_info=None,
                         io_counters=pio(0, 0, 1000, 50))],
            [FakeProcess(pid=1, name="a", cpu_percent=1.0, memory_info=None,
                         io_counters=pio(0, 0, 1600, 80))],
        ]
        monkeypatch.setattr(psutil, "process_iter", lambda attrs: snapshots.pop(0))
        provider = PsutilProvider()

        first = provider.collect_processes()[0]
        second = provider.collect_processes()[0]

        assert (first.read_bytes, first.write_bytes) == (0, 0)
        assert (first.total_read, first.total_written) == (1000, 50)
        assert (second.read_bytes, second.write_bytes) == (600, 30)
        assert (second.total_read, second.total_written) == (1600, 80)

    def test_unavailable_attributes_become_none(self, monkeypatch):
        """Test AccessDenied attributes (None in .info) map to None fields."""
        procs = [FakeProcess(pid=5, name=None, cpu_percent=None, memory_info=None, io_counters=None)]
        monkeypatch.setattr(psutil, "process_iter", lambda attrs: procs)
        provider = PsutilProvider()

        row = provider.collect_processes()[0]

        assert row == ProcessRow(pid=5, name="")

    def test_vanished_process_is_skipped(self, monkeypatch):
        class Gone:
            @property
            def info(self):
                raise psutil.NoSuchProcess(42)

        procs = [Gone(), FakeProcess(pid=7, name="ok", cpu_percent=0.0)]
        monkeypatch.setattr(psutil, "process_iter", lambda attrs: procs)
        provider = PsutilProvider()

        rows = provider.collect_processes()

        assert [row.pid for row in rows] == [7]

    def test_disk_usage_error_keeps_disk(self, monkeypatch):
        part = sdiskpart("/dev/x", "/mnt/x", "ext4", "rw")

        def denied(path):
            raise PermissionError(path)

        monkeypatch.setattr(psutil, "disk_partitions", lambda all=False: [part])
        monkeypatch.setattr(psutil, "disk_usage", denied)
        provider = PsutilProvider()

        disks = provider.collect_disks()

        assert disks == [DiskInfo(name="/dev/x", mount_point="/mnt/x")]
