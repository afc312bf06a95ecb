"""Process-level metrics reported by the health endpoint."""

from __future__ import annotations

import os
import platform
import resource
import sys
import time
from dataclasses import dataclass
from pathlib import Path

_STATM_PATH = Path("/proc/self/statm")


@dataclass(frozen=True)
class MemoryUsage:
    """Memory figures in bytes."""

    heap_used: int
    heap_total: int
    external: int


@dataclass(frozen=True)
class CpuUsage:
    """Accumulated CPU time in microseconds."""

    user: int
    system: int


class SystemMetricsProvider:
    """Reads memory, CPU and uptime figures for the current process."""

    def __init__(self, started_at: float | None = None) -> None:
        self.started_at = started_at if started_at is not None else time.time()

    def uptime_seconds(self) -> int:
        return int(time.time() - self.started_at)

    def memory_usage(self) -> MemoryUsage:
        """Return current resident, peak resident and shared memory.

        ``heap_used`` is the current RSS, ``heap_total`` the peak RSS and
        ``external`` the resident memory shared with other processes (mapped
        files and libraries). Without ``/proc`` only the peak is known.
        """
        peak = self._peak_rss_bytes()
        statm = self._read_statm()
        if statm is None:
            return MemoryUsage(heap_used=peak, heap_total=peak, external=0)

        page_size = os.sysconf("SC_PAGE_SIZE")
        resident = statm[1] * page_size
        shared = statm[2] * page_size
        return MemoryUsage(heap_used=resident, heap_total=max(peak, resident), external=shared)

    def cpu_usage(self) -> CpuUsage:
        times = os.times()
        return CpuUsage(user=int(times.user * 1_000_000), system=int(times.system * 1_000_000))

    def platform(self) -> str:
        return sys.platform

    def runtime_version(self) -> str:
        return platform.python_version()

    def pid(self) -> int:
        return os.getpid()

    @staticmethod
    def _peak_rss_bytes() -> int:
        peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # ru_maxrss is kilobytes on Linux and bytes on macOS
        return peak if sys.platform == "darwin" else peak * 1024

    @staticmethod
    def _read_statm() -> list[int] | None:
        try:
            fields = _STATM_PATH.read_text().split()
        except OSError:
            return None
        return [int(value) for value in fields[:3]]
