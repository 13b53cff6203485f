"""
Liveness and readiness reporting.

Readiness is "not_ready" when any check reports "error": the record
store is unreachable, or free disk or memory is below its floor.
"""
from datetime import datetime, timezone
from typing import Any, Dict
import time

import psutil

from .adapters.base import RecordStore
from .logging import get_logger

logger = get_logger()

GIB = 1024 ** 3
MIB = 1024 ** 2


def _level(available: float, floor: float) -> str:
    """Grade an available amount against a floor: error below it, warning below twice it."""
    if available < floor:
        return "error"
    if available < floor * 2:
        return "warning"
    return "ok"


class HealthChecker:
    """
    Builds the /health and /health/ready payloads.
    """

    def __init__(
        self,
        store: RecordStore,
        service_name: str = "passvault",
        version: str = "0.1.0",
        min_disk_gb: float = 1.0,
        min_memory_mb: float = 50.0,
    ):
        self.store = store
        self.service_name = service_name
        self.version = version
        self.min_disk_gb = min_disk_gb
        self.min_memory_mb = min_memory_mb

    def _envelope(self, status: str) -> Dict[str, Any]:
        return {
            "status": status,
            "service": self.service_name,
            "version": self.version,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    def liveness(self) -> Dict[str, Any]:
        """The process is up and serving requests."""
        return self._envelope("ok")

    async def readiness(self) -> Dict[str, Any]:
        """
        Run every dependency check.

        Returns:
            dict: Envelope plus a "checks" mapping of per-check results
        """
        checks = {
            "record_store": await self._check_store(),
            "disk_space": self._check_disk_space(),
            "memory": self._check_memory(),
        }
        failed = [name for name, check in checks.items() if check["status"] == "error"]
        if failed:
            logger.warning("readiness.failed", checks=failed)

        result = self._envelope("not_ready" if failed else "ready")
        result["checks"] = checks
        return result

    async def _check_store(self) -> Dict[str, Any]:
        backend = type(self.store).__name__
        start = time.perf_counter()
        healthy = await self.store.health_check()
        latency_ms = round((time.perf_counter() - start) * 1000, 2)

        if not healthy:
            return {"status": "error", "backend": backend}
        return {"status": "ok", "backend": backend, "latency_ms": latency_ms}

    def _check_disk_space(self) -> Dict[str, Any]:
        try:
            disk = psutil.disk_usage("/")
        except (psutil.Error, OSError) as e:
            logger.warning("readiness.disk_check_failed", error=str(e))
            return {"status": "error", "error": str(e)}

        available_gb = disk.free / GIB
        return {
            "status": _level(available_gb, self.min_disk_gb),
            "available_gb": round(available_gb, 2),
            "total_gb": round(disk.total / GIB, 2),
            "used_percent": disk.percent,
        }

    def _check_memory(self) -> Dict[str, Any]:
        try:
            memory = psutil.virtual_memory()
        except (psutil.Error, OSError) as e:
            logger.warning("readiness.memory_check_failed", error=str(e))
            return {"status": "error", "error": str(e)}

        available_mb = memory.available / MIB
        return {
            "status": _level(available_mb, self.min_memory_mb),
            "available_mb": round(available_mb, 2),
            "total_mb": round(memory.total / MIB, 2),
            "used_percent": memory.percent,
        }
