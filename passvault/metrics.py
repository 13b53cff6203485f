"""
Prometheus metrics for Passvault.

Every Metrics instance owns its registry, so tests can build isolated
instances next to the one served at /metrics.
"""
import os

import psutil
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info

RECORD_OPERATIONS = ("list", "read", "create", "update", "delete")


class Metrics:
    """
    HTTP, vault and process metrics.

    Vault counters:
    - passvault_logins_total{outcome}
    - passvault_auth_failures_total
    - passvault_passwords_generated_total
    - passvault_records_total{operation}
    - passvault_decrypt_failures_total
    """

    def __init__(self, service_name: str = "passvault", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()
        self._process = psutil.Process(os.getpid())

        self._init_http()
        self._init_vault()
        self._init_process()

        Info("app", "Application information", registry=self.registry).info(
            {"service": service_name, "version": version}
        )
        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

    def _init_http(self):
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )
        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )
        self.http_requests_active = Gauge(
            "http_requests_active",
            "HTTP requests currently being served",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=self.service_name).set(0)

    def _init_vault(self):
        self.logins_total = Counter(
            "passvault_logins_total",
            "Master password login attempts by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.auth_failures_total = Counter(
            "passvault_auth_failures_total",
            "Requests rejected for a missing or invalid session token",
            registry=self.registry,
        )
        self.passwords_generated_total = Counter(
            "passvault_passwords_generated_total",
            "Passwords generated",
            registry=self.registry,
        )
        self.records_total = Counter(
            "passvault_records_total",
            "Record operations by kind",
            ["operation"],
            registry=self.registry,
        )
        self.decrypt_failures_total = Counter(
            "passvault_decrypt_failures_total",
            "Stored secrets that failed integrity verification",
            registry=self.registry,
        )

        # Pre-create label sets so every series is exported from the first scrape
        for outcome in ("success", "failure"):
            self.logins_total.labels(outcome=outcome)
        for operation in RECORD_OPERATIONS:
            self.records_total.labels(operation=operation)

    def _init_process(self):
        self.process_memory_bytes = Gauge(
            "passvault_process_resident_memory_bytes",
            "Resident memory size in bytes",
            registry=self.registry,
        )
        self.process_open_fds = Gauge(
            "passvault_process_open_fds",
            "Number of open file descriptors",
            registry=self.registry,
        )
        self.process_memory_bytes.set_function(self._rss)
        if hasattr(self._process, "num_fds"):
            self.process_open_fds.set_function(self._process.num_fds)

    def _rss(self) -> float:
        try:
            return self._process.memory_info().rss
        except psutil.Error:
            return 0.0

    def record_login(self, success: bool):
        self.logins_total.labels(outcome="success" if success else "failure").inc()

    def record_operation(self, operation: str):
        self.records_total.labels(operation=operation).inc()
