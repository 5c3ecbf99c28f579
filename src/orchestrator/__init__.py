"""Concurrent plugin orchestration: scheduling, execution and result collection."""

from .dependencies import DependencyReport, check
from .diagnostics import DiagnosticSink, LoggingSink
from .executor import Executor, SequentialExecutor, ThreadExecutor
from .jobs import Job, JobRegistry
from .orchestrator import DEFAULT_PATTERNS, PluginManager
from .results import ResultRegistry
from .scheduler import run_order
from .settings import Settings, resolve_settings

__all__ = [
    "DEFAULT_PATTERNS",
    "DependencyReport",
    "DiagnosticSink",
    "Executor",
    "Job",
    "JobRegistry",
    "LoggingSink",
    "PluginManager",
    "ResultRegistry",
    "SequentialExecutor",
    "Settings",
    "ThreadExecutor",
    "check",
    "resolve_settings",
    "run_order",
]
