"""Shared error types for the plugin orchestrator."""

from __future__ import annotations


from dataclasses import dataclass
from typing import List, Sequence

SEVERITY_ERROR = "ERROR"


@dataclass(frozen=True)
class ValidationIssue:
    """Single finding produced while checking plugin metadata or options."""

    code: str
    msg: str
    path: str
    severity: str


def make_error(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct an error-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_ERROR)


class PluginError(RuntimeError):
    """Base class for every error raised by the orchestrator core."""


class UnsatisfiedDependency(PluginError):
    """Raised when a plugin declares modules that cannot be imported."""

    def __init__(self, name: str, missing: Sequence[str]) -> None:
        self.name = name
        self.missing: List[str] = list(missing)
        super().__init__(
            f"Plugin dependencies not met: {name} -- {' '.join(self.missing)}"
        )

    @property
    def hint(self) -> str:
        """Suggested remediation; never executed by the orchestrator."""

        return f"pip install {' '.join(self.missing)}"


class _IssueError(PluginError):
    _label = "issues"

    def __init__(self, name: str, issues: Sequence[ValidationIssue]) -> None:
        self.name = name
        self.issues: List[ValidationIssue] = list(issues)
        codes = ", ".join(f"{issue.path}: {issue.msg}" for issue in self.issues[:5])
        if len(self.issues) > 5:
            codes += ", …"
        super().__init__(f"{self._label} for {name}: {codes}")


class InvalidOptions(_IssueError):
    """Raised when the options supplied for a plugin violate its schema."""

    _label = "Invalid options"


class InvalidDescriptor(_IssueError):
    """Raised when a plugin class declares malformed ``info`` metadata."""

    _label = "Invalid plugin metadata"


__all__ = [
    "SEVERITY_ERROR",
    "InvalidDescriptor",
    "InvalidOptions",
    "PluginError",
    "UnsatisfiedDependency",
    "ValidationIssue",
    "make_error",
]
