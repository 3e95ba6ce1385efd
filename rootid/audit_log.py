"""
Audit log of identifier writes.

Every propagation and cleanup run appends one JSON Lines record to
``<workspace>/.rootid/audit.log`` stating which jobs had the identifier
created, updated, skipped or removed.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .jobs.loader import STATE_DIR


@dataclass
class ChangeSummary:
    """Jobs touched by one operation, grouped by outcome."""
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)


@dataclass
class AuditEntry:
    """A single audit log entry."""
    timestamp: str
    operation: str
    job: str
    build_number: int
    identifier: str | None
    changes: ChangeSummary
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "job": self.job,
            "build_number": self.build_number,
            "identifier": self.identifier,
            "changes": asdict(self.changes),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        """Create from dictionary."""
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            job=data["job"],
            build_number=int(data.get("build_number", 0)),
            identifier=data.get("identifier"),
            changes=ChangeSummary(**data.get("changes", {})),
            metadata=data.get("metadata", {}),
        )


def get_audit_log_path(workspace_path: Path) -> Path:
    """Get the path to the audit log file."""
    return workspace_path / STATE_DIR / "audit.log"


def log_operation(
    workspace_path: Path,
    operation: str,
    job: str,
    build_number: int,
    identifier: str | None = None,
    changes: ChangeSummary | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Append an operation to the audit log.

    Args:
        workspace_path: Workspace root (the directory holding ``jobs/``)
        operation: Name of the operation ("propagate", "cleanup")
        job: Job the build belongs to
        build_number: Build number of that job
        identifier: Root identifier involved, if any
        changes: Jobs touched, grouped by outcome
        metadata: Additional context (e.g. upstream cause)

    Returns:
        The created audit entry
    """
    entry = AuditEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        job=job,
        build_number=build_number,
        identifier=identifier,
        changes=changes or ChangeSummary(),
        metadata=metadata or {},
    )

    log_path = get_audit_log_path(workspace_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_audit_log(workspace_path: Path, last_n: int | None = None) -> list[AuditEntry]:
    """
    Read entries from the audit log, oldest first.

    Malformed lines are skipped.
    """
    log_path = get_audit_log_path(workspace_path)
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    entries.append(AuditEntry.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, TypeError):
                    continue

    if last_n is not None:
        return entries[-last_n:] if last_n > 0 else []
    return entries


def format_audit_entry(entry: AuditEntry) -> str:
    """Format an audit entry for human-readable display."""
    lines = [
        f"[{entry.timestamp}] {entry.operation} {entry.job} #{entry.build_number}",
    ]
    if entry.identifier:
        lines.append(f"  Identifier: {entry.identifier}")

    for label, names in (
        ("Created", entry.changes.created),
        ("Updated", entry.changes.updated),
        ("Skipped", entry.changes.skipped),
        ("Removed", entry.changes.removed),
    ):
        if names:
            lines.append(f"  {label}: {', '.join(names)}")

    for key, value in entry.metadata.items():
        lines.append(f"  {key}: {value}")

    return "\n".join(lines)
