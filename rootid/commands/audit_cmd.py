"""Audit log viewer."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..audit_log import format_audit_entry, read_audit_log


def run_audit(workspace_path: Path, *, last_n: int | None = None, output_json: bool = False) -> int:
    entries = read_audit_log(workspace_path, last_n=last_n)

    if output_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return 0

    console = Console()
    if not entries:
        console.print("Audit log is empty.")
        return 0

    for entry in entries:
        console.print(escape(format_audit_entry(entry)), soft_wrap=True)
    console.print(f"\nEntries: {len(entries)} total")
    return 0
