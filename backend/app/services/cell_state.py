"""Cell status and info transition rules.

Any enumerated status may follow any other: interlocks are enforced by the
physical equipment, not here. What this module guarantees is the bookkeeping:

* a status change always stamps ``last_operation``;
* a supplied grounding flag is applied and stamps ``last_grounded_operation``;
* an info edit touches only name/description/voltage and never counts as an
  operational action.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ..models import CellStatus
from .timestamps import now_utc


def normalize_cell_status(status: CellStatus | str) -> str:
    """Return the stored value for a status, rejecting unknown ones."""
    try:
        return CellStatus(status).value
    except ValueError:
        raise ValueError(f"Unknown cell status: {status!r}")


def ensure_expected_version(*, current_version: int | None, expected_version: int | None) -> None:
    """Compare-and-swap guard; ``None`` means the caller does not care."""
    if expected_version is None:
        return
    if current_version != expected_version:
        raise ValueError(
            f"Cell was modified concurrently (expected version {expected_version}, found {current_version})"
        )


def apply_status_transition(
    cell: Any,
    *,
    status: CellStatus | str,
    is_grounded: bool | None = None,
    at: datetime | None = None,
) -> Any:
    ts = at or now_utc()
    cell.status = normalize_cell_status(status)
    if is_grounded is not None:
        cell.is_grounded = bool(is_grounded)
        cell.last_grounded_operation = ts
    cell.last_operation = ts
    cell.updated_at = ts
    return cell


def apply_info_edit(
    cell: Any,
    *,
    name: str,
    description: str,
    voltage: str,
    at: datetime | None = None,
) -> Any:
    cell.name = name
    cell.description = description
    cell.voltage = voltage
    cell.updated_at = at or now_utc()
    return cell
