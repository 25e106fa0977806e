"""Service module exports."""

from . import (
    aggregation,
    allocation,
    classification,
    entries,
    export_csv,
    goals,
    recurrence,
    reports,
    secure_storage,
    sync,
)

__all__ = [
    "aggregation",
    "allocation",
    "classification",
    "entries",
    "export_csv",
    "goals",
    "recurrence",
    "reports",
    "secure_storage",
    "sync",
]
