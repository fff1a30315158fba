"""HitExport data models package.

All models are dataclasses. No business logic lives here.
"""

from hitexport.models.export import (
    ExportFailure,
    ExportJob,
    ExportOutcome,
    ExportState,
    ExportSuccess,
)
from hitexport.models.hits import Hit, HitPage, Tenant

__all__ = [
    "Hit",
    "HitPage",
    "Tenant",
    "ExportJob",
    "ExportState",
    "ExportSuccess",
    "ExportFailure",
    "ExportOutcome",
]
