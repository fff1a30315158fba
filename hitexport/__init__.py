"""HitExport — streaming bulk export of analytics hits to a published CSV.gz.

Public API surface:
    - ExportConfig: Runtime configuration
    - ExportPipeline: Fetch → encode → publish → notify driver
    - export: Convenience entry point for a single export run
"""

__version__ = "1.0.0"
__author__ = "HitExport Contributors"

from config.settings import ExportConfig
from hitexport.pipeline import ExportPipeline, export

__all__ = [
    "__version__",
    "ExportConfig",
    "ExportPipeline",
    "export",
]
