"""HitExport I/O package.

File and stream operations only — no pipeline control flow in this layer.
"""

from hitexport.io.persistence import (
    atomic_replace,
    create_temp_file,
    export_path,
    file_checksum,
    human_size,
    remove_quietly,
    file_size,
    sync_file,
)
from hitexport.io.sink import RecordSink, iter_artifact_rows, render_row

__all__ = [
    "RecordSink",
    "render_row",
    "iter_artifact_rows",
    "atomic_replace",
    "create_temp_file",
    "export_path",
    "file_checksum",
    "human_size",
    "remove_quietly",
    "file_size",
    "sync_file",
]
