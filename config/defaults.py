"""HitExport — All default values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via ExportConfig at runtime.
"""

# ── Paging ─────────────────────────────────────────────────────────────────────
# Hits requested per page fetch. Bounds peak memory per batch.
PAGE_SIZE: int = 5000

# Cursor value for a full export (hit ids start at 1)
START_CURSOR: int = 0

# ── Pacing ─────────────────────────────────────────────────────────────────────
# Pause between pages to give the data source some breathing space.
# 0 disables pacing (development and tests).
PACING_DELAY_SECONDS: float = 0.5

# ── Artifact layout ────────────────────────────────────────────────────────────
# Published artifact file name; one live artifact per tenant code
EXPORT_FILENAME_TEMPLATE: str = "export-{code}.csv.gz"

# Suffix for the private temporary artifact written during a run
TEMP_SUFFIX: str = ".csv.gz.tmp"

# Column header row, written once when the sink is opened
CSV_HEADER: tuple = (
    "Path",
    "Title",
    "Event",
    "Bot",
    "Session",
    "Referrer",
    "Browser",
    "Screen size",
    "Location",
    "Date",
)

# strftime format for the Date column (RFC 3339, always UTC)
DATE_FORMAT: str = "%Y-%m-%dT%H:%M:%SZ"

# gzip compression level for the artifact (zlib: 1 fastest, 9 smallest)
GZIP_COMPRESSION_LEVEL: int = 9

# ── Integrity ──────────────────────────────────────────────────────────────────
# Read size when hashing a published artifact
HASH_CHUNK_SIZE: int = 65536

# ── HTTP hit source ────────────────────────────────────────────────────────────
# Maximum retry attempts on transient HTTP failures (timeouts, 429, 5xx)
HTTP_MAX_RETRIES: int = 3

# Base seconds for exponential backoff
HTTP_BACKOFF_BASE: float = 2.0

# HTTP request timeout for page fetches (seconds)
HTTP_REQUEST_TIMEOUT: int = 30

# ── SQLite hit source ──────────────────────────────────────────────────────────
SQLITE_HITS_TABLE: str = "hits"

# ── Notification ───────────────────────────────────────────────────────────────
# Webhook POST timeout (seconds)
NOTIFY_TIMEOUT: int = 10

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"
