"""Project-wide constants (bridge defaults, timeouts, stream sizes)."""

DEFAULT_BRIDGE_URL: str = "https://api.storj.io"
DEFAULT_SHARD_PROTOCOL: str = "http"

BRIDGE_TIMEOUT_SECONDS: float = 30.0
BRIDGE_MAX_RETRIES: int = 3
BRIDGE_RETRY_BACKOFF_MULTIPLIER: float = 2.0

# Pointers requested from the bridge per page
POINTER_PAGE_SIZE: int = 6

FARMER_TIMEOUT_SECONDS: float = 60.0
STREAM_PIECE_SIZE_BYTES: int = 64 * 1024

BUCKET_ID_LENGTH: int = 24

# Sliding window used for download speed estimates
SPEED_WINDOW_SECONDS: float = 5.0

STORE_KIND_MEMORY: str = "memory"
STORE_KIND_FS: str = "fs"
DEFAULT_STORE_PATH: str = "/tmp/bridgefetch/chunks"
