"""Shared constants for uploader modules."""

# =============================================================================
# Multipart Form
# =============================================================================

# Content type declared for every uploaded chunk
CHUNK_CONTENT_TYPE = "video/webm"

# Form field carrying the chunk bytes
CHUNK_FORM_NAME = "webm_file"

# Sent with every request to disable 100-continue handshakes
EXPECT_HEADER = "Expect"

# =============================================================================
# Transport Defaults
# =============================================================================

# HTTP timeout for a single chunk POST
DEFAULT_TIMEOUT = 60

# Request body is streamed in slices of this size; the progress hook runs
# once per slice
UPLOAD_SLICE_SIZE = 16 * 1024

# =============================================================================
# File Session Defaults
# =============================================================================

# Bytes read from disk per submitted chunk
DEFAULT_CHUNK_SIZE = 1024 * 1024

# Seconds between readiness polls while a chunk is in flight
DEFAULT_POLL_INTERVAL = 0.05

# Seconds a followed file may stay unchanged before the session ends
DEFAULT_IDLE_TIMEOUT = 10.0

# Seconds to wait for one chunk before giving up on a session
DEFAULT_CHUNK_WAIT_TIMEOUT = 300.0
