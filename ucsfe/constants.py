"""Shared constants: context keys, limits, sort directions and pool defaults."""

# Context / span key names
CTX_USER_ID = "user_id"
CTX_TRACE_ID = "trace_id"
CTX_SERVICE = "service"
CTX_CLIENT_IP = "client_ip"

# Batch and version limits
MAX_BATCH_SIZE = 500
MAX_VERSION = 10_000_000
EXPECTED_SIZE = 16

# Sort direction strings
ASC = "ASC"
DESC = "DESC"

# Database connection pool defaults
MAX_OPEN_CONN = 100
MAX_IDLE_CONN = 100