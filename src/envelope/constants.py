"""HTTP constants shared by the envelope, transport and pipeline."""

# Status classes; 1xx and 3xx fall in none of them and are not failures
SUCCESS_STATUSES = range(200, 300)
CLIENT_ERROR_STATUSES = range(400, 500)
SERVER_ERROR_STATUSES = range(500, 600)

DEFAULT_PROTOCOL_VERSION = "1.1"

# Round-trips arbitrary bytes through the string slot of a cache tuple
BODY_STRING_ENCODING = "utf-8"
BODY_STRING_ERRORS = "surrogateescape"
