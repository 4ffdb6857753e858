"""Constants for recordfs."""

# Match-all pattern used by delete_all when none is given
DEFAULT_SEARCH_PATTERN = "*"

# Record format used by the CLI when --format is omitted (little-endian int64)
DEFAULT_RECORD_FORMAT = "<q"

# Text encoding for read_all_chars; "-sig" strips a UTF-8 byte-order mark
DEFAULT_ENCODING = "utf-8-sig"

# Default log level for the recordfs logger hierarchy
DEFAULT_LOG_LEVEL = "WARNING"

# Environment variable prefix for settings
ENV_PREFIX = "RECORDFS_"

# Per-user config directory name
CONFIG_DIR_NAME = ".recordfs"

# Prompt shown by press_any_key_to_continue
PRESS_ANY_KEY_MESSAGE = "Press any key to continue."

# Quote character stripped from interactively entered arguments
ARGUMENT_QUOTE = '"'
