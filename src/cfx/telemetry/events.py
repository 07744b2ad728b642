"""Semantic event constants for structured logging.

All log events should use these constants rather than magic strings to ensure
consistency and enable reliable querying and analysis.
"""

# Environment resolution events
ENVIRONMENT_CONTEXT_BUILT = "environment_context_built"
ENV_FILES_LOADED = "env_files_loaded"

# Configuration loading events
CONFIG_FILE_MISSING = "config_file_missing"
CONFIG_LOADED = "config_loaded"

# Bootstrap events
BOOTSTRAP_COMPLETED = "bootstrap_completed"
BOOTSTRAP_FAILED = "bootstrap_failed"
