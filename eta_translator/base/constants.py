"""
Constants and configuration for the eta-translator service.

All values are loaded from environment variables, allowing the deployment
environment to control behaviour without code changes.  The module groups the
settings by purpose (paths, server, providers, quota, CORS, Redis) and
validates the configuration at import time via the ``_StartAppVerificator``
class.
"""

import os

from eta_translator.base.constants_base import (
    _DontChangeMe,
    bool_env_value,
    list_env_value,
    DEFAULT_SOURCE_LANG as _DEFAULT_SOURCE_LANG,
    DEFAULT_TARGET_LANG as _DEFAULT_TARGET_LANG,
)

# Ordered providers config file
PROVIDERS_CONFIG_FILE = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}PROVIDERS_CONFIG",
    "resources/configs/providers-config.json",
).strip()

# Default credential used by the built-in Gemini providers
GEMINI_API_KEY = (
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}GEMINI_API_KEY")
    or os.environ.get("GEMINI_API_KEY", "")
).strip()

# Default name of a logging file
REST_API_LOG_FILE_NAME = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}LOG_FILENAME", "eta-translator.log"
).strip()

# Default logging level
REST_API_LOG_LEVEL = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}LOG_LEVEL", "INFO"
).strip()

# Default prefix for each endpoint
DEFAULT_API_PREFIX = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}EP_PREFIX", "/api"
).strip()

# =============================================================================
# SERVER CONFIGURATION
# =============================================================================
# Type of server, default is flask {flask, gunicorn, waitress}
SERVER_TYPE = (
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}SERVER_TYPE", "flask")
    .lower()
    .strip()
)

# Server port, default is 8080
SERVER_PORT = int(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}SERVER_PORT", "8080").strip()
)

# Number of workers (if server supports multiple workers), default: 2
SERVER_WORKERS_COUNT = int(
    os.environ.get(
        f"{_DontChangeMe.MAIN_ENV_PREFIX}SERVER_WORKERS_COUNT", "2"
    ).strip()
)

# Number of threads (if the server supports multithreading), default: 8
SERVER_THREADS_COUNT = int(
    os.environ.get(
        f"{_DontChangeMe.MAIN_ENV_PREFIX}SERVER_THREADS_COUNT", "8"
    ).strip()
)

# In some servers like gunicorn is able to set worker class (f.e. gevent)
SERVER_WORKERS_CLASS = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}SERVER_WORKER_CLASS", ""
).strip()

if not len(SERVER_WORKERS_CLASS):
    SERVER_WORKERS_CLASS = None

# Server host, default is all interfaces
SERVER_HOST = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}SERVER_HOST", "0.0.0.0"
).strip()

# Gunicorn worker timeout
ETA_TRANSLATOR_API_TIMEOUT = int(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}TIMEOUT", 0)
)

# Run server in debug mode
RUN_IN_DEBUG_MODE = bool_env_value(f"{_DontChangeMe.MAIN_ENV_PREFIX}IN_DEBUG")
if RUN_IN_DEBUG_MODE:
    REST_API_LOG_LEVEL = "DEBUG"

# =============================================================================
# Use Prometheus to collect metrics
USE_PROMETHEUS = bool_env_value(f"{_DontChangeMe.MAIN_ENV_PREFIX}USE_PROMETHEUS")

# =============================================================================
# PROVIDERS
# =============================================================================
# Timeout (seconds) of a single provider attempt
PROVIDER_TIMEOUT = float(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}PROVIDER_TIMEOUT", 30)
)

# Upper bound (seconds) for the whole fallback loop
OVERALL_TIMEOUT = float(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}OVERALL_TIMEOUT", 90)
)

# =============================================================================
# REQUEST VALIDATION
# =============================================================================
MAX_TEXT_LENGTH = int(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}MAX_TEXT_LENGTH", 2000)
)

# Largest accepted request body in bytes, larger bodies are refused unread
MAX_REQUEST_BYTES = int(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}MAX_REQUEST_BYTES", 65536)
)

DEFAULT_SOURCE_LANG = _DEFAULT_SOURCE_LANG
DEFAULT_TARGET_LANG = _DEFAULT_TARGET_LANG

# Headers checked (in order) for the client address.  Only list headers
# that the fronting proxy overwrites; a client can set any other one itself.
CLIENT_IP_HEADERS = list_env_value(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}CLIENT_IP_HEADERS",
    "CF-Connecting-IP",
)

# =============================================================================
# QUOTA
# =============================================================================
# Maximum admitted requests per client in one minute bucket
RATE_LIMIT_PER_MINUTE = int(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}RATE_LIMIT_PER_MINUTE", 25)
)

# Extra lifetime of a rate limit bucket after the minute has passed
RATE_LIMIT_GRACE_SECONDS = int(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}RATE_LIMIT_GRACE_SECONDS", 10)
)

# Lifetime of the daily usage counters
USAGE_COUNTER_TTL = int(
    os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}USAGE_COUNTER_TTL", 90000)
)

# =============================================================================
# CORS
# =============================================================================
# Origins (fnmatch patterns) allowed besides the service's own origin
ALLOWED_ORIGINS = list_env_value(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}ALLOWED_ORIGINS",
    "https://translator-eta.pages.dev,https://*.translator-eta.pages.dev",
)

# =============================================================================
# REDIS CONFIGURATION
# =============================================================================
# Redis host, when empty an in-process quota store is used
REDIS_HOST = os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}REDIS_HOST", "").strip()
# Redis port
REDIS_PORT = int(os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}REDIS_PORT", 6379))
# Redis database number
REDIS_DB = int(os.environ.get(f"{_DontChangeMe.MAIN_ENV_PREFIX}REDIS_DB", 0))
# Redis password
REDIS_PASSWORD = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}REDIS_PASSWORD", ""
).strip()
if not len(REDIS_PASSWORD):
    REDIS_PASSWORD = None


# =============================================================================
# STARTUP VALIDATION
# =============================================================================


class _StartAppVerificator:
    """
    Validate configuration at import time.

    The ``dont_run_if_something_is_wrong`` method raises informative
    exceptions when environment variables contain invalid values.
    """

    @staticmethod
    def __verify_server_type():
        if SERVER_TYPE not in ("flask", "gunicorn", "waitress"):
            raise Exception(
                f"{SERVER_TYPE} is not a valid server type.\n"
                f"Available types: flask, gunicorn, waitress\n\n"
            )

    @staticmethod
    def __verify_timeouts():
        if PROVIDER_TIMEOUT <= 0:
            raise Exception(
                f"{_DontChangeMe.MAIN_ENV_PREFIX}PROVIDER_TIMEOUT must be positive"
            )
        if OVERALL_TIMEOUT <= 0:
            raise Exception(
                f"{_DontChangeMe.MAIN_ENV_PREFIX}OVERALL_TIMEOUT must be positive"
            )

    @staticmethod
    def __verify_limits():
        if MAX_TEXT_LENGTH <= 0:
            raise Exception(
                f"{_DontChangeMe.MAIN_ENV_PREFIX}MAX_TEXT_LENGTH must be positive"
            )
        if MAX_REQUEST_BYTES <= 0:
            raise Exception(
                f"{_DontChangeMe.MAIN_ENV_PREFIX}MAX_REQUEST_BYTES must be positive"
            )
        if RATE_LIMIT_PER_MINUTE <= 0:
            raise Exception(
                f"{_DontChangeMe.MAIN_ENV_PREFIX}RATE_LIMIT_PER_MINUTE "
                f"must be positive"
            )

    def dont_run_if_something_is_wrong(self):
        self.__verify_server_type()
        self.__verify_timeouts()
        self.__verify_limits()


_StartAppVerificator().dont_run_if_something_is_wrong()
