import os
import logging
from typing import Any, Dict

logger = logging.getLogger("clientcheck.settings")

DEFAULT_TIMEOUT = 10
DEFAULT_HEALTH_PATH = "/"
DEFAULT_RESOURCE_PATH = "/products"
DEFAULT_MAX_RESPONSE_MS = 2000
DEFAULT_API_KEY_HEADER = "X-API-Key"
DEFAULT_MAX_RETRIES = 2
USER_AGENT = "clientcheck/1.0"

AUTH_TYPES = ("api_key", "bearer", "basic", "none")


def get_settings() -> Dict[str, Any]:
    """Tool-wide defaults, with environment overrides applied."""
    timeout = DEFAULT_TIMEOUT
    env_timeout = os.environ.get("CLIENTCHECK_TIMEOUT")
    if env_timeout:
        try:
            timeout = float(env_timeout)
        except ValueError:
            logger.warning("Ignoring non-numeric CLIENTCHECK_TIMEOUT=%r", env_timeout)

    return {
        "timeout": timeout,
        "max_retries": DEFAULT_MAX_RETRIES,
        "user_agent": USER_AGENT,
        "results_dir": os.environ.get("CLIENTCHECK_RESULTS_DIR") or None,
    }
