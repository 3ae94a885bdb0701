import logging
import os
from collections.abc import Mapping

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Operational configuration is incomplete."""


def validate_ops_rules(rules: Rules, environ: Mapping[str, str] | None = None) -> None:
    """
    Validate operational requirements before startup.

    Raises ConfigError naming every required environment variable that is
    not set.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in rules.ops.required_env if name not in env]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("Configuration validated")
