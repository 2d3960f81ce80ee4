import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Operational configuration is not usable."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Creates the data directory when required and checks the environment
    variables named in `ops.required_env`.
    """
    ops = rules.ops

    # 1. Data dir holds roster.db
    if ops.data_dir_required:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Data directory {data_dir} is not usable: {e}") from e
        if not os.access(data_dir, os.W_OK):
            raise ConfigError(f"Data directory {data_dir} is not writable")

    # 2. Check Required Env
    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    # 3. Without a key direct sends fail; issuance falls back to the dev logger, or nothing
    if not os.environ.get("ROSTER_SENDGRID_API_KEY"):
        if rules.email.dev_fallback:
            logger.warning(
                "ROSTER_SENDGRID_API_KEY not set; invite emails will only be logged, "
                "direct sends fail"
            )
        else:
            logger.warning("ROSTER_SENDGRID_API_KEY not set; invite emails are disabled")

    logger.info("Configuration validated")
