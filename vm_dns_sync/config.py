import os

import structlog

from .errors import ConfigError

log = structlog.get_logger()

ENV_CLOUDFLARE_INI = "CLOUDFLARE_INI"
ENV_INVENTORY_TIMEOUT = "INVENTORY_TIMEOUT_SECONDS"
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_DRY_RUN = "DRY_RUN"

DEFAULT_INVENTORY_TIMEOUT = 60
USER_AGENT = "cloud-vm-dns-sync/0"


def _parse_bool(value):
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_app_config_from_env():
    """
    Loads all application configuration from environment variables.

    Returns:
        dict: A dictionary containing the configuration parameters.

    Raises:
        ConfigError: If a mandatory variable is missing.
    """
    config = {}
    mandatory_vars = {
        ENV_CLOUDFLARE_INI: "Cloudflare credential file",
    }
    missing_vars_messages = []

    for var_name, desc in mandatory_vars.items():
        value = os.getenv(var_name)
        if not value:
            missing_vars_messages.append(f"{desc} ({var_name})")
        config[var_name.lower()] = value

    if missing_vars_messages:
        log.debug("Missing mandatory environment variables", missing_vars=missing_vars_messages)
        raise ConfigError(f"Need {', '.join(missing_vars_messages)} environment variable.")

    raw_timeout = os.getenv(ENV_INVENTORY_TIMEOUT)
    config["inventory_timeout_seconds"] = DEFAULT_INVENTORY_TIMEOUT
    if raw_timeout:
        try:
            timeout = int(raw_timeout)
            if timeout <= 0:
                raise ValueError(raw_timeout)
            config["inventory_timeout_seconds"] = timeout
        except ValueError:
            log.warning(
                "Invalid value for INVENTORY_TIMEOUT_SECONDS, using default",
                invalid_value=raw_timeout,
                default_value=DEFAULT_INVENTORY_TIMEOUT,
            )

    config["dry_run"] = _parse_bool(os.getenv(ENV_DRY_RUN, ""))

    log.debug("Loaded configuration from environment variables.")
    return config
