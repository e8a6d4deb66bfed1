"""
Cloudflare credentials, read from a certbot-style ini file.

The file holds one ``key = value`` pair per line, no comments and no quoting.
Two layouts are accepted:

    dns_cloudflare_api_token = <scoped API token>

or the legacy global key:

    dns_cloudflare_email = admin@example.com
    dns_cloudflare_api_key = <global API key>
"""

from abc import ABC, abstractmethod
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, SecretStr

from .errors import ConfigError

log = structlog.get_logger()

KEY_API_TOKEN = "dns_cloudflare_api_token"
KEY_EMAIL = "dns_cloudflare_email"
KEY_API_KEY = "dns_cloudflare_api_key"
KNOWN_KEYS = (KEY_API_TOKEN, KEY_EMAIL, KEY_API_KEY)

SEPARATOR = " = "


class CloudflareCredential(BaseModel, ABC):
    model_config = ConfigDict(frozen=True)

    @abstractmethod
    def auth_headers(self) -> dict:
        ...


class ApiTokenCredential(CloudflareCredential):
    api_token: SecretStr

    def auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_token.get_secret_value()}"}


class GlobalKeyCredential(CloudflareCredential):
    email: str
    api_key: SecretStr

    def auth_headers(self) -> dict:
        return {"X-Auth-Email": self.email, "X-Auth-Key": self.api_key.get_secret_value()}


def parse_credentials(text: str) -> CloudflareCredential:
    """
    Parses the contents of a credential file.

    Args:
        text (str): The raw file contents.

    Returns:
        CloudflareCredential: The token or email/key variant, picked by which keys are present.

    Raises:
        ConfigError: On a malformed line, an unknown or duplicated key, or an
                     incomplete/ambiguous set of keys.
    """
    values = {}
    for lineno, line in enumerate(text.split("\n"), start=1):
        if not line.strip():
            continue
        parts = line.split(SEPARATOR, 1)
        if len(parts) != 2:
            raise ConfigError(f"Invalid credential file: line {lineno} is not a 'key = value' pair")
        key, value = parts[0].strip(), parts[1].strip()
        if key not in KNOWN_KEYS:
            raise ConfigError(f"Invalid credential file: unknown key {key!r} on line {lineno}")
        if not value:
            raise ConfigError(f"Invalid credential file: empty value for {key!r}")
        if key in values:
            raise ConfigError(f"Invalid credential file: duplicate key {key!r}")
        values[key] = value

    has_token = KEY_API_TOKEN in values
    has_global_key = KEY_EMAIL in values or KEY_API_KEY in values

    if has_token and has_global_key:
        raise ConfigError(
            f"Invalid credential file: use either {KEY_API_TOKEN} or {KEY_EMAIL}/{KEY_API_KEY}, not both"
        )
    if has_token:
        return ApiTokenCredential(api_token=values[KEY_API_TOKEN])
    if has_global_key:
        missing = [k for k in (KEY_EMAIL, KEY_API_KEY) if k not in values]
        if missing:
            raise ConfigError(f"Invalid credential file: missing {', '.join(missing)}")
        return GlobalKeyCredential(email=values[KEY_EMAIL], api_key=values[KEY_API_KEY])
    raise ConfigError(f"Invalid credential file: expected {KEY_API_TOKEN} or {KEY_EMAIL}/{KEY_API_KEY}")


def load_credentials(path) -> CloudflareCredential:
    try:
        text = Path(path).read_text()
    except OSError as e:
        raise ConfigError(f"Unable to read credential file {path}: {e}") from e
    credential = parse_credentials(text)
    log.debug("Loaded Cloudflare credentials", path=str(path), kind=type(credential).__name__)
    return credential
