"""
Credential configuration for the Pocket API client.

Values come from the environment (optionally a .env file):
POCKET_CONSUMER_KEY, POCKET_REDIRECT_URI and POCKET_ACCESS_TOKEN.
"""

import os
import logging
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv, set_key

from errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_URI = "http://localhost:8080/callback"
DEFAULT_ENV_FILE = ".env"


@dataclass(frozen=True)
class Credentials:
    consumer_key: str
    redirect_uri: str
    access_token: Optional[str] = None

    def with_access_token(self, access_token: Optional[str]) -> "Credentials":
        return replace(self, access_token=access_token or None)

    def __repr__(self) -> str:
        token = "set" if self.access_token else "unset"
        return (
            f"Credentials(consumer_key='{self.consumer_key}', "
            f"redirect_uri='{self.redirect_uri}', access_token=<{token}>)"
        )


def _getenv(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def load_credentials(env_file: Optional[str] = None) -> Credentials:
    """
    Load credentials from the environment.

    Args:
        env_file: Optional path to a .env file; defaults to dotenv's lookup

    Returns:
        Credentials with the access token set if one is configured

    Raises:
        ConfigurationError: If POCKET_CONSUMER_KEY is missing
    """
    load_dotenv(env_file)

    consumer_key = _getenv("POCKET_CONSUMER_KEY")
    if not consumer_key:
        raise ConfigurationError("POCKET_CONSUMER_KEY environment variable not set")

    redirect_uri = _getenv("POCKET_REDIRECT_URI") or DEFAULT_REDIRECT_URI
    access_token = _getenv("POCKET_ACCESS_TOKEN")

    logger.debug(
        f"Loaded credentials (redirect_uri: {redirect_uri}, "
        f"access_token: {'set' if access_token else 'unset'})"
    )
    return Credentials(
        consumer_key=consumer_key,
        redirect_uri=redirect_uri,
        access_token=access_token,
    )


def save_access_token(access_token: str, env_file: str = DEFAULT_ENV_FILE) -> None:
    """Persist an access token to a .env file so later runs pick it up."""
    if not os.path.exists(env_file):
        open(env_file, "a", encoding="utf-8").close()
    set_key(env_file, "POCKET_ACCESS_TOKEN", access_token)
    os.environ["POCKET_ACCESS_TOKEN"] = access_token
    logger.info(f"Saved access token to {env_file}")
