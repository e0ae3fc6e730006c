"""
Config system - typed session store configuration.

Merge precedence (later overrides earlier):
1. Dataclass defaults
2. ``.env`` file (TESSERA_* keys)
3. Environment variables (TESSERA_* keys)
4. Manual overrides
"""

from __future__ import annotations

import json
import os
import string
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values

from .faults.core import ConfigFault


# camelCase option names accepted alongside the field names
ALIASES = {
    "storeFamily": "store_family",
    "ticketFamily": "ticket_family",
    "tokenTtl": "token_ttl",
    "tokenLength": "token_length",
    "tokenAlphabet": "token_alphabet",
    "maxTicketAttempts": "max_ticket_attempts",
    "headerName": "header_name",
    "redisUrl": "redis_url",
    "keyPrefix": "key_prefix",
}

BACKENDS = ("memory", "redis")


@dataclass
class SessionConfig:
    """
    Ticket/session store configuration.
    """
    store_family: str = "session_store"     # Session attribute family
    ticket_family: str = "session_ticket"   # Ticket and token family
    expire: int = 60 * 60 * 24 * 30         # Ticket TTL in seconds (30 days)

    # Token relay
    token_ttl: int = 300
    token_length: int = 8
    token_alphabet: str = string.ascii_lowercase

    # Ticket collision retries before giving up
    max_ticket_attempts: int = 5

    # ASGI adapter
    header_name: str = "X-Session-Ticket"

    # Backend selection ("memory", "redis")
    backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "tessera:"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for name in ("expire", "token_ttl", "token_length", "max_ticket_attempts"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigFault(f"'{name}' must be a positive integer, got {value!r}")
        for name in ("store_family", "ticket_family"):
            if not getattr(self, name):
                raise ConfigFault(f"'{name}' must not be empty")
        if self.store_family == self.ticket_family:
            raise ConfigFault("'store_family' and 'ticket_family' must differ")
        if len(set(self.token_alphabet)) < 2:
            raise ConfigFault("'token_alphabet' needs at least two distinct characters")
        if self.backend not in BACKENDS:
            raise ConfigFault(f"unknown backend {self.backend!r} (expected one of {', '.join(BACKENDS)})")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Fields read verbatim from the environment ("0001" stays "0001")
STRING_FIELDS = frozenset(f.name for f in fields(SessionConfig) if f.type in (str, "str"))


def build_session_config(config_dict: Optional[Mapping[str, Any]] = None) -> SessionConfig:
    """
    Build SessionConfig from a dictionary.

    Accepts snake_case field names and the camelCase aliases
    (``storeFamily``, ``ticketFamily``, ...). Unknown keys are ignored.
    """
    known = {f.name for f in fields(SessionConfig)}
    kwargs: Dict[str, Any] = {}
    for key, value in (config_dict or {}).items():
        name = ALIASES.get(key, key)
        if name in known and value is not None:
            kwargs[name] = value
    return SessionConfig(**kwargs)


def _parse_value(value: str) -> Any:
    """Parse string value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    if value.startswith(("{", "[")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _collect(source: Mapping[str, Optional[str]], prefix: str) -> Dict[str, Any]:
    """
    Strip ``prefix`` from matching keys (TESSERA_STORE_FAMILY -> store_family).

    String fields keep the raw value; everything else goes through
    :func:`_parse_value`.
    """
    collected = {}
    for key, value in source.items():
        if value is None or not key.startswith(prefix):
            continue
        name = key[len(prefix):].lower()
        collected[name] = value if name in STRING_FIELDS else _parse_value(value)
    return collected


def load_session_config(
    env_file: Optional[str] = None,
    env_prefix: str = "TESSERA_",
    overrides: Optional[Mapping[str, Any]] = None,
) -> SessionConfig:
    """
    Load configuration from .env file, environment and overrides.

    Args:
        env_file: Path to a .env file (missing files are ignored)
        env_prefix: Prefix for environment variables
        overrides: Manual overrides (highest precedence)

    Returns:
        Validated SessionConfig

    Raises:
        ConfigFault: A value is missing or invalid
    """
    data: Dict[str, Any] = {}
    if env_file and os.path.exists(env_file):
        data.update(_collect(dotenv_values(env_file), env_prefix))
    data.update(_collect(os.environ, env_prefix))
    if overrides:
        data.update(overrides)

    return build_session_config(data)


def create_keyspace(config: SessionConfig):
    """Build the keyspace selected by ``config.backend``."""
    if config.backend == "redis":
        from .store.redis import RedisKeyspace
        return RedisKeyspace(url=config.redis_url, key_prefix=config.key_prefix)

    from .store.memory import MemoryKeyspace
    return MemoryKeyspace()
