"""Environment-driven configuration loader."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .config_loader import ConfigSpec, KeySpec, load_config_spec
from .models import ConfigurationError
from .zones import ReverseZoneSet, ZoneSet

DEFAULT_CONFIG_PATH = "/etc/openvpn/vpn-ddns.yaml"
DEFAULT_KEY_ALGORITHM = "hmac-sha256"


@dataclass(frozen=True)
class TsigKey:
    """Holds TSIG credentials passed to the updater."""

    name: str
    algorithm: str
    secret: str

    def directive(self) -> str:
        """Return the updater 'key' line."""
        return f"key {self.algorithm}:{self.name} {self.secret}"


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration values."""

    name_server: str
    private_zones: ZoneSet
    public_zones: ZoneSet
    reverse_zones: ReverseZoneSet
    tsig: TsigKey | None = None
    name_server_port: int | None = None
    updater_path: str = "nsupdate"
    updater_args: tuple[str, ...] = ()
    updater_timeout: float = 10.0
    ttl: int = 3600
    batch_all_zones: bool = False
    server_name: str | None = None
    log_level: str = "INFO"


KEYFILE_PATTERN = re.compile(
    r'key\s+"(?P<name>[^"]+)"\s*\{'
    r"(?P<body>.*?)"
    r"\}",
    re.IGNORECASE | re.DOTALL,
)
ALGORITHM_PATTERN = re.compile(
    r"algorithm\s+(?P<algorithm>[\w-]+)\s*;",
    re.IGNORECASE,
)
SECRET_PATTERN = re.compile(
    r'secret\s+"(?P<secret>[^"]+)"\s*;',
    re.IGNORECASE,
)


def _parse_keyfile(text: str, overrides: KeySpec | None) -> TsigKey:
    """Parse a BIND key statement, letting inline values take precedence."""
    match = KEYFILE_PATTERN.search(text)
    if not match:
        raise ConfigurationError("TSIG key file does not match expected format.")
    body = match.group("body")
    algo_match = ALGORITHM_PATTERN.search(body)
    secret_match = SECRET_PATTERN.search(body)
    overrides = overrides or KeySpec()
    name = overrides.name or match.group("name")
    algorithm = overrides.algorithm or (algo_match.group("algorithm") if algo_match else None)
    secret = overrides.secret or (secret_match.group("secret") if secret_match else None)

    if not all([name, algorithm, secret]):
        raise ConfigurationError("TSIG key file missing name, algorithm, or secret.")
    return TsigKey(name=name, algorithm=algorithm, secret=secret)


def _resolve_tsig(spec: ConfigSpec, base_dir: Path) -> TsigKey | None:
    """Build the TSIG key from key_file and/or the inline key mapping."""
    if spec.key_file:
        key_path = Path(spec.key_file)
        if not key_path.is_absolute():
            key_path = base_dir / key_path
        try:
            text = key_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read TSIG key file {key_path}: {exc}") from exc
        return _parse_keyfile(text, spec.key)
    if spec.key is None:
        return None
    if not (spec.key.name and spec.key.secret):
        raise ConfigurationError("Inline TSIG key requires both 'name' and 'secret'.")
    return TsigKey(
        name=spec.key.name,
        algorithm=spec.key.algorithm or DEFAULT_KEY_ALGORITHM,
        secret=spec.key.secret,
    )


def build_config(spec: ConfigSpec, base_dir: Path | None = None) -> AppConfig:
    """Turn a validated document into the immutable runtime configuration."""
    base_dir = base_dir or Path.cwd()
    return AppConfig(
        name_server=spec.name_server.strip(),
        name_server_port=spec.name_server_port,
        tsig=_resolve_tsig(spec, base_dir),
        private_zones=ZoneSet.from_strings(spec.effective_private_zones(), spec.search_domain),
        public_zones=ZoneSet.from_strings(spec.public_zones, spec.public_search_domain),
        reverse_zones=ReverseZoneSet.from_strings(spec.reverse_zones),
        updater_path=os.getenv("NSUPDATE_BIN") or spec.updater_path,
        updater_args=tuple(spec.updater_args),
        updater_timeout=spec.updater_timeout,
        ttl=spec.ttl,
        batch_all_zones=spec.batch_all_zones,
        server_name=spec.server_name,
        log_level=(os.getenv("LOG_LEVEL") or spec.log_level).upper(),
    )


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from the file named by argument or environment (and .env)."""
    load_dotenv()
    config_path = Path(path or os.getenv("VPN_DDNS_CONFIG", DEFAULT_CONFIG_PATH)).expanduser()
    spec = load_config_spec(config_path)
    return build_config(spec, base_dir=config_path.resolve().parent)
