"""Persistent user settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from relpick_resolver.models import ArchiveKind, LibcVariant

from .logging_setup import get_logger


CONFIG_VERSION = 1

logger = get_logger("config")


@dataclass
class MatchConfig:
    # Archive kinds in order of preference, used only to break score ties.
    archive_preference: list[str] = field(default_factory=list)
    libc_override: str | None = None


@dataclass
class DownloadConfig:
    chunk_size_kb: int = 64
    timeout_s: int = 180
    verify_checksums: bool = True
    extract_archives: bool = True


@dataclass
class NetworkConfig:
    api_base: str = "https://api.github.com"
    user_agent: str = "relpick/0.1"
    ca_bundle: str | None = None
    allow_insecure_tls: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    keep_log_files: int = 7


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    match: MatchConfig = field(default_factory=MatchConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def preference(self) -> tuple[ArchiveKind, ...]:
        return tuple(ArchiveKind(kind) for kind in self.match.archive_preference)

    @property
    def chunk_size(self) -> int:
        return self.download.chunk_size_kb * 1024


_SECTIONS = {
    "match": MatchConfig,
    "download": DownloadConfig,
    "network": NetworkConfig,
    "logging": LoggingConfig,
}


def config_path() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "relpick" / "config.json"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "relpick" / "config.json"
    base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "relpick" / "config.json"


def _merge(section: str, dataclass_type, raw: Any):
    merged = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return merged
    known = {f.name for f in fields(merged)}
    for key, value in raw.items():
        if key in known:
            setattr(merged, key, value)
        else:
            logger.debug(f"ignoring unknown setting {section}.{key}", extra={"event": "config_unknown_key"})
    return merged


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _normalize_match(cfg: AppConfig) -> None:
    valid = {kind.value for kind in ArchiveKind}
    raw = cfg.match.archive_preference if isinstance(cfg.match.archive_preference, list) else []
    seen: list[str] = []
    for kind in raw:
        kind = str(kind).lower()
        if kind in valid and kind not in seen:
            seen.append(kind)
    cfg.match.archive_preference = seen

    libcs = {variant.value for variant in LibcVariant}
    if cfg.match.libc_override is not None and str(cfg.match.libc_override).lower() not in libcs:
        cfg.match.libc_override = None
    elif cfg.match.libc_override is not None:
        cfg.match.libc_override = str(cfg.match.libc_override).lower()


def _normalize_download(cfg: AppConfig) -> None:
    cfg.download.chunk_size_kb = max(4, min(4096, _coerce_int(cfg.download.chunk_size_kb, DownloadConfig.chunk_size_kb)))
    cfg.download.timeout_s = max(5, min(3600, _coerce_int(cfg.download.timeout_s, DownloadConfig.timeout_s)))
    cfg.download.verify_checksums = bool(cfg.download.verify_checksums)
    cfg.download.extract_archives = bool(cfg.download.extract_archives)


def _normalize_logging(cfg: AppConfig) -> None:
    if str(cfg.logging.level).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        cfg.logging.level = "INFO"
    cfg.logging.level = str(cfg.logging.level).upper()
    cfg.logging.keep_log_files = max(2, _coerce_int(cfg.logging.keep_log_files, LoggingConfig.keep_log_files))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning(f"ignoring unreadable config {path}: {exc}", extra={"event": "config_unreadable"})
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    sections = {name: _merge(name, kind, raw.get(name)) for name, kind in _SECTIONS.items()}
    cfg = AppConfig(config_version=_coerce_int(raw.get("config_version"), CONFIG_VERSION), **sections)

    _normalize_match(cfg)
    _normalize_download(cfg)
    _normalize_logging(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
