"""Config file loading and saving.

The config file holds the OBS credentials and every registered macro. A missing
file and an unreadable one are reported with distinct errors, but callers are
expected to recover from both the same way: start from an empty config and ask
for credentials.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import stat
import tempfile
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import ValidationError, validators

from obsmacros.core.codec import decode_macros, encode_macros
from obsmacros.core.errors import ConfigNotFoundError, ConfigParseError, ConfigSaveError, MacroDecodeError
from obsmacros.core.registry import MacroRegistry
from obsmacros.remote.base import Credentials

LOGGER = logging.getLogger(__name__)


@dataclass
class Config:
    credentials: Credentials = field(default_factory=Credentials)
    macros: MacroRegistry = field(default_factory=MacroRegistry)


@dataclass(frozen=True)
class LoadedConfig:
    config: Config
    skipped: int = 0


@lru_cache(maxsize=1)
def _load_schema_validator() -> Any:
    schema_text = resources.files("obsmacros.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _lower_keys(obj: dict[str, Any]) -> dict[str, Any]:
    return {k.lower() if isinstance(k, str) else k: v for k, v in obj.items()}


def _parse_document(text: str, path: Path) -> dict[str, Any]:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(doc, dict):
        raise ConfigParseError(f"Config file {path} must contain an object at root")

    doc = _lower_keys(doc)
    if isinstance(doc.get("credentials"), dict):
        doc["credentials"] = _lower_keys(doc["credentials"])

    try:
        _load_schema_validator().validate(doc)
    except ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise ConfigParseError(f"Schema validation failed for {path}{where}: {exc.message}") from exc
    return doc


def _build_credentials(doc: dict[str, Any] | None) -> Credentials:
    defaults = Credentials()
    if not doc:
        return defaults
    return Credentials(
        host=doc.get("host", defaults.host),
        port=int(doc.get("port", defaults.port)),
        password=doc.get("password") or "",
    )


class ConfigStore:
    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> LoadedConfig:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigNotFoundError(f"Config file {self.path} not found") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigParseError(f"Could not read config file {self.path}: {exc}") from exc

        doc = _parse_document(text, self.path)
        try:
            decoded = decode_macros(doc.get("macros"))
        except MacroDecodeError as exc:
            raise ConfigParseError(f"Invalid macros in {self.path}: {exc}") from exc

        config = Config(
            credentials=_build_credentials(doc.get("credentials")),
            macros=MacroRegistry(decoded.macros),
        )
        LOGGER.debug("Loaded %d macros from %s", len(config.macros), self.path)
        return LoadedConfig(config=config, skipped=len(decoded.errors))

    def save(self, config: Config) -> None:
        doc = {
            "credentials": {
                "host": config.credentials.host,
                "port": config.credentials.port,
                "password": config.credentials.password,
            },
            "macros": encode_macros(config.macros.list_sorted()),
        }
        try:
            data = json.dumps(doc, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ConfigSaveError(f"Could not encode config for {self.path}: {exc}") from exc

        directory = self.path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
        except OSError as exc:
            raise ConfigSaveError(f"Could not write config file {self.path}: {exc}") from exc

        replaced = False
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            self._copy_mode(tmp_name)
            os.replace(tmp_name, self.path)
            replaced = True
        except OSError as exc:
            raise ConfigSaveError(f"Could not write config file {self.path}: {exc}") from exc
        finally:
            if not replaced:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
        LOGGER.debug("Saved %d macros to %s", len(config.macros), self.path)

    def _copy_mode(self, tmp_name: str) -> None:
        # mkstemp creates 0600; keep whatever mode the existing file had.
        try:
            mode = stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            return
        os.chmod(tmp_name, mode)
