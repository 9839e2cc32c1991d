"""KbSettings: the merged configuration for one kbctl invocation.

Later sources lose to earlier ones:

* keyword arguments from the CLI flags,
* ``KBCTL_*`` environment variables (``__`` separates nested keys, as in
  ``KBCTL_BUILD__MAX_WORKERS=1``),
* the ``kbctl.toml`` found by :func:`~kbctl.config.discovery.locate`,
* defaults on the section models.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from kbctl.config.discovery import locate, read_toml
from kbctl.config.models import (
    BuildConfig,
    CorpusConfig,
    DatabaseConfig,
    MetadataConfig,
    QueryConfig,
)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source over already-parsed ``kbctl.toml`` data."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# BaseSettings.__init__ only takes field values, so the parsed TOML for the
# instance under construction is handed to settings_customise_sources here.
_tls = threading.local()


def _describe(exc: ValidationError, toml_path: Path | None) -> str:
    where = f" in {toml_path}" if toml_path else ""
    lines = [f"Invalid configuration{where}:"]
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        lines.append(f"  {location}: {error['msg']}")
    return "\n".join(lines)


class KbSettings(BaseSettings):
    """Settings for one kbctl invocation.

    Unknown TOML tables or keys are errors, not silently ignored.

    Attributes:
        root: Knowledge-base root (``--root``, else where discovery stopped,
            else CWD). The state directory and the content directory are
            resolved against it.
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "KBCTL_",
        "env_nested_delimiter": "__",
        "extra": "forbid",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    corpus: CorpusConfig = Field(default_factory=CorpusConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """CLI flags, then environment, then the TOML file."""
        toml_data: dict[str, Any] = getattr(_tls, "toml_data", None) or {}
        return (init_settings, env_settings, TomlSettingsSource(settings_cls, toml_data))

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> KbSettings:
        """Construct settings from a CLI invocation.

        Raises:
            click.ClickException: An explicit *config_path* does not exist,
                or the config file is not valid TOML or not a valid config.
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
            found_root = toml_path.resolve().parent
        else:
            location = locate(root)
            toml_path, found_root = location.config_path, location.root

        _tls.toml_data = read_toml(toml_path) if toml_path else {}
        try:
            return cls(
                root=root or found_root or Path.cwd(),
                config_path=toml_path,
                **cli_flags,
            )
        except ValidationError as exc:
            raise click.ClickException(_describe(exc, toml_path)) from exc
        finally:
            _tls.toml_data = None

    @property
    def content_root(self) -> Path:
        return (self.root / self.corpus.content_dir).resolve()
