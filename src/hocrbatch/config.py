"""
Configuration for the hOCR batch reader.

Two kinds of configuration feed a run:

- ReaderSettings: process-level, immutable settings handed to the reader at
  construction (local folder, worker count, platform command templates).
- HocrProperties: per-batch plugin properties resolved through a
  PropertyService at the start of every run.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Protocol

from pydantic import BaseModel, ConfigDict, Field

from hocrbatch.batch.loaders import load_json
from hocrbatch.errors import MissingPropertyError

PROPERTY_SCOPE = "TESSERACT_HOCR"
DEFAULT_LOCK_FOLDER_NAME = "thread-pool-lock"
SWITCH_ON = "ON"
COMMAND_DELIMITER = ";"
EXTENSION_DELIMITER = ";"

DEFAULT_UNIX_COMMANDS = (
    'convert "{source}" "{source}.png";'
    'tesseract "{source}.png" "{target_base}" -l {language} hocr'
)
DEFAULT_WINDOWS_COMMANDS = (
    'convert.exe "{source}" "{source}.png";'
    'tesseract.exe "{source}.png" "{target_base}" -l {language} hocr'
)


class TesseractProperty(str, Enum):
    """Plugin property keys read for every run."""

    SWITCH = "tesseract.switch"
    VALID_EXTENSIONS = "tesseract.valid_extensions"
    LANGUAGE = "tesseract.language"
    VERSION = "tesseract.version"
    COLOR_SWITCH = "tesseract.color_switch"


class PropertyService(Protocol):
    """Key/value lookup of plugin properties scoped to a batch instance."""

    def get_property(self, batch_instance_id: str, plugin_name: str, key: str) -> str | None:
        ...


class MappingPropertyService:
    """
    In-memory property service.

    Properties are held as {plugin_name: {key: value}}. An optional
    per-batch override table {batch_instance_id: {plugin_name: {key: value}}}
    takes precedence.
    """

    def __init__(
        self,
        properties: Mapping[str, Mapping[str, str]],
        overrides: Mapping[str, Mapping[str, Mapping[str, str]]] | None = None,
    ) -> None:
        self._properties = {scope: dict(values) for scope, values in properties.items()}
        self._overrides = {
            batch_id: {scope: dict(values) for scope, values in scopes.items()}
            for batch_id, scopes in (overrides or {}).items()
        }

    def get_property(self, batch_instance_id: str, plugin_name: str, key: str) -> str | None:
        batch_scopes = self._overrides.get(batch_instance_id, {})
        if key in batch_scopes.get(plugin_name, {}):
            return batch_scopes[plugin_name][key]
        return self._properties.get(plugin_name, {}).get(key)


def load_properties(path_or_url: str | Path) -> MappingPropertyService:
    """
    Build a property service from a JSON document.

    Expected shape:
        {"properties": {"TESSERACT_HOCR": {"tesseract.switch": "ON", ...}},
         "overrides": {"BI1": {"TESSERACT_HOCR": {...}}}}

    A document without a "properties" key is treated as the properties
    table itself.
    """
    data = load_json(path_or_url)
    if "properties" in data:
        return MappingPropertyService(data["properties"], data.get("overrides"))
    return MappingPropertyService(data)


def parse_command_templates(raw: str | None) -> tuple[str, ...]:
    """
    Split a ';'-delimited command string into templates.

    Empty and all-whitespace segments are dropped; order is preserved.

    Example:
        >>> parse_command_templates("cmdA;;cmdB;")
        ('cmdA', 'cmdB')
    """
    if not raw:
        return ()
    return tuple(seg.strip() for seg in raw.split(COMMAND_DELIMITER) if seg.strip())


def is_windows() -> bool:
    return os.name == "nt"


class CommandTemplates(BaseModel):
    """
    Platform-specific OCR command strings.

    Each string holds one or more command templates separated by ';'. The
    templates of one task run sequentially in that order.
    """

    model_config = ConfigDict(frozen=True)

    windows: str = DEFAULT_WINDOWS_COMMANDS
    unix: str = DEFAULT_UNIX_COMMANDS

    def for_platform(self, windows: bool) -> tuple[str, ...]:
        return parse_command_templates(self.windows if windows else self.unix)


class ReaderSettings(BaseModel):
    """
    Process-level settings for HocrReader.

    Attributes:
        local_folder: Root holding one working directory per batch instance
        lock_folder_name: Folder (inside the batch directory) for lock markers
        max_workers: Upper bound on concurrently running OCR tasks
        property_scope: Plugin name used for property lookups
        commands: Windows and Unix command templates
        source_marker: Name marker of source rasters for cleanup
        intermediate_marker: Name marker of intermediate rasters for cleanup
    """

    model_config = ConfigDict(frozen=True)

    local_folder: Path
    lock_folder_name: str = DEFAULT_LOCK_FOLDER_NAME
    max_workers: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)
    property_scope: str = PROPERTY_SCOPE
    commands: CommandTemplates = Field(default_factory=CommandTemplates)
    source_marker: str = ".tif"
    intermediate_marker: str = ".png"


def load_settings(path_or_url: str | Path) -> ReaderSettings:
    """Load ReaderSettings from a JSON file or URL."""
    return ReaderSettings.model_validate(load_json(path_or_url))


class HocrProperties(BaseModel):
    """Plugin properties resolved for one run."""

    model_config = ConfigDict(frozen=True)

    switch: str | None = None
    valid_extensions: str = ""
    language: str | None = None
    version: str | None = None
    color_switch: str | None = None

    @property
    def enabled(self) -> bool:
        return (self.switch or "").strip().upper() == SWITCH_ON

    @property
    def color_mode(self) -> bool:
        return self.color_switch == SWITCH_ON

    @classmethod
    def resolve(
        cls,
        service: PropertyService,
        batch_instance_id: str,
        scope: str = PROPERTY_SCOPE,
    ) -> HocrProperties:
        """
        Read all plugin properties for a batch.

        The switch is read first; when it is not ON the remaining properties
        are not required. Language and version are required for an enabled
        plugin.

        Raises:
            MissingPropertyError: If a required property is absent or blank
        """

        def get(key: TesseractProperty) -> str | None:
            return service.get_property(batch_instance_id, scope, key.value)

        switch = get(TesseractProperty.SWITCH)
        props = cls(switch=switch)
        if not props.enabled:
            return props

        values: dict[str, str | None] = {}
        for key in (TesseractProperty.LANGUAGE, TesseractProperty.VERSION):
            value = get(key)
            if value is None or not value.strip():
                raise MissingPropertyError(key.value, scope)
            values[key.name.lower()] = value.strip()

        return cls(
            switch=switch,
            valid_extensions=get(TesseractProperty.VALID_EXTENSIONS) or "",
            color_switch=get(TesseractProperty.COLOR_SWITCH),
            **values,
        )
