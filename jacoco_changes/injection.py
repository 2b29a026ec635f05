"""Field-level configuration override for the report generator.

The renderer keeps its configuration in private attributes and offers no
setters for it. ``GeneratorAdapter`` is the one place that writes those
attributes, so a change in the renderer's internal shape surfaces here as a
``ConfigurationInjectionError`` naming the field instead of a silently
mis-scoped report.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from jacoco_changes.config import ReportSettings
from jacoco_changes.models import ReportScope


logger = logging.getLogger(__name__)

OUTPUT_DIRECTORY_FIELD = "_output_directory"
DATA_FILE_FIELD = "_data_file"
OUTPUT_ENCODING_FIELD = "_output_encoding"
SOURCE_ENCODING_FIELD = "_source_encoding"
SKIP_FIELD = "_skip"
INCLUDES_FIELD = "_includes"
EXCLUDES_FIELD = "_excludes"

DEFAULT_FIELDS = (
    OUTPUT_DIRECTORY_FIELD,
    DATA_FILE_FIELD,
    OUTPUT_ENCODING_FIELD,
    SOURCE_ENCODING_FIELD,
    SKIP_FIELD,
)
SCOPE_FIELDS = (INCLUDES_FIELD, EXCLUDES_FIELD)


class ConfigurationInjectionError(RuntimeError):
    def __init__(self, field_name: str, reason: str) -> None:
        super().__init__(f"Could not inject field '{field_name}': {reason}")
        self.field_name = field_name


def inject(target: Any, field_name: str, value: Any) -> None:
    """Overwrite an existing attribute of ``target``.

    The attribute must already exist; creating a new one would be ignored by
    the target and hide the mismatch.
    """
    try:
        getattr(target, field_name)
    except AttributeError as exc:
        raise ConfigurationInjectionError(field_name, f"{type(target).__name__} has no such field") from exc

    try:
        setattr(target, field_name, value)
    except (AttributeError, TypeError) as exc:
        raise ConfigurationInjectionError(field_name, str(exc)) from exc
    logger.debug("Injected %s=%r into %s", field_name, value, type(target).__name__)


class GeneratorAdapter:
    def __init__(self, generator: Any) -> None:
        self.generator = generator

    def set_output_directory(self, value: str) -> None:
        inject(self.generator, OUTPUT_DIRECTORY_FIELD, value)

    def set_data_file(self, value: str) -> None:
        inject(self.generator, DATA_FILE_FIELD, value)

    def set_output_encoding(self, value: str) -> None:
        inject(self.generator, OUTPUT_ENCODING_FIELD, value)

    def set_source_encoding(self, value: str) -> None:
        inject(self.generator, SOURCE_ENCODING_FIELD, value)

    def set_skip(self, value: bool) -> None:
        inject(self.generator, SKIP_FIELD, value)

    def set_includes(self, value: Iterable[str]) -> None:
        inject(self.generator, INCLUDES_FIELD, list(value))

    def set_excludes(self, value: Iterable[str]) -> None:
        inject(self.generator, EXCLUDES_FIELD, list(value))

    def apply_defaults(self, output_directory: str, data_file: str, settings: ReportSettings) -> None:
        self.set_output_directory(output_directory)
        self.set_data_file(data_file)
        self.set_output_encoding(settings.output_encoding)
        self.set_source_encoding(settings.source_encoding)
        self.set_skip(settings.skip)

    def apply_scope(self, scope: ReportScope) -> None:
        self.set_includes(scope.includes)
        self.set_excludes(scope.excludes)
