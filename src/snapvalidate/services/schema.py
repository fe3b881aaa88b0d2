"""Schema orchestrator: run one engine per field of a data record.

A schema maps field names to a :class:`RuleEngine` or to a factory
``(field_value) -> RuleEngine``. Fields are processed strictly in schema
order, one at a time, in both entry points.

INVARIANT: a field whose validator cannot be built fails on its own; it
never stops the remaining fields from being validated.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from snapvalidate.domain.errors import SchemaArgumentError
from snapvalidate.domain.result import Result, SchemaResult
from snapvalidate.services.engine import EngineSource, RuleEngine, resolve_engine

logger = logging.getLogger(__name__)

type Schema = Mapping[str, EngineSource]


def _check_arguments(schema: Any, data: Any) -> None:
    if not isinstance(schema, Mapping):
        msg = "Schema must be a mapping of field names to validators"
        raise SchemaArgumentError(msg)
    if not isinstance(data, Mapping):
        msg = "Data must be a mapping of field names to values"
        raise SchemaArgumentError(msg)


def _prepare(field: str, source: EngineSource, data: Mapping[str, Any]) -> RuleEngine:
    return resolve_engine(source, data.get(field)).set_field_name(field)


def _setup_failure(field: str, exc: Exception) -> Result:
    logger.debug("Validator setup failed for field %s", field, exc_info=True)
    return Result.failed(f"Validation setup error: {exc}")


def _report(per_field: dict[str, Result]) -> SchemaResult:
    failing = [field for field, result in per_field.items() if not result.valid]
    logger.debug("Validated %d fields, %d failing", len(per_field), len(failing))
    return SchemaResult(valid=not failing, per_field=per_field)


def validate(schema: Schema, data: Mapping[str, Any]) -> SchemaResult:
    """Run the sync phase of every field's engine.

    Async rules are not run here; use :func:`validate_async` for those.

    Raises:
        SchemaArgumentError: *schema* or *data* is not a mapping.
    """
    _check_arguments(schema, data)
    per_field: dict[str, Result] = {}
    for field, source in schema.items():
        try:
            engine = _prepare(field, source, data)
        except Exception as exc:
            per_field[field] = _setup_failure(field, exc)
            continue
        per_field[field] = engine.validate()
    return _report(per_field)


async def validate_async(schema: Schema, data: Mapping[str, Any]) -> SchemaResult:
    """Validate every field, awaiting the full two-phase run where needed.

    Engines without async rules take the sync path.

    Raises:
        SchemaArgumentError: *schema* or *data* is not a mapping.
    """
    _check_arguments(schema, data)
    per_field: dict[str, Result] = {}
    for field, source in schema.items():
        try:
            engine = _prepare(field, source, data)
        except Exception as exc:
            per_field[field] = _setup_failure(field, exc)
            continue
        if engine.has_async_rules:
            per_field[field] = await engine.validate_async()
        else:
            per_field[field] = engine.validate()
    return _report(per_field)
