"""Runtime side of configured forms: render widgets, collect a value record."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field as dc_field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from rinkforms.schemas.forms import FieldDefinition
from rinkforms.services.field_types import ValueKind, field_type_spec
from rinkforms.services.form_errors import (
    INVALID_VALUE,
    MISSING_REQUIRED_FIELD,
    EntrySessionStateError,
    FieldError,
)

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "no", "n", "off", ""}


class _CoercionError(ValueError):
    pass


def _coerce_number(value: Any) -> int | float | None:
    if isinstance(value, bool):
        raise _CoercionError("number expected")
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise _CoercionError("number expected")
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        number = Decimal(text.replace(",", "."))
    except InvalidOperation:
        raise _CoercionError("number expected")
    if not number.is_finite():
        raise _CoercionError("number expected")
    if number == number.to_integral_value():
        return int(number)
    return float(number)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise _CoercionError("true/false expected")


def _coerce_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


_COERCERS = {
    ValueKind.STRING: _coerce_string,
    ValueKind.NUMBER: _coerce_number,
    ValueKind.BOOLEAN: _coerce_bool,
}


def coerce_value(field: FieldDefinition, value: Any) -> Any:
    kind = field_type_spec(field.type).value_kind
    if kind is ValueKind.NONE:
        return None
    return _COERCERS[kind](value)


def _is_missing(kind: ValueKind, value: Any) -> bool:
    if value is None:
        return True
    if kind is ValueKind.BOOLEAN:
        return value is False
    if isinstance(value, str):
        return not value.strip()
    return False


@dataclass(frozen=True)
class RenderedField:
    id: str
    name: str
    label: str
    type: str
    widget: str
    value: Any
    options: list[str]
    is_required: bool
    placeholder: str
    help_text: str
    width: str
    is_layout: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "widget": self.widget,
            "value": self.value,
            "options": list(self.options),
            "isRequired": self.is_required,
            "placeholder": self.placeholder,
            "helpText": self.help_text,
            "width": self.width,
            "isLayout": self.is_layout,
        }


@dataclass
class CollectResult:
    record: dict[str, Any] = dc_field(default_factory=dict)
    errors: list[FieldError] = dc_field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return not self.errors


def _seed_value(field: FieldDefinition, initial_values: dict[str, Any]) -> Any:
    raw = initial_values[field.name] if field.name in initial_values else field.default_value
    try:
        return coerce_value(field, raw)
    except _CoercionError:
        return None


def render_form(fields: list[FieldDefinition], initial_values: dict[str, Any] | None = None) -> list[RenderedField]:
    initial = dict(initial_values or {})
    rendered: list[RenderedField] = []
    for field in sorted(fields, key=lambda item: item.order):
        info = field_type_spec(field.type)
        rendered.append(
            RenderedField(
                id=field.id,
                name=field.name,
                label=field.label,
                type=info.type.value,
                widget=info.widget,
                value=None if info.is_layout else _seed_value(field, initial),
                options=list(field.options),
                is_required=bool(field.is_required) and not info.is_layout,
                placeholder=field.placeholder,
                help_text=field.help_text,
                width=field.width.value,
                is_layout=info.is_layout,
            )
        )
    return rendered


def collect_values(fields: list[FieldDefinition], values: dict[str, Any] | None) -> CollectResult:
    """Assemble ``{name: value}`` over data fields, or report every field error."""
    submitted = dict(values or {})
    result = CollectResult()
    for field in sorted(fields, key=lambda item: item.order):
        info = field_type_spec(field.type)
        if info.is_layout:
            continue
        try:
            value = coerce_value(field, submitted.get(field.name))
        except _CoercionError as exc:
            result.errors.append(FieldError(field.name, INVALID_VALUE, f'"{field.label or field.name}": {exc}'))
            continue
        if field.is_required and _is_missing(info.value_kind, value):
            result.errors.append(
                FieldError(field.name, MISSING_REQUIRED_FIELD, f'"{field.label or field.name}" is required')
            )
            continue
        if info.requires_options and value and field.options and value not in field.options:
            result.errors.append(
                FieldError(field.name, INVALID_VALUE, f'"{value}" is not an option of "{field.label or field.name}"')
            )
            continue
        result.record[field.name] = value
    if result.errors:
        result.record = {}
    return result


def render_and_collect(
    fields: list[FieldDefinition],
    submitted: dict[str, Any] | None,
    initial_values: dict[str, Any] | None = None,
) -> CollectResult:
    """Seed every widget like ``render_form`` does, overlay the submitted values, then collect."""
    values = {item.name: item.value for item in render_form(fields, initial_values) if not item.is_layout}
    values.update(submitted or {})
    return collect_values(fields, values)


class EntryState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    VALIDATION_FAILED = "validation_failed"


_EDITABLE_STATES = {EntryState.READY, EntryState.VALIDATION_FAILED}


class FormEntrySession:
    """One user filling one form instance."""

    def __init__(self, initial_values: dict[str, Any] | None = None):
        self.state = EntryState.LOADING
        self.fields: list[FieldDefinition] = []
        self.values: dict[str, Any] = {}
        self.errors: list[FieldError] = []
        self.record: dict[str, Any] | None = None
        self._initial_values = dict(initial_values or {})

    def _require(self, states: set[EntryState], action: str) -> None:
        if self.state not in states:
            raise EntrySessionStateError(f"Cannot {action} while form is {self.state.value}")

    def load(self, fields: list[FieldDefinition]) -> list[RenderedField]:
        self._require({EntryState.LOADING}, "load")
        self.fields = list(fields)
        rendered = render_form(self.fields, self._initial_values)
        self.values = {item.name: item.value for item in rendered if not item.is_layout}
        self.state = EntryState.READY
        return rendered

    def set_value(self, name: str, value: Any) -> None:
        self._require(_EDITABLE_STATES, "edit values")
        self.values[name] = value

    def submit(self, values: dict[str, Any] | None = None) -> CollectResult:
        self._require(_EDITABLE_STATES, "submit")
        if values:
            self.values.update(values)
        self.state = EntryState.SUBMITTING
        result = collect_values(self.fields, self.values)
        if result.is_ok:
            self.record = result.record
            self.errors = []
            self.state = EntryState.SUBMITTED
        else:
            self.errors = result.errors
            self.state = EntryState.VALIDATION_FAILED
            logger.debug("form submit rejected: %s", [error.name for error in result.errors])
        return result

    def cancel(self) -> None:
        self.values = {}
        self.errors = []
        self.record = None
