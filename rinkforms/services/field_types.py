"""Closed catalog of field types.

Every behavior that depends on a field's type (palette grouping, whether an
options list is kept, which widget renders it, how a submitted value is
coerced, whether it carries data at all) is looked up here. Adding a type is
one new ``FieldType`` member plus one ``FIELD_TYPES`` entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FieldType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    PHONE = "phone"
    URL = "url"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    TOGGLE = "toggle"
    DATE = "date"
    TIME = "time"
    FILE = "file"
    SLIDER = "slider"
    SECTION = "section"
    DIVIDER = "divider"


class FieldCategory(str, Enum):
    TEXT = "Text Fields"
    SELECTION = "Selection"
    DATE_TIME = "Date/Time"
    ADVANCED = "Advanced"
    LAYOUT = "Layout"


class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NONE = "none"


class FieldWidth(str, Enum):
    FULL = "full"
    HALF = "half"
    THIRD = "third"


@dataclass(frozen=True)
class FieldTypeSpec:
    type: FieldType
    category: FieldCategory
    palette_label: str
    widget: str
    value_kind: ValueKind
    requires_options: bool = False

    @property
    def is_layout(self) -> bool:
        return self.value_kind is ValueKind.NONE


FIELD_TYPES: dict[FieldType, FieldTypeSpec] = {
    info.type: info
    for info in (
        FieldTypeSpec(FieldType.TEXT, FieldCategory.TEXT, "Text", "input:text", ValueKind.STRING),
        FieldTypeSpec(FieldType.EMAIL, FieldCategory.TEXT, "Email", "input:email", ValueKind.STRING),
        FieldTypeSpec(FieldType.NUMBER, FieldCategory.TEXT, "Number", "input:number", ValueKind.NUMBER),
        FieldTypeSpec(FieldType.PHONE, FieldCategory.TEXT, "Phone", "input:tel", ValueKind.STRING),
        FieldTypeSpec(FieldType.URL, FieldCategory.TEXT, "URL", "input:url", ValueKind.STRING),
        FieldTypeSpec(FieldType.TEXTAREA, FieldCategory.TEXT, "Textarea", "textarea", ValueKind.STRING),
        FieldTypeSpec(FieldType.SELECT, FieldCategory.SELECTION, "Dropdown", "select", ValueKind.STRING, True),
        FieldTypeSpec(FieldType.RADIO, FieldCategory.SELECTION, "Radio Group", "radio", ValueKind.STRING, True),
        FieldTypeSpec(FieldType.CHECKBOX, FieldCategory.SELECTION, "Checkbox", "checkbox", ValueKind.BOOLEAN),
        FieldTypeSpec(FieldType.TOGGLE, FieldCategory.SELECTION, "Toggle", "switch", ValueKind.BOOLEAN),
        FieldTypeSpec(FieldType.DATE, FieldCategory.DATE_TIME, "Date Picker", "input:date", ValueKind.STRING),
        FieldTypeSpec(FieldType.TIME, FieldCategory.DATE_TIME, "Time Picker", "input:time", ValueKind.STRING),
        FieldTypeSpec(FieldType.FILE, FieldCategory.ADVANCED, "File Upload", "file", ValueKind.STRING),
        FieldTypeSpec(FieldType.SLIDER, FieldCategory.ADVANCED, "Slider", "slider", ValueKind.NUMBER),
        FieldTypeSpec(FieldType.SECTION, FieldCategory.LAYOUT, "Section Header", "heading", ValueKind.NONE),
        FieldTypeSpec(FieldType.DIVIDER, FieldCategory.LAYOUT, "Divider", "separator", ValueKind.NONE),
    )
}


def field_type_spec(field_type: FieldType | str) -> FieldTypeSpec:
    return FIELD_TYPES[FieldType(field_type)]


def is_layout_type(field_type: FieldType | str) -> bool:
    return field_type_spec(field_type).is_layout


def requires_options(field_type: FieldType | str) -> bool:
    return field_type_spec(field_type).requires_options


def palette() -> list[dict]:
    """Field types grouped by category, in catalog order."""
    groups: dict[FieldCategory, list[dict]] = {}
    for info in FIELD_TYPES.values():
        groups.setdefault(info.category, []).append(
            {
                "type": info.type.value,
                "label": info.palette_label,
                "widget": info.widget,
                "requires_options": info.requires_options,
                "is_layout": info.is_layout,
            }
        )
    return [{"category": category.value, "types": items} for category, items in groups.items()]
