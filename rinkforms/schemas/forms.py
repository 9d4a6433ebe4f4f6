from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from rinkforms.services.field_types import FieldType, FieldWidth, is_layout_type, requires_options


def new_field_id() -> str:
    return uuid4().hex


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldDefinition(_CamelModel):
    id: str = Field(default_factory=new_field_id)
    name: str
    label: str = ""
    type: FieldType
    options: list[str] = Field(default_factory=list)
    is_required: bool = False
    placeholder: str = ""
    help_text: str = ""
    default_value: str = ""
    width: FieldWidth = FieldWidth.FULL
    order: int = 0

    @field_validator("placeholder", "help_text", "label", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("default_value", mode="before")
    @classmethod
    def _stringify_default(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_options(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValueError("options must be a list of strings")
        return [str(item) for item in value]

    @model_validator(mode="after")
    def _drop_options_for_plain_types(self) -> "FieldDefinition":
        if self.options and not requires_options(self.type):
            self.options = []
        return self

    @property
    def is_layout(self) -> bool:
        return is_layout_type(self.type)


def renumber_fields(fields: list[FieldDefinition]) -> list[FieldDefinition]:
    """Return the fields with ``order`` re-derived from list position."""
    return [field if field.order == index else field.model_copy(update={"order": index}) for index, field in enumerate(fields)]


def sort_by_stored_order(fields: list[FieldDefinition]) -> list[FieldDefinition]:
    # Stored order is only a hint: storage may hand rows back in any order,
    # with gaps or duplicates.
    ranked = sorted(enumerate(fields), key=lambda item: (item[1].order, item[0]))
    return renumber_fields([field for _, field in ranked])


class FieldPatch(_CamelModel):
    name: Optional[str] = None
    label: Optional[str] = None
    type: Optional[FieldType] = None
    options: Optional[list[str]] = None
    is_required: Optional[bool] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    default_value: Optional[str] = None
    width: Optional[FieldWidth] = None


class EditSession(BaseModel):
    """Working copy of one form's fields, owned by the editing client."""

    model_config = ConfigDict(frozen=True)

    fields: list[FieldDefinition] = Field(default_factory=list)
    selected_field_id: Optional[str] = None
    base_version: Optional[int] = None


class InsertOp(BaseModel):
    op: Literal["insert"]
    type: FieldType
    label: Optional[str] = None


class MoveOp(BaseModel):
    op: Literal["move"]
    field_id: str
    target_index: int


class DeleteOp(BaseModel):
    op: Literal["delete"]
    field_id: str


class UpdateOp(BaseModel):
    op: Literal["update"]
    field_id: str
    changes: FieldPatch


class DuplicateOp(BaseModel):
    op: Literal["duplicate"]
    field_id: str


class SelectOp(BaseModel):
    op: Literal["select"]
    field_id: Optional[str] = None


EditorOperation = Annotated[
    Union[InsertOp, MoveOp, DeleteOp, UpdateOp, DuplicateOp, SelectOp],
    Field(discriminator="op"),
]


class EditorApplyIn(BaseModel):
    session: EditSession = Field(default_factory=EditSession)
    operation: EditorOperation


class FieldsSave(BaseModel):
    fields: list[FieldDefinition]
    expected_version: Optional[int] = None
    changelog: Optional[str] = None


class TemplateCreate(BaseModel):
    template_name: str
    form_type: str
    description: Optional[str] = None
    category: Optional[str] = None
    fields: list[FieldDefinition] = Field(default_factory=list)
    is_system_template: bool = False
    changelog: Optional[str] = None

    @field_validator("template_name", "form_type")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class TemplateDuplicate(BaseModel):
    template_name: str

    @field_validator("template_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class FormSubmit(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)


class TemplateFilter(BaseModel):
    field: str
    op: Literal["=", "!=", ">", "<", ">=", "<=", "~"]
    value: Any = None


class TemplateSort(BaseModel):
    field: str
    dir: Literal["asc", "desc"] = "asc"


class TemplatePage(BaseModel):
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class TemplateQuery(BaseModel):
    """Library search body; ``field`` names are checked against the queryable columns."""

    filters: list[TemplateFilter] = Field(default_factory=list)
    sort: list[TemplateSort] = Field(default_factory=list)
    page: TemplatePage = Field(default_factory=TemplatePage)
