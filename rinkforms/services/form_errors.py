from __future__ import annotations

from dataclasses import asdict, dataclass

from fastapi import HTTPException

MISSING_REQUIRED_FIELD = "MissingRequiredField"
INVALID_VALUE = "InvalidValue"


@dataclass(frozen=True)
class FieldError:
    name: str
    kind: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


class FormEngineError(HTTPException):
    status_code = 400
    kind = "FormEngineError"

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.kind)


class InvalidFormatError(FormEngineError):
    kind = "InvalidFormat"


class FieldNameError(FormEngineError):
    def __init__(self, name: str, detail: str, field_id: str | None = None):
        self.name = name
        self.field_id = field_id
        super().__init__(detail)


class DuplicateNameError(FieldNameError):
    kind = "DuplicateName"

    def __init__(self, name: str, field_id: str | None = None):
        super().__init__(name, f'Field name "{name}" is already used in this form', field_id)


class InvalidCharactersError(FieldNameError):
    kind = "InvalidCharacters"

    def __init__(self, name: str, field_id: str | None = None):
        super().__init__(
            name,
            f'Field name "{name}" may only contain lower-case letters, digits and underscores',
            field_id,
        )


class FormValidationError(FormEngineError):
    status_code = 422
    kind = "ValidationFailed"

    def __init__(self, errors: list[FieldError]):
        self.errors = list(errors)
        HTTPException.__init__(
            self,
            status_code=self.status_code,
            detail=[error.as_dict() for error in self.errors],
        )


class ForbiddenSystemTemplateError(FormEngineError):
    status_code = 403
    kind = "ForbiddenSystemTemplate"

    def __init__(self, template_name: str = ""):
        label = f' "{template_name}"' if template_name else ""
        super().__init__(f"System template{label} cannot be deleted")


class TemplateNotFoundError(FormEngineError):
    status_code = 404
    kind = "TemplateNotFound"

    def __init__(self):
        super().__init__("Template not found")


class VersionNotFoundError(FormEngineError):
    status_code = 404
    kind = "VersionNotFound"

    def __init__(self, version: int):
        super().__init__(f"Version {version} not found")


class TemplateConflictError(FormEngineError):
    status_code = 409
    kind = "Conflict"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Form was changed by someone else (editing version {expected}, stored version {actual}); reload and reapply"
        )


class PersistenceFailureError(FormEngineError):
    status_code = 503
    kind = "PersistenceFailure"

    def __init__(self, detail: str = "Failed to save form configuration"):
        super().__init__(detail)


class EntrySessionStateError(FormEngineError):
    status_code = 409
    kind = "InvalidSessionState"
