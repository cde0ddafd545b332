"""Structured validation output, shaped for automated callers."""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from archetype_engine.validation.codes import ValidationCode


class ValidationIssue(BaseModel):
    """
    One error or warning.

    Attributes:
        code: Stable machine-readable code
        path: Dotted location in the manifest, e.g. "Post.relations.author.entity"
        message: Human-readable description
        suggestion: Concrete fix an automated caller can apply
    """

    model_config = ConfigDict(frozen=True)

    code: ValidationCode
    path: str
    message: str
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    errors: Tuple[ValidationIssue, ...] = ()
    warnings: Tuple[ValidationIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def error_codes(self) -> list[str]:
        return [issue.code.value for issue in self.errors]

    @property
    def warning_codes(self) -> list[str]:
        return [issue.code.value for issue in self.warnings]

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }


def issue(code: ValidationCode, path: str, message: str, suggestion: str = None) -> ValidationIssue:
    return ValidationIssue(code=code, path=path, message=message, suggestion=suggestion)
