from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel


@dataclass
class Subscriber:
    name: str
    email: str
    id: Optional[str] = field(default=None)


class ValidationResult(BaseModel):
    is_success: bool
    errors: list[str] = []

    @staticmethod
    def success() -> ValidationResult:
        return ValidationResult(is_success=True)

    @staticmethod
    def failure(*errors: str) -> ValidationResult:
        return ValidationResult(is_success=False, errors=list(errors))
