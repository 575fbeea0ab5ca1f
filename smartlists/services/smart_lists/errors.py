# smartlists/services/smart_lists/errors.py

"""Exceptions raised while validating and compiling smart list rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smartlists.services.smart_lists.models import Operator

__all__ = ["RuleValidationError"]


class RuleValidationError(ValueError):
    """A rule can never be compiled as written.

    Raised for operators that are illegal for a field, unparseable targets,
    invalid regex patterns, missing user ids and illegal modifiers. Retrying
    the same rule always fails the same way.

    Attributes:
        field: The rule's field name.
        operator: The rule's operator, when known.
        allowed: The operators legal for the field, when relevant.
    """

    def __init__(
        self,
        message: str,
        field: str = "",
        operator: Operator | None = None,
        allowed: list[Operator] | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.operator = operator
        self.allowed = list(allowed) if allowed else []
