"""Flow pipeline exceptions.

Only UnknownFlowError and InputValidationError ever reach a caller of the
pipeline. Model-side errors are retried and then absorbed into a fallback.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence


class FlowError(Exception):
    """Base class for flow pipeline errors."""


class UnknownFlowError(FlowError):
    """The requested flow name is not registered."""

    def __init__(self, flow_name: str):
        self.flow_name = flow_name
        super().__init__(f"Unknown flow: {flow_name!r}")


class DuplicateFlowError(FlowError):
    """A flow with this name is already registered."""

    def __init__(self, flow_name: str):
        self.flow_name = flow_name
        super().__init__(f"Flow already registered: {flow_name!r}")


@dataclass(frozen=True)
class FieldViolation:
    """One input field that broke its contract."""
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class InputValidationError(FlowError):
    """Caller input violates the flow's input contract.

    Carries every violated field, not just the first.
    """

    def __init__(self, flow_name: str, violations: Sequence[FieldViolation]):
        self.flow_name = flow_name
        self.violations: List[FieldViolation] = list(violations)
        fields = ", ".join(v.field for v in self.violations)
        super().__init__(f"Invalid input for flow {flow_name!r}: {fields}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "invalid_input",
            "flow": self.flow_name,
            "violations": [v.to_dict() for v in self.violations],
        }


class ModelUnavailableError(FlowError):
    """Backend timed out or failed in transport."""


class OutputValidationError(FlowError):
    """Model response could not be coerced into the output contract."""

    def __init__(self, message: str, problems: Sequence[str] = ()):
        self.problems: List[str] = list(problems)
        super().__init__(message)
