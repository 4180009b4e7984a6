"""Prompt compiler: (flow, input, context) -> prompt text.

Compilation is pure. The same input and context always give the same text,
and nothing outside the arguments is read or written.
"""
import json
from functools import lru_cache
from typing import Any, List, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError

from campuscare.shared.models import Message
from .errors import FieldViolation, InputValidationError
from .registry import FlowDefinition

DEFAULT_MAX_CONTEXT_MESSAGES = 5

RETRY_INSTRUCTION = (
    "Your previous reply could not be used ({problems}). Reply again with ONLY a "
    "JSON object that matches the schema above."
)


def violations_from(error: ValidationError) -> List[FieldViolation]:
    """Flatten a pydantic error into one violation per failing field."""
    violations = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "input"
        violations.append(FieldViolation(field=location, message=item.get("msg", "invalid")))
    return violations


def validate_input(definition: FlowDefinition, payload: Any) -> BaseModel:
    """Check ``payload`` against the flow's input contract.

    Raises:
        InputValidationError: Listing every violated field
    """
    if isinstance(payload, definition.input_model):
        return payload
    try:
        return definition.input_model.model_validate(payload)
    except ValidationError as e:
        raise InputValidationError(definition.name, violations_from(e)) from None


@lru_cache(maxsize=None)
def format_instructions(output_model: Type[BaseModel]) -> str:
    """Describe the exact output shape the model must return."""
    schema = json.dumps(output_model.model_json_schema(), indent=2, sort_keys=True)
    return (
        "RESPONSE FORMAT:\n"
        "Respond with a single JSON object and nothing else: no markdown, no prose. "
        "Include every required field, use only the listed values for enum fields, "
        "keep numbers inside their ranges and follow the nesting exactly. "
        "JSON schema:\n"
        f"{schema}"
    )


def retry_suffix(problems: Sequence[str]) -> str:
    """Instruction appended to the prompt when a reply had to be retried."""
    summary = "; ".join(problems) if problems else "response was not valid JSON"
    return RETRY_INSTRUCTION.format(problems=summary)


class PromptCompiler:
    """Renders flow templates into prompt text."""

    def __init__(self, max_context_messages: int = DEFAULT_MAX_CONTEXT_MESSAGES):
        if max_context_messages < 0:
            raise ValueError("max_context_messages must be >= 0")
        self.max_context_messages = max_context_messages

    def compile(
        self,
        definition: FlowDefinition,
        payload: Any,
        context: Sequence[Message] = (),
    ) -> str:
        """Validate input and render the prompt.

        Raises:
            InputValidationError: If input breaks the flow's input contract
        """
        return self.render(definition, validate_input(definition, payload), context)

    def render(
        self,
        definition: FlowDefinition,
        validated: BaseModel,
        context: Sequence[Message] = (),
    ) -> str:
        """Render a prompt from already-validated input."""
        template = definition.template
        data = validated.model_dump(mode="json", exclude_none=True)

        sections = [template.preamble]

        slot_text = template.render_slots(data)
        if slot_text:
            sections.append(slot_text)

        context_text = self._render_context(context) if template.uses_context else None
        if context_text:
            sections.append(f"{template.context_heading}:\n{context_text}")

        if template.guidelines:
            sections.append(template.guidelines)
        if template.closing:
            sections.append(template.closing)

        sections.append(format_instructions(definition.output_model))
        return "\n\n".join(sections)

    def _render_context(self, context: Sequence[Message]) -> Optional[str]:
        if not context or self.max_context_messages == 0:
            return None
        # Most recent last
        window = list(context)[-self.max_context_messages:]
        return "\n".join(message.to_prompt_line() for message in window)
