"""Flow Service: schema-typed flows around the model backend.

Components:
- contracts.py: pydantic input/output contracts for each flow
- registry.py: FlowDefinition and FlowRegistry
- flows.py: the built-in flows and default_registry()
- templates.py / prompts.py: named-slot prompt templates
- compiler.py: PromptCompiler (pure)
- executor.py: FlowExecutor (model call, validation, retry, fallback)
- fallbacks.py: deterministic outputs for when the model path fails
- errors.py: exception taxonomy
"""

from .compiler import PromptCompiler, format_instructions, retry_suffix, validate_input
from .errors import (
    DuplicateFlowError,
    FieldViolation,
    FlowError,
    InputValidationError,
    ModelUnavailableError,
    OutputValidationError,
    UnknownFlowError,
)
from .executor import ExecutionResult, FlowExecutor, extract_json_object
from .flows import (
    CRISIS_INTERVENTION,
    MENTAL_HEALTH_ASSESSMENT,
    PEER_SUPPORT_MODERATION,
    PSYCHOEDUCATION,
    THERAPEUTIC_ACTIVITIES,
    THERAPEUTIC_RESPONSE,
    default_registry,
)
from .registry import FlowDefinition, FlowRegistry
from .templates import PromptTemplate, TemplateSlot

__all__ = [
    "PromptCompiler",
    "format_instructions",
    "retry_suffix",
    "validate_input",
    "DuplicateFlowError",
    "FieldViolation",
    "FlowError",
    "InputValidationError",
    "ModelUnavailableError",
    "OutputValidationError",
    "UnknownFlowError",
    "ExecutionResult",
    "FlowExecutor",
    "extract_json_object",
    "CRISIS_INTERVENTION",
    "MENTAL_HEALTH_ASSESSMENT",
    "PEER_SUPPORT_MODERATION",
    "PSYCHOEDUCATION",
    "THERAPEUTIC_ACTIVITIES",
    "THERAPEUTIC_RESPONSE",
    "default_registry",
    "FlowDefinition",
    "FlowRegistry",
    "PromptTemplate",
    "TemplateSlot",
]
