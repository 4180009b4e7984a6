"""Flow executor: prompt -> model -> validated output, with retry and fallback.

Contract:
- Unknown flow and invalid input fail fast, before any model call.
- Each attempt makes exactly one model call, under a timeout.
- Timeouts, transport errors and unusable replies are retried sequentially.
- When retries run out the flow's deterministic fallback is returned, so a
  caller always gets a contract-conformant output.
"""
import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ValidationError

from campuscare.shared.models import Message
from campuscare.services.llm_service import BaseLLM
from .compiler import PromptCompiler, retry_suffix, validate_input, violations_from
from .errors import ModelUnavailableError, OutputValidationError
from .registry import FlowDefinition, FlowRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2
DEFAULT_TIMEOUT_SECONDS = 30.0
MAX_REPORTED_PROBLEMS = 5

SYSTEM_PROMPT = (
    "You are the response engine of a campus mental health support service. "
    "Always answer with a single JSON object that follows the requested schema."
)

_FENCE_START = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_END = re.compile(r"\s*```$")


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one flow execution.

    Attributes:
        flow: Flow name
        output: Validated output model
        attempt: Number of model attempts made
        used_fallback: True if ``output`` came from the fallback builder
        input: Validated input model
        failure_reason: Last model-side failure, if any attempt failed
    """
    flow: str
    output: BaseModel
    attempt: int
    used_fallback: bool
    input: BaseModel
    failure_reason: Optional[str] = None


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the outermost JSON object out of a model reply.

    Tolerates markdown fences and prose around the object.

    Raises:
        OutputValidationError: If no JSON object can be parsed
    """
    candidate = (text or "").strip()
    if candidate.startswith("```"):
        candidate = _FENCE_END.sub("", _FENCE_START.sub("", candidate))

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end <= start:
        raise OutputValidationError("Reply contains no JSON object", ["reply was not a JSON object"])

    try:
        parsed = json.loads(candidate[start:end + 1])
    except json.JSONDecodeError as e:
        raise OutputValidationError(f"Reply is not valid JSON: {e}", ["reply was not valid JSON"]) from e

    if not isinstance(parsed, dict):
        raise OutputValidationError("Reply JSON is not an object", ["reply was not a JSON object"])
    return parsed


class FlowExecutor:
    """Runs one flow against the model backend.

    The executor is the only component that calls the backend.
    """

    def __init__(
        self,
        registry: FlowRegistry,
        llm: BaseLLM,
        compiler: Optional[PromptCompiler] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        system_prompt: Optional[str] = SYSTEM_PROMPT,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.registry = registry
        self.llm = llm
        self.compiler = compiler or PromptCompiler()
        self.max_retries = max_retries
        self.timeout_seconds = timeout_seconds
        self.system_prompt = system_prompt

    async def execute(
        self,
        flow_name: str,
        payload: Any,
        context: Sequence[Message] = (),
    ) -> ExecutionResult:
        """Execute a flow.

        Args:
            flow_name: Registered flow name
            payload: Caller input (dict or input model)
            context: Conversation window, most recent last

        Returns:
            ExecutionResult with a contract-conformant output

        Raises:
            UnknownFlowError: Flow not registered (no model call made)
            InputValidationError: Input breaks the contract (no model call made)
        """
        definition = self.registry.lookup(flow_name)
        validated = validate_input(definition, payload)
        prompt = self.compiler.render(definition, validated, context)

        max_attempts = self.max_retries + 1
        problems: List[str] = []
        failure_reason: Optional[str] = None

        logger.info(
            "FLOW_EXECUTION_STARTED",
            extra={
                "flow": flow_name,
                "context_messages": len(context),
                "prompt_length": len(prompt),
                "max_attempts": max_attempts,
            }
        )

        for attempt in range(1, max_attempts + 1):
            attempt_prompt = prompt
            if problems:
                attempt_prompt = f"{prompt}\n\n{retry_suffix(problems)}"

            try:
                text = await self._call_model(attempt_prompt)
                output = self._parse_output(definition, text)
            except ModelUnavailableError as e:
                failure_reason = f"model_unavailable: {e}"
                problems = []
                logger.warning(
                    "MODEL_CALL_FAILED",
                    extra={"flow": flow_name, "attempt": attempt, "error": str(e)}
                )
                continue
            except OutputValidationError as e:
                failure_reason = f"invalid_output: {e}"
                problems = e.problems[:MAX_REPORTED_PROBLEMS]
                logger.warning(
                    "MODEL_OUTPUT_INVALID",
                    extra={"flow": flow_name, "attempt": attempt, "problems": problems}
                )
                continue

            logger.info(
                "FLOW_EXECUTION_SUCCEEDED",
                extra={"flow": flow_name, "attempt": attempt}
            )
            return ExecutionResult(
                flow=flow_name,
                output=output,
                attempt=attempt,
                used_fallback=False,
                input=validated,
                failure_reason=failure_reason,
            )

        return self._fallback(definition, validated, max_attempts, failure_reason)

    async def _call_model(self, prompt: str) -> str:
        """One backend call under the timeout.

        Cancellation is never caught here; it propagates to the caller.
        """
        try:
            response = await asyncio.wait_for(
                self.llm.generate(prompt, system_prompt=self.system_prompt),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ModelUnavailableError(f"timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            raise ModelUnavailableError(f"{type(e).__name__}: {e}") from e
        return response.text

    def _parse_output(self, definition: FlowDefinition, text: str) -> BaseModel:
        data = extract_json_object(text)
        try:
            return definition.output_model.model_validate(data)
        except ValidationError as e:
            problems = [f"{v.field}: {v.message}" for v in violations_from(e)]
            raise OutputValidationError(
                f"Reply does not match {definition.output_model.__name__}",
                problems,
            ) from e

    def _fallback(
        self,
        definition: FlowDefinition,
        validated: BaseModel,
        attempts: int,
        failure_reason: Optional[str],
    ) -> ExecutionResult:
        output = definition.output_model.model_validate(definition.fallback(validated))

        logger.error(
            "FLOW_FALLBACK_USED",
            extra={
                "flow": definition.name,
                "attempts": attempts,
                "failure_reason": failure_reason,
            }
        )

        return ExecutionResult(
            flow=definition.name,
            output=output,
            attempt=attempts,
            used_fallback=True,
            input=validated,
            failure_reason=failure_reason,
        )
