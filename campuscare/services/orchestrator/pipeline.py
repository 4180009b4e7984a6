"""Flow pipeline: the single entry point for invoking a flow.

invoke(flow, input, context):
  1. resolve flow and validate input (errors here reach the caller)
  2. window the conversation context
  3. classify user-authored text with the lexicon classifier
  4. execute the flow against the model (retry, then fallback)
  5. merge risks and apply escalation overrides
  6. publish an escalation event when a human must be brought in

Only UnknownFlowError and InputValidationError escape; every model-side
failure ends in a contract-conformant fallback.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from campuscare.shared.models import Message, RiskAssessment, RiskSource
from campuscare.shared.utils import hash_pii, hash_text_for_audit
from campuscare.services.conversation_service import ConversationWindow
from campuscare.services.crisis_engine import (
    EscalationEvent,
    EscalationEventPublisher,
    EscalationRouter,
)
from campuscare.services.flow_service import (
    FieldViolation,
    FlowExecutor,
    FlowRegistry,
    InputValidationError,
    PromptCompiler,
    default_registry,
    validate_input,
)
from campuscare.services.llm_service import BaseLLM, create_llm
from campuscare.services.safety_service import RiskClassifier
from .config import PipelineConfig

logger = logging.getLogger(__name__)

# Model risk recorded when the output came from a fallback builder
MODEL_UNAVAILABLE_FLAG = "model:unavailable"


@dataclass(frozen=True)
class FlowResult:
    """What a caller gets back from :meth:`FlowPipeline.invoke`."""
    flow: str
    output: Dict[str, Any]
    risk: RiskAssessment
    attempt: int
    used_fallback: bool
    escalation_needed: bool
    follow_up_required: bool
    redirect_flow: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "flow": self.flow,
            "output": self.output,
            "risk": self.risk.to_dict(),
            "attempt": self.attempt,
            "usedFallback": self.used_fallback,
            "escalationNeeded": self.escalation_needed,
            "followUpRequired": self.follow_up_required,
            "redirectFlow": self.redirect_flow,
        }


class FlowPipeline:
    """Wires registry, classifier, executor, router and publisher together.

    Holds no per-session state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        llm: BaseLLM,
        registry: Optional[FlowRegistry] = None,
        classifier: Optional[RiskClassifier] = None,
        router: Optional[EscalationRouter] = None,
        publisher: Optional[EscalationEventPublisher] = None,
        config: Optional[PipelineConfig] = None,
    ):
        """Initialize pipeline.

        Args:
            llm: Model backend
            registry: Flow registry (built-in flows if None)
            classifier: Lexicon risk classifier (default lexicon if None)
            router: Escalation router (default threshold if None)
            publisher: Escalation event publisher (disabled if None)
            config: Pipeline configuration (defaults if None)
        """
        self.config = config or PipelineConfig()
        self.registry = registry or default_registry()
        self.classifier = classifier or RiskClassifier()
        self.router = router or EscalationRouter()
        self.publisher = publisher or EscalationEventPublisher(
            stream_name=self.config.stream_name,
            enabled=self.config.escalation_publishing_enabled,
        )
        self.executor = FlowExecutor(
            registry=self.registry,
            llm=llm,
            compiler=PromptCompiler(self.config.max_context_messages),
            max_retries=self.config.max_retries,
            timeout_seconds=self.config.model_timeout_seconds,
        )

        logger.info(
            "FLOW_PIPELINE_INITIALIZED",
            extra={
                "flows": self.registry.names(),
                "max_retries": self.config.max_retries,
                "max_context_messages": self.config.max_context_messages,
            }
        )

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "FlowPipeline":
        """Build a pipeline with the backend named in ``config``."""
        return cls(llm=create_llm(config.llm_config()), config=config)

    def flow_names(self):
        return self.registry.names()

    async def invoke(
        self,
        flow_name: str,
        payload: Any,
        context: Iterable[Any] = (),
        session_id: Optional[str] = None,
    ) -> FlowResult:
        """Invoke a flow end to end.

        Args:
            flow_name: Registered flow name
            payload: Flow input (dict or input model)
            context: Prior messages, oldest first (Message or dict)
            session_id: Caller session identifier, hashed before logging

        Returns:
            FlowResult with the routed output

        Raises:
            UnknownFlowError: Flow not registered
            InputValidationError: Input or context breaks the contract
        """
        definition = self.registry.lookup(flow_name)
        validated = validate_input(definition, payload)
        window = self._window(flow_name, context)

        user_texts = definition.user_text(validated)
        lexicon_risk = self.classifier.assess(
            user_texts,
            definition.risk_signals(validated),
        )

        result = await self.executor.execute(flow_name, validated, window)

        if result.used_fallback:
            model_risk = RiskAssessment.none(RiskSource.MODEL, {MODEL_UNAVAILABLE_FLAG})
        else:
            model_risk = definition.model_risk(result.output)

        decision = self.router.decide(flow_name, result.output, model_risk, lexicon_risk)
        session_id_hash = hash_pii(session_id) if session_id else None

        if decision.escalation_needed:
            event = EscalationEvent.create(
                flow=flow_name,
                risk=decision.risk,
                session_id_hash=session_id_hash,
                redirect_flow=decision.redirect_flow,
                used_fallback=result.used_fallback,
            )
            # put_record blocks; run it off the event loop
            await asyncio.to_thread(self.publisher.publish, event)

        logger.info(
            "FLOW_INVOCATION_COMPLETED",
            extra={
                "flow": flow_name,
                "session_id_hash": session_id_hash,
                "text_hash": hash_text_for_audit("\n".join(user_texts)),
                "risk_level": decision.risk.level.value,
                "risk_source": decision.risk.source.value,
                "attempt": result.attempt,
                "used_fallback": result.used_fallback,
                "escalation_needed": decision.escalation_needed,
                "redirect_flow": decision.redirect_flow,
            }
        )

        return FlowResult(
            flow=flow_name,
            output=decision.output.model_dump(mode="json"),
            risk=decision.risk,
            attempt=result.attempt,
            used_fallback=result.used_fallback,
            escalation_needed=decision.escalation_needed,
            follow_up_required=decision.follow_up_required,
            redirect_flow=decision.redirect_flow,
        )

    def _window(self, flow_name: str, context: Iterable[Any]) -> Tuple[Message, ...]:
        window = ConversationWindow(self.config.max_context_messages)
        try:
            window.extend(context or ())
        except (TypeError, ValueError) as e:
            raise InputValidationError(
                flow_name, [FieldViolation(field="conversationHistory", message=str(e))]
            ) from None
        return window.snapshot()
