"""Schema contract registry.

Maps each flow name to its definition. Definitions are registered once at
start-up and only read afterwards, so a registry can be shared by concurrent
requests.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel

from campuscare.shared.models import RiskAssessment, RiskSource
from campuscare.services.safety_service import RiskSignal
from .errors import DuplicateFlowError, UnknownFlowError
from .templates import PromptTemplate

logger = logging.getLogger(__name__)


def _no_text(_: BaseModel) -> Sequence[str]:
    return ()


def _no_signals(_: BaseModel) -> Sequence[RiskSignal]:
    return ()


def _no_model_risk(_: BaseModel) -> RiskAssessment:
    return RiskAssessment.none(RiskSource.MODEL)


@dataclass(frozen=True)
class FlowDefinition:
    """Everything needed to run one flow.

    Attributes:
        name: Public flow identifier, e.g. ``therapeutic-response``
        input_model: Contract for caller input
        output_model: Contract for the model's structured reply
        template: Prompt template for this flow
        user_text: Picks the raw user-authored text out of validated input
        risk_signals: Structured (level, flag) facts from validated input
        model_risk: Reads the model-reported risk out of validated output
        fallback: Builds a contract-conformant output from validated input
            when the model path fails
    """
    name: str
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]
    template: PromptTemplate
    user_text: Callable[[BaseModel], Sequence[str]] = _no_text
    risk_signals: Callable[[BaseModel], Sequence[RiskSignal]] = _no_signals
    model_risk: Callable[[BaseModel], RiskAssessment] = _no_model_risk
    fallback: Optional[Callable[[BaseModel], Dict[str, Any]]] = None


class FlowRegistry:
    """Name -> FlowDefinition lookup."""

    def __init__(self):
        self._flows: Dict[str, FlowDefinition] = {}

    def register(
        self,
        name: str,
        input_schema: Type[BaseModel],
        output_schema: Type[BaseModel],
        template: PromptTemplate,
        *,
        fallback: Callable[[BaseModel], Dict[str, Any]],
        **hooks,
    ) -> FlowDefinition:
        """Register a flow together with the fallback that answers when the model cannot.

        Args:
            name: Flow identifier
            input_schema: Input contract model
            output_schema: Output contract model
            template: Prompt template
            fallback: Builds a contract-conformant output from validated input
            **hooks: Optional ``user_text``, ``risk_signals``, ``model_risk``

        Raises:
            DuplicateFlowError: If ``name`` is already registered
            ValueError: If ``fallback`` is None
        """
        return self.add(FlowDefinition(
            name=name,
            input_model=input_schema,
            output_model=output_schema,
            template=template,
            fallback=fallback,
            **hooks,
        ))

    def add(self, definition: FlowDefinition) -> FlowDefinition:
        # Every flow must be able to answer when the model cannot
        if definition.fallback is None:
            raise ValueError(f"Flow {definition.name!r} needs a fallback builder")
        if definition.name in self._flows:
            logger.error("FLOW_REGISTRATION_DUPLICATE", extra={"flow": definition.name})
            raise DuplicateFlowError(definition.name)

        self._flows[definition.name] = definition
        logger.info(
            "FLOW_REGISTERED",
            extra={
                "flow": definition.name,
                "input_contract": definition.input_model.__name__,
                "output_contract": definition.output_model.__name__,
            }
        )
        return definition

    def lookup(self, name: str) -> FlowDefinition:
        """Resolve a flow by name.

        Raises:
            UnknownFlowError: If no flow has that name
        """
        try:
            return self._flows[name]
        except KeyError:
            raise UnknownFlowError(name) from None

    def names(self) -> List[str]:
        return list(self._flows)

    def __contains__(self, name: object) -> bool:
        return name in self._flows

    def __len__(self) -> int:
        return len(self._flows)
