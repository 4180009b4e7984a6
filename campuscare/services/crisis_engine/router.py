"""Crisis escalation router.

Merges the model-reported risk with the lexicon classifier's risk and
applies the escalation policy to a validated flow output.

Policy:
- Combined level is the maximum severity of the two readings.
- Combined level is always written back into ``riskIndicators``.
- At HIGH or above, follow-up and escalation flags are forced on.
- CRITICAL points the caller at the crisis-intervention flow.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel

from campuscare.shared.models import (
    ESCALATION_THRESHOLD,
    RiskAssessment,
    RiskLevel,
    RiskSource,
    max_severity,
)
from campuscare.services.flow_service.contracts import RiskIndicators
from campuscare.services.flow_service.flows import CRISIS_INTERVENTION

logger = logging.getLogger(__name__)

# Output fields forced to True once escalation is required
FORCED_FLAGS = ("followUpRequired", "escalationNeeded", "immediateActionNeeded")


@dataclass(frozen=True)
class RoutingDecision:
    """Result of routing one flow output.

    Attributes:
        risk: Combined risk assessment
        output: Output with combined risk and forced flags applied
        escalation_needed: Whether a human must be brought in
        follow_up_required: Whether the session needs follow-up
        redirect_flow: Flow the caller should switch to, if any
    """
    risk: RiskAssessment
    output: BaseModel
    escalation_needed: bool
    follow_up_required: bool
    redirect_flow: Optional[str] = None


class EscalationRouter:
    """Applies the max-severity merge and escalation overrides."""

    def __init__(
        self,
        threshold: RiskLevel = ESCALATION_THRESHOLD,
        crisis_flow: str = CRISIS_INTERVENTION,
    ):
        self.threshold = threshold
        self.crisis_flow = crisis_flow

    def route(self, model_risk: RiskAssessment, lexicon_risk: RiskAssessment) -> RiskAssessment:
        """Merge two readings into one combined assessment.

        Args:
            model_risk: Risk reported by the model output
            lexicon_risk: Risk found by the deterministic classifier

        Returns:
            New RiskAssessment; neither input is modified
        """
        level = max_severity(model_risk.level, lexicon_risk.level)
        # Agreement is recorded against the deterministic source
        source = RiskSource.LEXICON if model_risk.level == lexicon_risk.level else RiskSource.COMBINED
        return RiskAssessment(
            level=level,
            source=source,
            flags=model_risk.flags | lexicon_risk.flags,
        )

    def decide(
        self,
        flow_name: str,
        output: BaseModel,
        model_risk: RiskAssessment,
        lexicon_risk: RiskAssessment,
    ) -> RoutingDecision:
        """Route a validated flow output.

        Args:
            flow_name: Flow that produced ``output``
            output: Validated output model
            model_risk: Risk read from the output (or a placeholder)
            lexicon_risk: Classifier risk for the user text

        Returns:
            RoutingDecision carrying the overridden output
        """
        combined = self.route(model_risk, lexicon_risk)
        escalate = combined.level.at_least(self.threshold)
        fields = type(output).model_fields

        update: Dict[str, Any] = {}
        if "riskIndicators" in fields:
            update["riskIndicators"] = RiskIndicators(
                level=combined.level.value,
                flags=sorted(combined.flags),
            )
        if escalate:
            for name in FORCED_FLAGS:
                if name in fields and getattr(output, name) is not True:
                    update[name] = True

        routed = output.model_copy(update=update) if update else output

        redirect_flow = None
        if combined.level == RiskLevel.CRITICAL and flow_name != self.crisis_flow:
            redirect_flow = self.crisis_flow

        if escalate:
            logger.critical(
                "ESCALATION_FORCED",
                extra={
                    "flow": flow_name,
                    "combined_level": combined.level.value,
                    "model_level": model_risk.level.value,
                    "lexicon_level": lexicon_risk.level.value,
                    "flags": sorted(combined.flags),
                    "overridden_fields": sorted(k for k in update if k != "riskIndicators"),
                    "redirect_flow": redirect_flow,
                }
            )

        return RoutingDecision(
            risk=combined,
            output=routed,
            escalation_needed=escalate or bool(getattr(routed, "escalationNeeded", False)),
            follow_up_required=escalate or bool(getattr(routed, "followUpRequired", False)),
            redirect_flow=redirect_flow,
        )
