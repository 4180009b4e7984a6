"""Built-in flow definitions.

Each flow declares which input fields are raw user text (for the lexicon
classifier), which input fields are structured risk facts, and how its output
reports risk.
"""
from typing import List

from campuscare.shared.models import RiskAssessment, RiskLevel, RiskSource
from campuscare.services.safety_service import RiskSignal
from . import contracts as c
from . import fallbacks, prompts
from .registry import FlowDefinition, FlowRegistry

THERAPEUTIC_RESPONSE = "therapeutic-response"
MENTAL_HEALTH_ASSESSMENT = "mental-health-assessment"
CRISIS_INTERVENTION = "crisis-intervention"
PSYCHOEDUCATION = "psychoeducation"
THERAPEUTIC_ACTIVITIES = "therapeutic-activities"
PEER_SUPPORT_MODERATION = "peer-support-moderation"


def _therapeutic_text(data: c.TherapeuticResponseInput) -> List[str]:
    texts = [data.userMessage]
    if data.userProfile and data.userProfile.currentMoodState:
        texts.append(data.userProfile.currentMoodState)
    return texts


def _therapeutic_risk(output: c.TherapeuticResponseOutput) -> RiskAssessment:
    return RiskAssessment.from_indicators(output.riskIndicators.model_dump(), RiskSource.MODEL)


def _assessment_text(data: c.MentalHealthAssessmentInput) -> List[str]:
    r = data.responses
    texts = [
        r.mood, r.sleep, r.appetite, r.energy, r.concentration,
        r.socialInteraction, r.supportSystem, r.substanceUse or "",
        data.additionalContext or "",
    ]
    return texts + list(r.stressors) + list(r.copingStrategies)


def _assessment_signals(data: c.MentalHealthAssessmentInput) -> List[RiskSignal]:
    signals = []
    if data.responses.suicidalIdeation:
        signals.append((RiskLevel.CRITICAL, "assessment:suicidal_ideation"))
    if data.responses.selfHarmThoughts:
        signals.append((RiskLevel.HIGH, "assessment:self_harm_thoughts"))
    return signals


def _assessment_risk(output: c.MentalHealthAssessmentOutput) -> RiskAssessment:
    urgent = output.immediateActionNeeded or any(
        i.type == "crisis" or i.priority == "urgent" for i in output.suggestedInterventions
    )
    if urgent:
        return RiskAssessment(RiskLevel.HIGH, RiskSource.MODEL, frozenset({"model:immediate_action"}))
    return RiskAssessment.none(RiskSource.MODEL)


def _crisis_text(data: c.CrisisInterventionInput) -> List[str]:
    return [data.userMessage]


def _crisis_signals(data: c.CrisisInterventionInput) -> List[RiskSignal]:
    if data.crisisType == "suicidal":
        return [(RiskLevel.CRITICAL, "crisis_type:suicidal")]
    if data.crisisType == "self-harm":
        return [(RiskLevel.HIGH, "crisis_type:self-harm")]
    return []


def _crisis_risk(output: c.CrisisInterventionOutput) -> RiskAssessment:
    return RiskAssessment(RiskLevel.HIGH, RiskSource.MODEL, frozenset({"model:crisis_protocol"}))


def _psychoeducation_text(data: c.PsychoeducationInput) -> List[str]:
    return list(data.specificQuestions or ())


def _activities_text(data: c.TherapeuticActivitiesInput) -> List[str]:
    return [data.primaryConcern]


def _peer_text(data: c.PeerSupportModerationInput) -> List[str]:
    return [data.message]


BUILTIN_FLOWS = (
    FlowDefinition(
        name=THERAPEUTIC_RESPONSE,
        input_model=c.TherapeuticResponseInput,
        output_model=c.TherapeuticResponseOutput,
        template=prompts.THERAPEUTIC_RESPONSE,
        fallback=fallbacks.therapeutic_response,
        user_text=_therapeutic_text,
        model_risk=_therapeutic_risk,
    ),
    FlowDefinition(
        name=MENTAL_HEALTH_ASSESSMENT,
        input_model=c.MentalHealthAssessmentInput,
        output_model=c.MentalHealthAssessmentOutput,
        template=prompts.MENTAL_HEALTH_ASSESSMENT,
        fallback=fallbacks.mental_health_assessment,
        user_text=_assessment_text,
        risk_signals=_assessment_signals,
        model_risk=_assessment_risk,
    ),
    FlowDefinition(
        name=CRISIS_INTERVENTION,
        input_model=c.CrisisInterventionInput,
        output_model=c.CrisisInterventionOutput,
        template=prompts.CRISIS_INTERVENTION,
        fallback=fallbacks.crisis_intervention,
        user_text=_crisis_text,
        risk_signals=_crisis_signals,
        model_risk=_crisis_risk,
    ),
    FlowDefinition(
        name=PSYCHOEDUCATION,
        input_model=c.PsychoeducationInput,
        output_model=c.PsychoeducationOutput,
        template=prompts.PSYCHOEDUCATION,
        fallback=fallbacks.psychoeducation,
        user_text=_psychoeducation_text,
    ),
    FlowDefinition(
        name=THERAPEUTIC_ACTIVITIES,
        input_model=c.TherapeuticActivitiesInput,
        output_model=c.TherapeuticActivitiesOutput,
        template=prompts.THERAPEUTIC_ACTIVITIES,
        fallback=fallbacks.therapeutic_activities,
        user_text=_activities_text,
    ),
    FlowDefinition(
        name=PEER_SUPPORT_MODERATION,
        input_model=c.PeerSupportModerationInput,
        output_model=c.PeerSupportModerationOutput,
        template=prompts.PEER_SUPPORT_MODERATION,
        fallback=fallbacks.peer_support_moderation,
        user_text=_peer_text,
    ),
)


def default_registry() -> FlowRegistry:
    """Fresh registry holding every built-in flow."""
    registry = FlowRegistry()
    for definition in BUILTIN_FLOWS:
        registry.add(definition)
    return registry
