"""Input and output contracts for the built-in flows.

Contracts are declarative pydantic models: type, enum membership (Literal),
numeric range and required/optional. Validating a payload collects every
violation at once.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

RiskLevelName = Literal["none", "low", "moderate", "high", "critical"]


class Contract(BaseModel):
    """Base for all flow contracts. Unknown keys are dropped."""
    model_config = ConfigDict(extra="ignore")


class EscalationFlags(Contract):
    """Fields the escalation router can force to True."""
    followUpRequired: bool = False
    escalationNeeded: bool = False


class RiskIndicators(Contract):
    level: RiskLevelName
    flags: Optional[List[str]] = None


# ============================================================================
# therapeutic-response
# ============================================================================

class UserProfile(Contract):
    preferredLanguage: Optional[Literal["english", "hindi", "kashmiri"]] = None
    previousConcerns: Optional[List[str]] = None
    currentMoodState: Optional[str] = None


class TherapeuticResponseInput(Contract):
    userMessage: str = Field(min_length=1)
    userProfile: Optional[UserProfile] = None


class TherapeuticResponseOutput(EscalationFlags):
    response: str = Field(min_length=1)
    emotionalTone: Literal["supportive", "empathetic", "encouraging", "validating", "exploratory"]
    suggestedTechniques: Optional[List[str]] = None
    followUpQuestions: Optional[List[str]] = None
    riskIndicators: RiskIndicators


# ============================================================================
# mental-health-assessment
# ============================================================================

class AssessmentResponses(Contract):
    mood: str
    sleep: str
    appetite: str
    energy: str
    concentration: str
    socialInteraction: str
    stressors: List[str]
    copingStrategies: List[str]
    supportSystem: str
    substanceUse: Optional[str] = None
    selfHarmThoughts: bool
    suicidalIdeation: bool


class MentalHealthAssessmentInput(Contract):
    responses: AssessmentResponses
    additionalContext: Optional[str] = None


class AreaOfConcern(Contract):
    area: str
    severity: Literal["mild", "moderate", "severe"]
    recommendations: List[str]


class SuggestedIntervention(Contract):
    type: Literal["self-help", "peer-support", "professional", "crisis"]
    description: str
    priority: Literal["low", "medium", "high", "urgent"]


class MentalHealthAssessmentOutput(EscalationFlags):
    overallWellbeingScore: float = Field(ge=1, le=10)
    areasOfConcern: List[AreaOfConcern]
    strengths: List[str]
    immediateActionNeeded: bool
    suggestedInterventions: List[SuggestedIntervention]
    personalized_message: str


# ============================================================================
# crisis-intervention
# ============================================================================

class CrisisInterventionInput(Contract):
    userMessage: str = Field(min_length=1)
    crisisType: Literal["suicidal", "self-harm", "panic", "psychosis", "violence", "substance", "other"]
    currentLocation: Optional[str] = None
    hasSupport: bool
    previousAttempts: Optional[bool] = None


class SafetyPlanStep(Contract):
    step: int = Field(ge=1)
    action: str
    rationale: str


class CopingTechnique(Contract):
    name: str
    instructions: str
    duration: str


class EmergencyContact(Contract):
    service: str
    contact: str
    availability: str


class CrisisInterventionOutput(EscalationFlags):
    immediateResponse: str = Field(min_length=1)
    safetyPlan: List[SafetyPlanStep] = Field(min_length=1)
    copingTechniques: List[CopingTechnique]
    emergencyContacts: List[EmergencyContact] = Field(min_length=1)
    followUpRequired: bool = True
    escalationNeeded: bool = True

    @field_validator("safetyPlan")
    @classmethod
    def _order_steps(cls, steps: List[SafetyPlanStep]) -> List[SafetyPlanStep]:
        return sorted(steps, key=lambda s: s.step)

    @field_validator("followUpRequired", "escalationNeeded")
    @classmethod
    def _always_escalate(cls, value: bool) -> bool:
        # A crisis response always hands off to a human
        return True


# ============================================================================
# psychoeducation
# ============================================================================

class PsychoeducationInput(Contract):
    topic: Literal[
        "anxiety", "depression", "stress", "trauma", "relationships",
        "self-esteem", "grief", "anger", "addiction", "eating-disorders",
        "sleep", "mindfulness", "boundaries", "communication", "coping-skills",
    ]
    userLevel: Literal["beginner", "intermediate", "advanced"]
    preferredFormat: Literal["explanation", "exercises", "strategies", "mixed"]
    specificQuestions: Optional[List[str]] = None


class KeyConcept(Contract):
    concept: str
    explanation: str
    relevance: str


class PracticalStrategy(Contract):
    strategy: str
    steps: List[str]
    expectedOutcome: str


class Exercise(Contract):
    name: str
    purpose: str
    instructions: List[str]
    frequency: str


class Myth(Contract):
    myth: str
    reality: str


class PsychoeducationContent(Contract):
    introduction: str
    keyConceptsExplained: List[KeyConcept]
    practicalStrategies: List[PracticalStrategy]
    exercises: List[Exercise]
    commonMyths: List[Myth]


class PsychoeducationOutput(Contract):
    content: PsychoeducationContent
    additionalResources: List[str]
    homework: Optional[List[str]] = None


# ============================================================================
# therapeutic-activities
# ============================================================================

ActivityKind = Literal[
    "journaling", "meditation", "exercise", "creative", "social",
    "cognitive", "behavioral", "mindfulness", "self-care", "skill-building",
]


class TherapeuticActivitiesInput(Contract):
    primaryConcern: str = Field(min_length=1)
    availableTime: Literal["5min", "15min", "30min", "1hour", "ongoing"]
    preferredActivities: Optional[List[ActivityKind]] = None
    currentMood: float = Field(ge=1, le=10)
    energyLevel: Literal["low", "medium", "high"]


class Activity(Contract):
    name: str
    type: str
    duration: str
    difficulty: Literal["easy", "moderate", "challenging"]
    instructions: List[str]
    purpose: str
    expectedBenefit: str
    trackingMetric: Optional[str] = None


class WeeklyPlan(Contract):
    monday: List[str]
    tuesday: List[str]
    wednesday: List[str]
    thursday: List[str]
    friday: List[str]
    saturday: List[str]
    sunday: List[str]


class TherapeuticActivitiesOutput(Contract):
    activities: List[Activity]
    weeklyPlan: Optional[WeeklyPlan] = None
    motivationalMessage: str


# ============================================================================
# peer-support-moderation
# ============================================================================

class PeerContextEntry(Contract):
    author: str
    content: str
    timestamp: str


class PeerSupportModerationInput(Contract):
    message: str = Field(min_length=1)
    conversationContext: Optional[List[PeerContextEntry]] = None
    messageType: Literal["initial-post", "reply", "advice", "sharing"]


class SafetyCheck(Contract):
    isAppropriate: bool
    concerns: Optional[List[str]] = None
    suggestedEdits: Optional[List[str]] = None


class SuggestedResponse(Contract):
    tone: Literal["supportive", "empathetic", "encouraging", "practical"]
    response: str


class PeerSupportModerationOutput(Contract):
    safetyCheck: SafetyCheck
    enhancedMessage: Optional[str] = None
    suggestedResponses: List[SuggestedResponse]
    peerSupportGuidance: List[str]
    redactedContent: str
