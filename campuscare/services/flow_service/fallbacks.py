"""Deterministic fallback outputs.

Used when the model path fails after every retry. Each builder returns a
payload that satisfies its flow's output contract. Risk fields are
placeholders only: the escalation router always overwrites them with the
combined risk, so a fallback can never report less risk than the lexicon
classifier found.
"""
from typing import Any, Dict

from campuscare.services.safety_service import suggest_tone
from . import contracts as c

TROUBLE_CONNECTING = (
    "I apologize, but I'm having trouble connecting right now. Please try again, "
    "or consider reaching out to a human counselor if you need immediate support."
)

HUMAN_SUPPORT_NUDGE = (
    "If you prefer human support, you can book a confidential session with a campus "
    "counselor or call the helpline at 1800-89-14416 (Tele-MANAS, 24/7)."
)

UNASSESSED_FLAG = "fallback:risk_unassessed"

EMERGENCY_CONTACTS = [
    {"service": "Tele-MANAS Mental Healthcare Helpline", "contact": "1800-89-14416", "availability": "24/7"},
    {"service": "988 Suicide & Crisis Lifeline", "contact": "Call or text 988", "availability": "24/7"},
    {"service": "Crisis Text Line", "contact": "Text HOME to 741741", "availability": "24/7"},
    {"service": "Emergency Services", "contact": "112 / 911", "availability": "24/7"},
]


def therapeutic_response(data: c.TherapeuticResponseInput) -> Dict[str, Any]:
    return {
        "response": f"{TROUBLE_CONNECTING} {HUMAN_SUPPORT_NUDGE}",
        "emotionalTone": suggest_tone(data.userMessage),
        "riskIndicators": {"level": "none", "flags": [UNASSESSED_FLAG]},
        "followUpRequired": False,
        "escalationNeeded": False,
    }


def mental_health_assessment(data: c.MentalHealthAssessmentInput) -> Dict[str, Any]:
    return {
        # Midpoint placeholder; the assessment could not be scored
        "overallWellbeingScore": 5,
        "areasOfConcern": [],
        "strengths": ["Taking the time to check in on your own wellbeing"],
        "immediateActionNeeded": False,
        "suggestedInterventions": [
            {
                "type": "professional",
                "description": "Talk through your answers with a campus counselor.",
                "priority": "medium",
            }
        ],
        "personalized_message": f"{TROUBLE_CONNECTING} {HUMAN_SUPPORT_NUDGE}",
        "followUpRequired": False,
        "escalationNeeded": False,
    }


def crisis_intervention(data: c.CrisisInterventionInput) -> Dict[str, Any]:
    return {
        "immediateResponse": (
            "I'm really glad you reached out. I'm having trouble connecting right now, "
            "but you don't have to go through this alone. Please contact one of the "
            "people below right away."
        ),
        "safetyPlan": [
            {
                "step": 1,
                "action": "Move away from anything you could use to hurt yourself.",
                "rationale": "Distance from means of harm keeps you safer right now.",
            },
            {
                "step": 2,
                "action": "Call 1800-89-14416 or 988, or text HOME to 741741.",
                "rationale": "A trained person can talk with you immediately.",
            },
            {
                "step": 3,
                "action": "Go somewhere with other people around you.",
                "rationale": "Being with others makes acting on urges less likely.",
            },
            {
                "step": 4,
                "action": "Call emergency services or go to the nearest emergency room if the thoughts get stronger.",
                "rationale": "Emergency care is available around the clock.",
            },
        ],
        "copingTechniques": [
            {
                "name": "Cold water reset",
                "instructions": "Splash cold water on your face or hold something cold.",
                "duration": "30 seconds",
            },
            {
                "name": "5-4-3-2-1 grounding",
                "instructions": "Name 5 things you see, 4 you feel, 3 you hear, 2 you smell, 1 you taste.",
                "duration": "2-3 minutes",
            },
        ],
        "emergencyContacts": EMERGENCY_CONTACTS,
        "followUpRequired": True,
        "escalationNeeded": True,
    }


def psychoeducation(data: c.PsychoeducationInput) -> Dict[str, Any]:
    return {
        "content": {
            "introduction": f"{TROUBLE_CONNECTING} The learning module on {data.topic} will be available shortly.",
            "keyConceptsExplained": [],
            "practicalStrategies": [
                {
                    "strategy": "Slow breathing",
                    "steps": ["Breathe in for 4 counts", "Hold for 4 counts", "Breathe out for 6 counts"],
                    "expectedOutcome": "A calmer body and a little more room to think.",
                }
            ],
            "exercises": [],
            "commonMyths": [],
        },
        "additionalResources": [HUMAN_SUPPORT_NUDGE],
    }


def therapeutic_activities(data: c.TherapeuticActivitiesInput) -> Dict[str, Any]:
    return {
        "activities": [
            {
                "name": "Two-minute breathing break",
                "type": "mindfulness",
                "duration": "2 minutes",
                "difficulty": "easy",
                "instructions": [
                    "Sit comfortably",
                    "Breathe in for 4 counts and out for 6 counts",
                    "Repeat ten times",
                ],
                "purpose": "A small, achievable pause.",
                "expectedBenefit": "Slightly lower tension.",
            }
        ],
        "motivationalMessage": f"{TROUBLE_CONNECTING} Small steps still count.",
    }


def peer_support_moderation(data: c.PeerSupportModerationInput) -> Dict[str, Any]:
    # Without a moderation pass the post is held rather than published
    return {
        "safetyCheck": {
            "isAppropriate": False,
            "concerns": ["Automated moderation unavailable; held for human review"],
        },
        "suggestedResponses": [],
        "peerSupportGuidance": ["Thanks for sharing. A moderator will review your post shortly."],
        "redactedContent": "[PENDING REVIEW]",
    }
