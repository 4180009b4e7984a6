"""Safety Service: deterministic lexicon risk classification.

Every user-authored text passes through the classifier independently of the
model. Its reading can only raise the final risk level, never lower it.

Usage:
    from campuscare.services.safety_service import RiskClassifier
    classifier = RiskClassifier()
    assessment = classifier.classify("I'm so stressed about exams")
"""

from .classifier import RiskClassifier, RiskSignal, normalize, suggest_tone
from .config import (
    CRITICAL_PHRASES,
    HIGH_PHRASES,
    LOW_PHRASES,
    MODERATE_PHRASES,
    LexiconConfig,
)

__all__ = [
    "RiskClassifier",
    "RiskSignal",
    "normalize",
    "suggest_tone",
    "LexiconConfig",
    "CRITICAL_PHRASES",
    "HIGH_PHRASES",
    "MODERATE_PHRASES",
    "LOW_PHRASES",
]
