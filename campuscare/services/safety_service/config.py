"""Lexicon configuration for the deterministic risk classifier.

Each risk tier maps to a fixed phrase set. Matching is a case-insensitive
substring match, so phrases are stored lowercase with straight apostrophes.

NOTE: the phrase lists merge two older keyword scans that never agreed
exactly. They need clinical review before production use.
"""
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Tuple

from campuscare.shared.models import RiskLevel


# Direct suicidal-intent phrasing
CRITICAL_PHRASES: FrozenSet[str] = frozenset({
    "kill myself",
    "killing myself",
    "suicide",
    "suicidal",
    "end it all",
    "ending it all",
    "end my life",
    "take my own life",
    "better off dead",
    "want to die",
    "wanna die",
    "don't want to live",
    "don't want to be alive",
    "no reason to live",
    "unalive",
})

# Self-harm actions, distinct from intent-to-die language
HIGH_PHRASES: FrozenSet[str] = frozenset({
    "hurt myself",
    "hurting myself",
    "harm myself",
    "harming myself",
    "self harm",
    "self-harm",
    "cut myself",
    "cutting myself",
    "burn myself",
    "burned myself",
    "punish myself",
})

# Hopelessness, worthlessness, isolation
MODERATE_PHRASES: FrozenSet[str] = frozenset({
    "hopeless",
    "worthless",
    "no point",
    "pointless",
    "nobody cares",
    "no one cares",
    "all alone",
    "so alone",
    "isolated",
    "a burden",
    "hate myself",
    "give up",
    "nothing matters",
    "empty inside",
    "trapped",
})

# Acute stress and overwhelm
LOW_PHRASES: FrozenSet[str] = frozenset({
    "stressed",
    "stressful",
    "overwhelmed",
    "overwhelming",
    "can't cope",
    "cannot cope",
    "anxious",
    "panicking",
    "burned out",
    "burnt out",
    "too much pressure",
    "can't sleep",
})

DEFAULT_TIERS: Tuple[Tuple[RiskLevel, FrozenSet[str]], ...] = (
    (RiskLevel.CRITICAL, CRITICAL_PHRASES),
    (RiskLevel.HIGH, HIGH_PHRASES),
    (RiskLevel.MODERATE, MODERATE_PHRASES),
    (RiskLevel.LOW, LOW_PHRASES),
)

# Emotional tone hints, checked in order. Never used for risk.
TONE_KEYWORDS: Tuple[Tuple[str, FrozenSet[str]], ...] = (
    ("supportive", frozenset({"stressed", "anxious", "worried"})),
    ("empathetic", frozenset({"sad", "depressed", "down"})),
    ("validating", frozenset({"angry", "frustrated"})),
    ("exploratory", frozenset({"help", "advice"})),
)
DEFAULT_TONE = "encouraging"


@dataclass(frozen=True)
class LexiconConfig:
    """Phrase tiers plus a version string for the audit trail."""
    tiers: Tuple[Tuple[RiskLevel, FrozenSet[str]], ...] = DEFAULT_TIERS
    tone_keywords: Tuple[Tuple[str, FrozenSet[str]], ...] = TONE_KEYWORDS
    default_tone: str = DEFAULT_TONE
    lexicon_version: str = field(default="2025.09.01")

    def phrases_for(self, level: RiskLevel) -> FrozenSet[str]:
        return frozenset().union(*(phrases for tier, phrases in self.tiers if tier is level))

    def extended(self, level: RiskLevel, phrases: Iterable[str]) -> "LexiconConfig":
        """Return a copy with extra phrases added to one tier.

        Args:
            level: Tier to extend; NONE cannot carry phrases
            phrases: Additional phrases (normalized to lowercase)

        Raises:
            ValueError: If ``level`` is NONE
        """
        if level is RiskLevel.NONE:
            raise ValueError("The 'none' tier cannot carry phrases")

        extra = frozenset(p.strip().lower() for p in phrases if p and p.strip())
        tiers = dict(self.tiers)
        tiers[level] = tiers.get(level, frozenset()) | extra
        return replace(self, tiers=tuple(tiers.items()))
