"""Risk level and risk assessment domain models.

Risk severity is a total order over an enumerated scale. Comparisons always
go through the explicit rank table below, never through string ordering.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional


class RiskLevel(Enum):
    """Risk classification levels, least to most severe."""
    NONE = "none"
    LOW = "low"               # Acute stress / overwhelm
    MODERATE = "moderate"     # Hopelessness, worthlessness, isolation
    HIGH = "high"             # Self-harm actions
    CRITICAL = "critical"     # Suicidal intent - crisis path

    @property
    def rank(self) -> int:
        return RISK_RANK[self]

    def at_least(self, other: "RiskLevel") -> bool:
        """Check if this level is as severe as ``other`` or more."""
        return self.rank >= other.rank

    @classmethod
    def from_value(cls, value: Any) -> "RiskLevel":
        """Parse a level from its string value (case-insensitive).

        Raises:
            ValueError: If the value is not a known level
        """
        if isinstance(value, RiskLevel):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown risk level: {value!r}") from None


RISK_RANK: Dict[RiskLevel, int] = {
    RiskLevel.NONE: 0,
    RiskLevel.LOW: 1,
    RiskLevel.MODERATE: 2,
    RiskLevel.HIGH: 3,
    RiskLevel.CRITICAL: 4,
}

# Combined levels at or above this force follow-up and escalation
ESCALATION_THRESHOLD = RiskLevel.HIGH


def max_severity(first: RiskLevel, second: RiskLevel) -> RiskLevel:
    """Return the more severe of two levels."""
    return first if first.rank >= second.rank else second


class RiskSource(Enum):
    """Which component produced a risk assessment."""
    MODEL = "model"
    LEXICON = "lexicon"
    COMBINED = "combined"


@dataclass(frozen=True)
class RiskAssessment:
    """A single risk reading.

    Immutable - merging two assessments always produces a new instance.
    """
    level: RiskLevel
    source: RiskSource
    flags: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.flags, frozenset):
            object.__setattr__(self, "flags", frozenset(self.flags))

    @property
    def requires_escalation(self) -> bool:
        return self.level.at_least(ESCALATION_THRESHOLD)

    @classmethod
    def none(cls, source: RiskSource, flags: Iterable[str] = ()) -> "RiskAssessment":
        return cls(level=RiskLevel.NONE, source=source, flags=frozenset(flags))

    @classmethod
    def from_indicators(
        cls,
        indicators: Optional[Dict[str, Any]],
        source: RiskSource = RiskSource.MODEL,
    ) -> "RiskAssessment":
        """Build an assessment from a ``riskIndicators`` output block.

        Args:
            indicators: Dict with ``level`` and optional ``flags``
            source: Source to record on the assessment

        Returns:
            RiskAssessment; missing indicators read as NONE
        """
        if not indicators:
            return cls.none(source)
        return cls(
            level=RiskLevel.from_value(indicators.get("level", "none")),
            source=source,
            flags=frozenset(indicators.get("flags") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "level": self.level.value,
            "source": self.source.value,
            "flags": sorted(self.flags),
        }
