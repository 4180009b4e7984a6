"""Deterministic lexicon risk classifier.

Runs on raw user-authored text, independent of the model, so a risk reading
exists even when the model backend is unavailable.

The ladder is evaluated from the most severe tier down and stops at the
first tier with a match, so "I'm stressed and want to end it all" is
critical, never low. Tier order comes from the rank table, not from the
order phrases were configured in.
"""
import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from campuscare.shared.models import RiskAssessment, RiskLevel, RiskSource
from .config import LexiconConfig

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "ʼ": "'"})

# (level, flag) pairs from structured questionnaire answers
RiskSignal = Tuple[RiskLevel, str]


def normalize(text: str) -> str:
    """Lowercase, straighten apostrophes, collapse whitespace."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.translate(_APOSTROPHES)).strip().lower()


class RiskClassifier:
    """First-match-wins severity ladder over fixed phrase sets.

    Pure and stateless after construction: the same text always yields the
    same RiskAssessment.
    """

    def __init__(self, config: Optional[LexiconConfig] = None):
        self.config = config or LexiconConfig()

        ladder = {}
        for level, phrases in self.config.tiers:
            if level is RiskLevel.NONE:
                continue
            ladder[level] = ladder.get(level, frozenset()) | frozenset(phrases)
        # Most severe first
        self._ladder: List[Tuple[RiskLevel, Tuple[str, ...]]] = [
            (level, tuple(sorted(ladder[level])))
            for level in sorted(ladder, key=lambda lvl: lvl.rank, reverse=True)
        ]

        logger.info(
            "RISK_CLASSIFIER_INITIALIZED",
            extra={
                "lexicon_version": self.config.lexicon_version,
                "tier_sizes": {level.value: len(p) for level, p in self._ladder},
            }
        )

    def classify(self, raw_text: str) -> RiskAssessment:
        """Classify one piece of user-authored text.

        Args:
            raw_text: Text exactly as the user wrote it

        Returns:
            RiskAssessment with source LEXICON and one
            ``lexicon:<phrase>`` flag per matched phrase of the winning tier
        """
        text = normalize(raw_text)
        if text:
            for level, phrases in self._ladder:
                matched = [p for p in phrases if p in text]
                if matched:
                    return RiskAssessment(
                        level=level,
                        source=RiskSource.LEXICON,
                        flags=frozenset(f"lexicon:{p}" for p in matched),
                    )
        return RiskAssessment.none(RiskSource.LEXICON)

    def classify_many(self, texts: Iterable[str]) -> RiskAssessment:
        """Classify several texts and keep the most severe reading.

        Flags of equally severe readings are merged.
        """
        worst = RiskAssessment.none(RiskSource.LEXICON)
        for text in texts:
            result = self.classify(text)
            if result.level.rank > worst.level.rank:
                worst = result
            elif result.level is worst.level and result.flags:
                worst = RiskAssessment(
                    level=worst.level,
                    source=RiskSource.LEXICON,
                    flags=worst.flags | result.flags,
                )
        return worst

    def assess(
        self,
        texts: Iterable[str],
        signals: Sequence[RiskSignal] = (),
    ) -> RiskAssessment:
        """Combine lexicon matches with structured answer signals.

        Structured signals (e.g. a questionnaire's "suicidal ideation: yes")
        are deterministic facts about the input, so they rank alongside
        lexicon matches rather than being left to the model.
        """
        result = self.classify_many(texts)
        for level, flag in signals:
            if level.rank > result.level.rank:
                result = RiskAssessment(level, RiskSource.LEXICON, frozenset({flag}))
            elif level is result.level and level is not RiskLevel.NONE:
                result = RiskAssessment(level, RiskSource.LEXICON, result.flags | {flag})

        if result.level is not RiskLevel.NONE:
            logger.info(
                "RISK_CLASSIFIED",
                extra={
                    "risk_level": result.level.value,
                    "flag_count": len(result.flags),
                    "lexicon_version": self.config.lexicon_version,
                }
            )
        return result

    def suggest_tone(self, raw_text: str) -> str:
        return suggest_tone(raw_text, self.config)


def suggest_tone(raw_text: str, config: Optional[LexiconConfig] = None) -> str:
    """Pick an emotional tone for a reply to ``raw_text``.

    Tone never feeds into risk; it only fills reply metadata when the model
    could not.
    """
    config = config or _DEFAULT_CONFIG
    text = normalize(raw_text)
    for tone, keywords in config.tone_keywords:
        if any(k in text for k in keywords):
            return tone
    return config.default_tone


_DEFAULT_CONFIG = LexiconConfig()
