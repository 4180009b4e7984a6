"""Shared domain models for the CampusCare pipeline."""
from .conversation import Message, Role
from .risk import (
    ESCALATION_THRESHOLD,
    RISK_RANK,
    RiskAssessment,
    RiskLevel,
    RiskSource,
    max_severity,
)

__all__ = [
    "Message",
    "Role",
    "ESCALATION_THRESHOLD",
    "RISK_RANK",
    "RiskAssessment",
    "RiskLevel",
    "RiskSource",
    "max_severity",
]
