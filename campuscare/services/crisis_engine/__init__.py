"""Crisis Engine: risk merging, escalation overrides and escalation events.

Components:
- router.py: EscalationRouter (max-severity merge, forced flags, redirect)
- publisher.py: EscalationEventPublisher (Kinesis, best-effort)
"""

from .publisher import EscalationEvent, EscalationEventPublisher
from .router import FORCED_FLAGS, EscalationRouter, RoutingDecision

__all__ = [
    "EscalationEvent",
    "EscalationEventPublisher",
    "FORCED_FLAGS",
    "EscalationRouter",
    "RoutingDecision",
]
