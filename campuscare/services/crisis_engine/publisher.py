"""Escalation event publisher.

Publishes escalation events to a Kinesis stream so that counselor-facing
systems can pick them up independently of the request path.

Publishing is best-effort: a failure never changes the response the
student sees. Failures are logged at CRITICAL level for alerting.
"""
import json
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import FrozenSet, Optional

from campuscare.shared.models import RiskAssessment

logger = logging.getLogger(__name__)

DEFAULT_STREAM_NAME = "campuscare-escalation-events"
ANONYMOUS_PARTITION_KEY = "anonymous"


@dataclass(frozen=True)
class EscalationEvent:
    """Immutable escalation event.

    Only hashed session identifiers are carried; no user text.
    """
    event_id: str
    flow: str
    risk_level: str
    flags: FrozenSet[str] = field(default_factory=frozenset)
    session_id_hash: Optional[str] = None
    redirect_flow: Optional[str] = None
    used_fallback: bool = False
    event_type: str = "flow.escalation.required"
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        flow: str,
        risk: RiskAssessment,
        session_id_hash: Optional[str] = None,
        redirect_flow: Optional[str] = None,
        used_fallback: bool = False,
    ) -> "EscalationEvent":
        return cls(
            event_id=f"evt_{uuid.uuid4().hex[:12]}",
            flow=flow,
            risk_level=risk.level.value,
            flags=risk.flags,
            session_id_hash=session_id_hash,
            redirect_flow=redirect_flow,
            used_fallback=used_fallback,
        )

    def to_kinesis_payload(self) -> dict:
        """Convert to Kinesis record payload.

        Returns:
            Dictionary for Kinesis put_record Data field
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "source": "flow-orchestrator",
            "data": {
                "flow": self.flow,
                "session_id_hash": self.session_id_hash,
                "risk_level": self.risk_level,
                "flags": sorted(self.flags),
                "redirect_flow": self.redirect_flow,
                "used_fallback": self.used_fallback,
                "requires_human_intervention": True,
            }
        }


class EscalationEventPublisher:
    """Publishes escalation events to Kinesis.

    Failure Handling:
        - Publishing failure does NOT block or alter the flow response
        - Failures are logged at CRITICAL level with the payload for
          manual processing
    """

    def __init__(
        self,
        stream_name: str = DEFAULT_STREAM_NAME,
        enabled: bool = False,
        region: Optional[str] = None,
    ):
        """Initialize publisher.

        Args:
            stream_name: Kinesis stream name
            enabled: Whether publishing is enabled (off for local dev)
            region: AWS region (defaults to AWS_REGION env var)
        """
        self.stream_name = stream_name
        self.enabled = enabled
        self.region = region or os.getenv("AWS_REGION", "us-east-1")
        self._kinesis_client = None

        logger.info(
            "ESCALATION_PUBLISHER_INITIALIZED",
            extra={
                "stream_name": stream_name,
                "enabled": enabled,
                "region": self.region,
            }
        )

    @property
    def kinesis_client(self):
        """Lazy initialization of Kinesis client."""
        if self._kinesis_client is None and self.enabled:
            try:
                import boto3
                self._kinesis_client = boto3.client("kinesis", region_name=self.region)
            except Exception as e:
                logger.error("KINESIS_CLIENT_INIT_FAILED", extra={"error": str(e)})
        return self._kinesis_client

    def publish(self, event: EscalationEvent) -> bool:
        """Publish one escalation event.

        Returns:
            True if published, False otherwise. Never raises.
        """
        if not self.enabled:
            logger.info(
                "ESCALATION_PUBLISH_SKIPPED",
                extra={"event_id": event.event_id, "reason": "publishing_disabled"}
            )
            return False

        payload = event.to_kinesis_payload()

        client = self.kinesis_client
        if client is None:
            logger.critical(
                "ESCALATION_EVENT_FALLBACK_LOG",
                extra={
                    "event_id": event.event_id,
                    "payload": json.dumps(payload),
                    "reason": "kinesis_client_unavailable",
                    "action": "MANUAL_PROCESSING_REQUIRED",
                }
            )
            return False

        try:
            response = client.put_record(
                StreamName=self.stream_name,
                Data=json.dumps(payload),
                # Same session -> same shard, so events stay ordered
                PartitionKey=event.session_id_hash or ANONYMOUS_PARTITION_KEY,
            )
        except Exception as e:
            logger.critical(
                "ESCALATION_EVENT_PUBLISH_FAILED",
                extra={
                    "event_id": event.event_id,
                    "flow": event.flow,
                    "session_id_hash": event.session_id_hash,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "MANUAL_REVIEW_REQUIRED",
                    "payload": json.dumps(payload),
                }
            )
            return False

        logger.critical(
            "ESCALATION_EVENT_PUBLISHED",
            extra={
                "event_id": event.event_id,
                "flow": event.flow,
                "session_id_hash": event.session_id_hash,
                "risk_level": event.risk_level,
                "shard_id": response.get("ShardId"),
                "sequence_number": response.get("SequenceNumber"),
            }
        )
        return True
