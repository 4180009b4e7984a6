"""Tests for EscalationEventPublisher.

Publishing is best-effort: these tests check the payload format and that
no failure ever escapes.
"""
import json
import pytest
from unittest.mock import patch, MagicMock

from campuscare.shared.models import RiskAssessment, RiskLevel, RiskSource
from campuscare.services.crisis_engine.publisher import (
    EscalationEvent,
    EscalationEventPublisher,
)


@pytest.fixture
def event():
    return EscalationEvent.create(
        flow="therapeutic-response",
        risk=RiskAssessment(
            RiskLevel.CRITICAL, RiskSource.COMBINED, frozenset({"lexicon:kill myself"})
        ),
        session_id_hash="hash_abc",
        redirect_flow="crisis-intervention",
    )


class TestEscalationEvent:
    def test_event_creation(self, event):
        assert event.event_id.startswith("evt_")
        assert event.event_type == "flow.escalation.required"
        assert event.risk_level == "critical"
        assert event.used_fallback is False

    def test_event_to_kinesis_payload(self, event):
        payload = event.to_kinesis_payload()

        assert payload["event_type"] == "flow.escalation.required"
        assert payload["source"] == "flow-orchestrator"
        assert "timestamp" in payload
        assert payload["data"]["flow"] == "therapeutic-response"
        assert payload["data"]["session_id_hash"] == "hash_abc"
        assert payload["data"]["flags"] == ["lexicon:kill myself"]
        assert payload["data"]["redirect_flow"] == "crisis-intervention"
        assert payload["data"]["requires_human_intervention"] is True

    def test_payload_is_json_serializable(self, event):
        json.dumps(event.to_kinesis_payload())

    def test_event_is_immutable(self, event):
        with pytest.raises(Exception):  # FrozenInstanceError
            event.risk_level = "none"


class TestEscalationEventPublisher:
    def test_publisher_initialization(self):
        publisher = EscalationEventPublisher(
            stream_name="test-stream",
            enabled=True,
            region="us-west-2",
        )

        assert publisher.stream_name == "test-stream"
        assert publisher.enabled is True
        assert publisher.region == "us-west-2"

    def test_disabled_by_default(self, event):
        publisher = EscalationEventPublisher()

        assert publisher.enabled is False
        assert publisher.publish(event) is False

    @patch("boto3.client")
    def test_publish_success(self, mock_boto_client, event):
        mock_kinesis = MagicMock()
        mock_kinesis.put_record.return_value = {
            "ShardId": "shard-001",
            "SequenceNumber": "12345",
        }
        mock_boto_client.return_value = mock_kinesis

        publisher = EscalationEventPublisher(stream_name="test-stream", enabled=True)

        assert publisher.publish(event) is True
        mock_kinesis.put_record.assert_called_once()

        call_kwargs = mock_kinesis.put_record.call_args.kwargs
        assert call_kwargs["StreamName"] == "test-stream"
        assert call_kwargs["PartitionKey"] == "hash_abc"
        payload = json.loads(call_kwargs["Data"])
        assert payload["data"]["risk_level"] == "critical"

    def test_anonymous_partition_key(self):
        mock_kinesis = MagicMock()
        mock_kinesis.put_record.return_value = {}
        publisher = EscalationEventPublisher(enabled=True)
        publisher._kinesis_client = mock_kinesis

        event = EscalationEvent.create(
            flow="crisis-intervention",
            risk=RiskAssessment(RiskLevel.HIGH, RiskSource.LEXICON),
        )

        assert publisher.publish(event) is True
        assert mock_kinesis.put_record.call_args.kwargs["PartitionKey"] == "anonymous"

    def test_publish_failure_returns_false(self, event):
        mock_kinesis = MagicMock()
        mock_kinesis.put_record.side_effect = Exception("Kinesis unavailable")
        publisher = EscalationEventPublisher(enabled=True)
        publisher._kinesis_client = mock_kinesis

        assert publisher.publish(event) is False

    @patch("boto3.client")
    def test_client_init_failure_returns_false(self, mock_boto_client, event):
        mock_boto_client.side_effect = Exception("no credentials")
        publisher = EscalationEventPublisher(enabled=True)

        assert publisher.publish(event) is False
