"""Tests for FlowRegistry and the built-in flow set."""
import pytest

from campuscare.services.flow_service import contracts as c
from campuscare.services.flow_service import fallbacks, prompts
from campuscare.services.flow_service.errors import DuplicateFlowError, UnknownFlowError
from campuscare.services.flow_service.flows import BUILTIN_FLOWS, default_registry
from campuscare.services.flow_service.registry import FlowDefinition, FlowRegistry


BUILTIN_NAMES = [
    "therapeutic-response",
    "mental-health-assessment",
    "crisis-intervention",
    "psychoeducation",
    "therapeutic-activities",
    "peer-support-moderation",
]


@pytest.fixture
def registry():
    return default_registry()


class TestDefaultRegistry:
    def test_all_builtin_flows_registered(self, registry):
        assert sorted(registry.names()) == sorted(BUILTIN_NAMES)
        assert len(registry) == 6

    def test_lookup_returns_definition(self, registry):
        definition = registry.lookup("therapeutic-response")

        assert definition.input_model is c.TherapeuticResponseInput
        assert definition.output_model is c.TherapeuticResponseOutput

    def test_unknown_flow_raises(self, registry):
        with pytest.raises(UnknownFlowError) as exc_info:
            registry.lookup("not-a-real-flow")

        assert exc_info.value.flow_name == "not-a-real-flow"

    def test_contains(self, registry):
        assert "crisis-intervention" in registry
        assert "group-therapy" not in registry

    def test_registries_are_independent(self):
        first = default_registry()
        second = default_registry()

        assert first is not second
        assert first.names() == second.names()


class TestRegistration:
    def test_duplicate_name_rejected(self, registry):
        with pytest.raises(DuplicateFlowError):
            registry.register(
                "psychoeducation",
                c.PsychoeducationInput,
                c.PsychoeducationOutput,
                prompts.PSYCHOEDUCATION,
                fallback=fallbacks.psychoeducation,
            )

    def test_register_new_flow(self):
        registry = FlowRegistry()
        definition = registry.register(
            "psychoeducation-lite",
            c.PsychoeducationInput,
            c.PsychoeducationOutput,
            prompts.PSYCHOEDUCATION,
            fallback=fallbacks.psychoeducation,
        )

        assert registry.lookup("psychoeducation-lite") is definition

    def test_register_requires_fallback_keyword(self):
        registry = FlowRegistry()

        with pytest.raises(TypeError):
            registry.register(
                "psychoeducation-lite",
                c.PsychoeducationInput,
                c.PsychoeducationOutput,
                prompts.PSYCHOEDUCATION,
            )

        assert len(registry) == 0

    def test_fallback_required(self):
        registry = FlowRegistry()

        with pytest.raises(ValueError):
            registry.add(FlowDefinition(
                name="no-fallback",
                input_model=c.PsychoeducationInput,
                output_model=c.PsychoeducationOutput,
                template=prompts.PSYCHOEDUCATION,
            ))

    def test_definition_is_immutable(self, registry):
        definition = registry.lookup("psychoeducation")

        with pytest.raises(Exception):  # FrozenInstanceError
            definition.name = "renamed"


class TestHooks:
    """Per-flow risk hooks."""

    def test_assessment_signals(self, registry):
        definition = registry.lookup("mental-health-assessment")
        data = c.MentalHealthAssessmentInput.model_validate({
            "responses": {
                "mood": "low", "sleep": "poor", "appetite": "ok", "energy": "low",
                "concentration": "poor", "socialInteraction": "rare",
                "stressors": ["exams"], "copingStrategies": [],
                "supportSystem": "roommate",
                "selfHarmThoughts": True, "suicidalIdeation": False,
            }
        })

        signals = list(definition.risk_signals(data))

        assert len(signals) == 1
        assert signals[0][1] == "assessment:self_harm_thoughts"

    def test_crisis_type_signal(self, registry):
        definition = registry.lookup("crisis-intervention")
        data = c.CrisisInterventionInput(
            userMessage="I can't stop shaking", crisisType="panic", hasSupport=True,
        )

        assert list(definition.risk_signals(data)) == []

    def test_peer_moderation_user_text(self, registry):
        definition = registry.lookup("peer-support-moderation")
        data = c.PeerSupportModerationInput(message="Anyone else feel hopeless?", messageType="initial-post")

        assert list(definition.user_text(data)) == ["Anyone else feel hopeless?"]

    @pytest.mark.parametrize("definition", BUILTIN_FLOWS, ids=lambda d: d.name)
    def test_every_flow_has_fallback(self, definition):
        assert callable(definition.fallback)
