"""Tests for the orchestrator HTTP handler."""
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from unittest.mock import MagicMock

from campuscare.services.llm_service import LLMConfig, LLMProvider, OpenAILLM
from campuscare.services.orchestrator import FlowPipeline, PipelineConfig


@pytest.fixture
def handler_module():
    from campuscare.services.orchestrator import handler
    return handler


@pytest.fixture
def install_pipeline(handler_module, monkeypatch):
    """Swap the process-wide pipeline for one backed by a scripted model."""
    def _install(llm):
        pipeline = FlowPipeline(
            llm=llm,
            publisher=MagicMock(),
            config=PipelineConfig(model_timeout_seconds=0.05),
        )
        monkeypatch.setattr(handler_module, "_pipeline", pipeline)
        return pipeline
    return _install


@pytest.fixture
def client(handler_module):
    handler_module.app.config['TESTING'] = True
    with handler_module.app.test_client() as client:
        yield client


class TestHealthEndpoints:
    def test_health_returns_200(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'healthy'
        assert data['service'] == 'flow-orchestrator'

    def test_ready_with_pipeline(self, client, install_pipeline, scripted_llm):
        install_pipeline(scripted_llm())

        assert client.get('/ready').status_code == 200

    def test_not_ready_without_backend(self, client, handler_module, monkeypatch):
        monkeypatch.setattr(handler_module, "_pipeline", None)
        monkeypatch.setenv("LLM_PROVIDER", "huggingface")
        monkeypatch.delenv("LLM_ENDPOINT", raising=False)

        response = client.get('/ready')

        assert response.status_code == 503
        assert json.loads(response.data)['status'] == 'not_ready'

    def test_list_flows(self, client, install_pipeline, scripted_llm):
        install_pipeline(scripted_llm())

        data = json.loads(client.get('/flows').data)

        assert len(data['flows']) == 6
        assert 'crisis-intervention' in data['flows']


class TestInvokeFlow:
    def test_invoke_returns_flow_result(self, client, install_pipeline, scripted_llm, therapeutic_reply):
        install_pipeline(scripted_llm([therapeutic_reply("low")]))

        response = client.post(
            '/flows/therapeutic-response',
            json={
                'input': {'userMessage': 'I want to kill myself'},
                'conversationHistory': [{'role': 'user', 'content': 'hi'}],
            },
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['flow'] == 'therapeutic-response'
        assert data['risk']['level'] == 'critical'
        assert data['escalationNeeded'] is True
        assert data['redirectFlow'] == 'crisis-intervention'
        assert data['output']['riskIndicators']['level'] == 'critical'

    def test_unknown_flow_returns_404(self, client, install_pipeline, scripted_llm):
        llm = scripted_llm()
        install_pipeline(llm)

        response = client.post('/flows/not-a-real-flow', json={'input': {}})

        assert response.status_code == 404
        assert json.loads(response.data)['error'] == 'unknown_flow'
        assert llm.calls == 0

    def test_invalid_input_returns_400_with_violations(self, client, install_pipeline, scripted_llm):
        install_pipeline(scripted_llm())

        response = client.post(
            '/flows/therapeutic-activities',
            json={'input': {'primaryConcern': 'stuck', 'currentMood': 42}},
        )

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['error'] == 'invalid_input'
        fields = {v['field'] for v in data['violations']}
        assert {'currentMood', 'availableTime', 'energyLevel'} <= fields

    def test_missing_body_returns_400(self, client, install_pipeline, scripted_llm):
        install_pipeline(scripted_llm())

        response = client.post('/flows/therapeutic-response', data='not json')

        assert response.status_code == 400


class TestChatEndpoint:
    def test_chat_returns_therapeutic_output(self, client, install_pipeline, scripted_llm, therapeutic_reply):
        install_pipeline(scripted_llm([therapeutic_reply("moderate")]))

        response = client.post(
            '/chat',
            json={'userMessage': "I'm a bit stressed about exams", 'conversationHistory': []},
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['emotionalTone'] == 'supportive'
        assert data['riskIndicators']['level'] == 'moderate'
        assert data['redirectFlow'] is None
        assert data['usedFallback'] is False

    def test_chat_requires_user_message(self, client, install_pipeline, scripted_llm):
        install_pipeline(scripted_llm())

        response = client.post('/chat', json={'conversationHistory': []})

        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'userMessage is required'

    def test_chat_fallback_when_model_down(self, client, install_pipeline, scripted_llm):
        install_pipeline(scripted_llm([ConnectionError("down")]))

        response = client.post('/chat', json={'userMessage': 'Can you help me with advice?'})

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['usedFallback'] is True
        assert data['emotionalTone'] == 'exploratory'


@pytest.fixture
def completions_server(therapeutic_reply):
    """Local OpenAI-compatible server that keeps connections alive."""
    content = json.dumps(therapeutic_reply("low"))

    class CompletionHandler(BaseHTTPRequestHandler):
        protocol_version = "HTTP/1.1"

        def do_POST(self):
            self.rfile.read(int(self.headers.get("Content-Length", 0)))
            body = json.dumps({
                "id": "chatcmpl-local",
                "object": "chat.completion",
                "created": 0,
                "model": "local",
                "choices": [{
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }],
                "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
            }).encode()
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), CompletionHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/v1"
    server.shutdown()
    server.server_close()


class TestRepeatedRequests:
    def test_openai_backend_serves_every_request(self, client, handler_module, monkeypatch, completions_server):
        llm = OpenAILLM(LLMConfig(
            provider=LLMProvider.OPENAI,
            model_name="local",
            endpoint=completions_server,
            api_key="sk-local",
        ))
        pipeline = FlowPipeline(
            llm=llm,
            publisher=MagicMock(),
            config=PipelineConfig(max_retries=0, model_timeout_seconds=10),
        )
        monkeypatch.setattr(handler_module, "_pipeline", pipeline)

        used_fallback = []
        for _ in range(3):
            response = client.post('/chat', json={'userMessage': 'Can you help me with advice?'})
            assert response.status_code == 200
            used_fallback.append(json.loads(response.data)['usedFallback'])

        assert used_fallback == [False, False, False]
