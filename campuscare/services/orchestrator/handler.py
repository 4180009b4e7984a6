"""Flow orchestrator HTTP handler.

Exposes the flow pipeline over HTTP:
- GET  /health, /ready
- GET  /flows                 registered flow names
- POST /flows/<name>          invoke a flow
- POST /chat                  therapeutic chat (userMessage + history)
"""
import asyncio
import logging
import os
from typing import Optional

from flask import Flask, jsonify, request

from campuscare.shared.utils import configure_pii_salt
from campuscare.services.flow_service import (
    THERAPEUTIC_RESPONSE,
    InputValidationError,
    UnknownFlowError,
)
from .config import DEV_PII_SALT, PipelineConfig
from .pipeline import FlowPipeline

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

# Configure PII salt
configure_pii_salt(os.getenv("PII_HASH_SALT", DEV_PII_SALT))

# Built on first use so the app can start before the backend is reachable
_pipeline: Optional[FlowPipeline] = None


def get_pipeline() -> FlowPipeline:
    """Return the process-wide pipeline, building it from env on first use.

    Raises:
        ValueError: If the backend configuration is incomplete
    """
    global _pipeline
    if _pipeline is None:
        _pipeline = FlowPipeline.from_config(PipelineConfig.from_env())
    return _pipeline


def _invoke(flow_name: str, payload, history, session_id: Optional[str] = None):
    return asyncio.run(
        get_pipeline().invoke(flow_name, payload, history or [], session_id=session_id)
    )


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({
        "status": "healthy",
        "service": "flow-orchestrator",
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check: the model backend must be configured."""
    try:
        get_pipeline()
    except ValueError as e:
        logger.warning("ORCHESTRATOR_NOT_READY", extra={"error": str(e)})
        return jsonify({"status": "not_ready"}), 503
    return jsonify({"status": "ready"}), 200


@app.route("/flows", methods=["GET"])
def list_flows():
    """List registered flow names."""
    return jsonify({"flows": get_pipeline().flow_names()}), 200


@app.route("/flows/<flow_name>", methods=["POST"])
def invoke_flow(flow_name: str):
    """Invoke a flow.

    Request Body:
        {
            "input": {...},
            "conversationHistory": [{"role": "user", "content": "..."}],
            "sessionId": "sess_123"
        }

    Response:
        FlowResult JSON (flow, output, risk, attempt, usedFallback,
        escalationNeeded, followUpRequired, redirectFlow)
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body required"}), 400

    try:
        result = _invoke(
            flow_name,
            data.get("input"),
            data.get("conversationHistory"),
            session_id=data.get("sessionId"),
        )
    except UnknownFlowError as e:
        logger.warning("FLOW_NOT_FOUND", extra={"flow": flow_name})
        return jsonify({"error": "unknown_flow", "flow": e.flow_name}), 404
    except InputValidationError as e:
        logger.warning(
            "FLOW_INPUT_REJECTED",
            extra={"flow": flow_name, "violation_count": len(e.violations)}
        )
        return jsonify(e.to_dict()), 400
    except Exception as e:
        logger.error("FLOW_INVOCATION_ERROR", extra={"flow": flow_name, "error": str(e)})
        return jsonify({"error": "Failed to run flow"}), 500

    return jsonify(result.to_dict()), 200


@app.route("/chat", methods=["POST"])
def chat():
    """Therapeutic chat endpoint.

    Request Body:
        {
            "userMessage": "I'm stressed about exams",
            "conversationHistory": [{"role": "user", "content": "..."}],
            "userProfile": {...}
        }

    Response:
        therapeutic-response output plus redirectFlow and usedFallback
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get("userMessage"):
        return jsonify({"error": "userMessage is required"}), 400

    payload = {"userMessage": data["userMessage"]}
    if data.get("userProfile") is not None:
        payload["userProfile"] = data["userProfile"]

    try:
        result = _invoke(
            THERAPEUTIC_RESPONSE,
            payload,
            data.get("conversationHistory"),
            session_id=data.get("sessionId"),
        )
    except InputValidationError as e:
        return jsonify(e.to_dict()), 400
    except Exception as e:
        logger.error("CHAT_ERROR", extra={"error": str(e)})
        return jsonify({"error": "Failed to generate response"}), 500

    body = dict(result.output)
    body["redirectFlow"] = result.redirect_flow
    body["usedFallback"] = result.used_fallback
    return jsonify(body), 200


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
