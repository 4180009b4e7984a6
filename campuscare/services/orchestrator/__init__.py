"""Orchestrator: pipeline facade and HTTP surface.

Components:
- config.py: PipelineConfig (environment-driven)
- pipeline.py: FlowPipeline.invoke, the single entry point
- handler.py: Flask app
"""

from .config import PipelineConfig
from .pipeline import FlowPipeline, FlowResult

__all__ = ["PipelineConfig", "FlowPipeline", "FlowResult"]
