"""CampusCare flow pipeline.

Schema-typed conversational flows wrapped around a generative model, with a
deterministic risk classifier that can always upgrade the model's own risk
report and force escalation.
"""

__version__ = "0.1.0"
