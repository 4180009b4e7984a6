"""CampusCare services.

Request path for every flow:
- Safety Service classifies user text before the model is called
- Flow Service compiles, executes and validates the flow
- Crisis Engine merges risks and forces escalation where needed
- Orchestrator ties them together behind one invoke() call
"""
