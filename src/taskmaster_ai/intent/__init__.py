"""
Intent subsystem.

Components:
- grammar.py: field table + parser for the oracle's `Label: value` responses
- classifier.py: response text -> exactly one Action
- fallback.py: heuristic create/unclear guesser when the oracle is unavailable
- executors.py: one task-store operation per Action
- pipeline.py: request boundary (validation, oracle call, dispatch, error payloads)
"""
