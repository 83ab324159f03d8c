"""
TaskMaster AI: natural-language task management.

Components:
- intent/: response grammar, classifier, fallback extractor, executors, pipeline
- tasks/: task records and the SQLite task store
- llm/: oracle clients (OpenAI-compatible API, offline stand-in)
- cli/ + connectors/: console surface
"""

__version__ = "0.1.0"
