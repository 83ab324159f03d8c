"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority, TaskFilter)
- task_store.py: SQLite-backed, owner-partitioned storage
"""
