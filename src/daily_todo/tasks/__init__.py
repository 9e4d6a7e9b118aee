"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskOrigin, RecurringTemplate, Weekday) and errors
- recurrence.py: pure projection of recurring templates onto a calendar day
- task_store.py: SQLite-backed storage + create/remove/toggle/list helpers
- task_api.py: seeding, recurring input parsing, JSON snapshot export/import
"""
