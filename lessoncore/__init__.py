"""
Lesson scoring and checkpoint engine.

Server-authoritative grading of drag-and-drop lessons plus the reproducible
checkpoint scheduler that decides when to interject timed knowledge checks.
"""

__version__ = "1.0.0"
