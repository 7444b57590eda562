# squadboard/vocabulary.py
"""Closed value sets shared by the API schemas and the client-side formatters."""

TASK_STATUSES = ("new", "in_progress", "pending", "blocked", "completed")
TASK_PRIORITIES = ("low", "medium", "high")
TASK_TYPES = (
    "general",
    "generaltodo",
    "injury",
    "training",
    "analysis",
    "assessment",
    "assessmentreview",
    "medical",
    "meeting",
    "nutrition",
    "planning",
    "education",
    "scheduling",
    "admin",
)
PERSON_TYPES = ("athlete", "coach")

DEFAULT_STATUS = "new"
DEFAULT_PRIORITY = "medium"
DEFAULT_TYPE = "general"
