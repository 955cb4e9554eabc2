"""Workforce management REST API: departments, employees, shifts, attendance,
leaves, schedules and holidays behind a small JWT-authenticated FastAPI app."""

__version__ = "0.1.0"
