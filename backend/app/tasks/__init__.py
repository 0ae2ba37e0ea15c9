"""
Celery Task Modules

Background tasks for job processing:
- analysis.py: full analysis pipeline for a submitted job
"""

from app.tasks.analysis import analyze_job

__all__ = [
    "analyze_job",
]
