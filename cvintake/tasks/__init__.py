"""
Celery tasks package.

- resume_tasks: resume ingestion and CV file reconciliation
"""

from cvintake.tasks import resume_tasks

__all__ = ["resume_tasks"]
