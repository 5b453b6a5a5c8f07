"""
Celery application configuration.

This module configures Celery to use Redis as both the message broker and result backend.
Workers run resume ingestion and CV file reconciliation outside the API process.
"""

from celery import Celery
from cvintake.core.config import settings

celery_app = Celery(
    "cvintake_worker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL
)

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task behavior
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # Warn at 4 minutes

    # Result backend
    result_expires=3600,  # Results expire after 1 hour

    # Worker behavior
    worker_prefetch_multiplier=1,  # Only fetch 1 task at a time
    worker_max_tasks_per_child=50,  # Restart worker after 50 tasks (pdfminer memory growth)
)

# Auto-discover tasks from cvintake.tasks
celery_app.autodiscover_tasks(['cvintake'])
