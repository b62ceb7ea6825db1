"""Celery application for the distributed job backend."""
from celery import Celery

from bidguard.config import settings

celery_app = Celery(
    "bidguard",
    broker=settings.CELERY_BROKER_URL or None,
    include=["bidguard.jobs.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.JOB_CONCURRENCY,
    task_ignore_result=True,
)
