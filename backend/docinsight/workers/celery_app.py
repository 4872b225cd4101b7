# backend/docinsight/workers/celery_app.py
"""
Celery application configuration module.
This module initializes a Celery app instance for the 'docinsight' project,
using broker and backend URLs from docinsight.config. Processing runs one
task per document and never retries a failed document:
- task_acks_late: Ensures tasks are acknowledged only after completion.
- worker_prefetch_multiplier: One document in flight per worker process.
- task_annotations max_retries=0: A failed document stays failed until re-uploaded.
- result_expires: Sets the expiration time for task results (in seconds).
Environment Variables:
- CELERY_BROKER_URL: URL for the Celery broker (e.g., Redis).
- REDIS_URL: Fallback URL for the broker if CELERY_BROKER_URL is not set.
- CELERY_RESULT_BACKEND: URL for storing task results (defaults to broker URL).
"""
from __future__ import annotations
from celery import Celery

from .. import config

celery = Celery(
    "docinsight",
    broker=config.CELERY_BROKER_URL,
    backend=config.CELERY_RESULT_BACKEND,
    include=["docinsight.services.pipeline"],
)
celery.conf.update(
    broker_connection_retry_on_startup=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_annotations={"docinsight.services.pipeline.task_process": {"max_retries": 0}},
    result_expires=3600,
)
