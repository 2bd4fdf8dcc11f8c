# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    IDEMPOTENCY_SWEEP_INTERVAL_SECONDS,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks have to be imported explicitly for celery to register them
celery_app.conf.imports = ("storefront.tasks.sweep",)

celery_app.conf.beat_schedule = {
    "sweep-idempotency-keys": {
        "task": "storefront.tasks.sweep.sweep_idempotency_keys_task",
        "schedule": IDEMPOTENCY_SWEEP_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
