"""
Celery worker for the investor platform.

Start worker:    celery -A invplatform.worker worker --loglevel=info
Start beat:      celery -A invplatform.worker beat --loglevel=info
Start both:      celery -A invplatform.worker worker --beat --loglevel=info
"""
from celery import Celery

from invplatform.core.config import settings
from invplatform.core.sentry import init_sentry

init_sentry("worker")

celery_app = Celery(
    "invplatform_worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.REDIS_URL,
    include=[
        "invplatform.modules.notifications.tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=86400,  # 24h
)

celery_app.conf.beat_schedule = {
    "dispatch-notifications": {
        "task": "tasks.dispatch_notifications",
        "schedule": settings.NOTIFICATION_DISPATCH_INTERVAL,
    },
}
