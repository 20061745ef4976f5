"""Celery application configuration."""

from celery import Celery

from src.config import get_settings

settings = get_settings()

app = Celery(
    "blog_api",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.mail"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=60,
    task_soft_time_limit=45,
    # Publishing must not hang a request when the broker is down
    task_publish_retry=False,
)
