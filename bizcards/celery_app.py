"""Celery application configuration."""

from celery import Celery

from bizcards.config import get_settings

settings = get_settings()

app = Celery(
    "bizcards",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["bizcards.tasks.maintenance"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
    beat_schedule={
        "sweep-login-attempts": {
            "task": "bizcards.tasks.maintenance.sweep_login_attempts",
            "schedule": 60 * 60,  # hourly
        },
    },
)
