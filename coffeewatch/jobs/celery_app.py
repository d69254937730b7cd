"""Celery configuration for the scheduled availability check."""

from __future__ import annotations

import os

from celery import Celery
from celery.schedules import crontab

from coffeewatch.config import load_settings

broker_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")
backend_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")
settings = load_settings()

celery_app = Celery("coffeewatch", broker=broker_url, backend=backend_url, include=["coffeewatch.jobs.monitor"])
celery_app.conf.timezone = "UTC"
celery_app.conf.beat_schedule = {
    "availability-check": {
        "task": "coffeewatch.jobs.monitor.run_monitor",
        "schedule": crontab(minute=f"*/{settings.schedule_minutes}"),
    },
}


@celery_app.task(name="coffeewatch.jobs.monitor.run_monitor")
def run_monitor_task(profile: str | None = None) -> bool:  # pragma: no cover - executed by worker
    from coffeewatch.jobs.monitor import main

    return main(profile).notified
