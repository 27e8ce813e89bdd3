"""Celery worker configuration and beat schedule.

Periodic maintenance jobs:
- Expired verification code cleanup
- Coupon expiry
- Ledger health checks
"""

from celery import Celery
from celery.schedules import crontab

from app.config import settings

# Create Celery app
celery_app = Celery(
    "venturehub_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Asia/Manila",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,  # 5 minutes max
    task_soft_time_limit=240,  # Soft limit at 4 minutes

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=2,

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour

    # Retry settings
    task_default_retry_delay=60,  # 1 minute
    task_max_retries=3,

    # Beat schedule for periodic tasks
    beat_schedule={
        # Clear stale verification codes every 30 minutes
        "cleanup-expired-otps": {
            "task": "app.tasks.cleanup_expired_otps",
            "schedule": crontab(minute="*/30"),
        },
        # Switch off coupons past their validity window hourly
        "deactivate-expired-coupons": {
            "task": "app.tasks.deactivate_expired_coupons",
            "schedule": crontab(minute=5),
        },
        # Ledger health check daily at 2 AM
        "ledger-health-check": {
            "task": "app.tasks.run_ledger_health_check",
            "schedule": crontab(hour=2, minute=0),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
