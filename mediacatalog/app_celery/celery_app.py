from celery import Celery
from celery.signals import worker_process_init
from mediacatalog.core.config import settings
from mediacatalog.core.database_sync import mongodb_sync
from mediacatalog.core.logging import setup_logging

celery_app = Celery(
    "media_catalog",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.beat_schedule = {
    "reconcile-orphans": {
        "task": "reconcile_orphans",
        "schedule": settings.RECONCILE_INTERVAL_MINUTES * 60.0,
    },
}

@worker_process_init.connect
def init_worker(**kwargs):
    setup_logging(settings)
    mongodb_sync.connect()

# Auto-discover tasks inside mediacatalog/app_celery
celery_app.autodiscover_tasks(["mediacatalog.app_celery"])
