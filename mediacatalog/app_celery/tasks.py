import logging

from mediacatalog.app_celery.celery_app import celery_app
from mediacatalog.core.config import settings
from mediacatalog.core.database_sync import mongodb_sync
from mediacatalog.services.reconciliation import reconcile_orphans as run_reconciliation
from mediacatalog.storage.object_storage import ObjectStorageClient

logger = logging.getLogger(__name__)


@celery_app.task(name="reconcile_orphans")
def reconcile_orphans():
    mongodb_sync.connect()
    logger.info("Starting orphan reconciliation for bucket %s", settings.AWS_S3_BUCKET)
    return run_reconciliation(
        storage=ObjectStorageClient(),
        collection=mongodb_sync.videos(),
        folders=[settings.VIDEO_FOLDER, settings.THUMBNAIL_FOLDER],
        grace_minutes=settings.ORPHAN_GRACE_MINUTES,
    )
