from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def retry_failed_print_jobs():
    """
    Requeue FAILED print jobs that still have attempts left.

    This task runs every 5 minutes via Celery Beat. Jobs that exhausted
    their attempts stay FAILED until someone retries them by hand.

    Returns:
        int: Number of jobs moved back to PENDING
    """
    from .services import PrintJobService

    try:
        count = PrintJobService().retry_failed_jobs()
        logger.info(f"Print retry sweep requeued {count} job(s)")
        return count
    except Exception as e:
        logger.error(f"Error requeuing failed print jobs: {e}", exc_info=True)
        raise


@shared_task
def cleanup_old_print_jobs(days=None):
    """
    Delete PRINTED jobs older than the retention window.

    This task runs daily via Celery Beat.

    Returns:
        int: Number of jobs deleted
    """
    from .services import PrintJobService

    try:
        return PrintJobService().cleanup_old_jobs(days=days)
    except Exception as e:
        logger.error(f"Error cleaning up old print jobs: {e}", exc_info=True)
        raise
