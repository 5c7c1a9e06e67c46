import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from menu.models import MenuItem
from .exceptions import InvalidPrintJobState, PrintJobNotFound
from .models import PrintJob

logger = logging.getLogger(__name__)

Destination = MenuItem.PrinterDestination

# Which item destinations land on each station's ticket.
STATION_ROUTES = {
    PrintJob.PrinterType.KITCHEN: (Destination.KITCHEN, Destination.BOTH),
    PrintJob.PrinterType.BEVERAGE: (Destination.BEVERAGE, Destination.BOTH),
}


class PrintJobService:
    """
    Fans confirmed orders out to per-station print jobs and tracks their
    delivery through the print agent's pull-then-acknowledge protocol.
    """

    def __init__(self, max_attempts=None, retention_days=None, pull_limit=None):
        self.max_attempts = max_attempts or settings.PRINT_JOB_MAX_ATTEMPTS
        self.retention_days = retention_days or settings.PRINT_JOB_RETENTION_DAYS
        self.pull_limit = pull_limit or settings.PRINT_JOB_PULL_LIMIT

    # --- receipt payload ---

    @staticmethod
    def build_receipt_data(order, items, printer_type=None):
        """Station-scoped payload the agent renders. ``items`` are OrderItems."""
        data = {
            "order_number": order.order_number,
            "order_time": timezone.localtime(order.created_at).strftime("%I:%M %p"),
            "customer_name": order.user.display_name,
            "items": [
                {
                    "name": item.menu_item_name,
                    "quantity": item.quantity,
                    "modifiers": [modifier.name for modifier in item.modifiers.all()],
                    "special_instructions": item.special_instructions or None,
                }
                for item in items
            ],
            "special_instructions": order.special_instructions or None,
        }
        if printer_type:
            data["station"] = printer_type
        return data

    # --- dispatch ---

    @transaction.atomic
    def create_print_jobs(self, order):
        """
        One PENDING job per station with at least one routed item.

        Runs in its own transaction so a failure here never touches the
        order's financial state.
        """
        items = list(order.items.prefetch_related("modifiers").all())
        jobs = []
        for printer_type, destinations in STATION_ROUTES.items():
            station_items = [item for item in items if item.printer_destination in destinations]
            if not station_items:
                continue
            jobs.append(
                PrintJob.objects.create(
                    order=order,
                    printer_type=printer_type,
                    receipt_data=self.build_receipt_data(order, station_items, printer_type),
                )
            )

        logger.info(
            f"Created {len(jobs)} print job(s) for order #{order.order_number}: "
            f"{', '.join(job.printer_type for job in jobs) or 'none'}"
        )
        return jobs

    def _create_full_ticket(self, order, kind):
        items = list(order.items.prefetch_related("modifiers").all())
        receipt_data = self.build_receipt_data(order, items, PrintJob.PrinterType.KITCHEN)
        receipt_data["ticket_type"] = kind
        job = PrintJob.objects.create(
            order=order,
            printer_type=PrintJob.PrinterType.KITCHEN,
            receipt_data=receipt_data,
        )
        logger.info(f"Queued {kind} for order #{order.order_number} (job {job.id})")
        return job

    def print_kitchen_ticket(self, order):
        """Reprint a ticket with every item of the order."""
        return self._create_full_ticket(order, "kitchen_ticket")

    def print_receipt(self, order):
        # TODO: route to a dedicated receipt printer once the agent exposes one.
        return self._create_full_ticket(order, "receipt")

    # --- agent protocol ---

    def pull_pending_jobs(self, limit=None):
        """
        Hand PENDING jobs to the agent and mark them SENT in one step.

        Rows are locked (skipping ones another pull already holds) and the
        update is guarded on status, so no job is handed out twice.
        """
        limit = limit or self.pull_limit
        with transaction.atomic():
            jobs = list(
                PrintJob.objects.select_for_update(skip_locked=True)
                .filter(status=PrintJob.Status.PENDING)
                .order_by("created_at", "id")[:limit]
            )
            if not jobs:
                return []

            now = timezone.now()
            PrintJob.objects.filter(
                id__in=[job.id for job in jobs], status=PrintJob.Status.PENDING
            ).update(status=PrintJob.Status.SENT, sent_at=now, updated_at=now)

        for job in jobs:
            job.status = PrintJob.Status.SENT
            job.sent_at = now
        logger.info(f"Print agent pulled {len(jobs)} job(s)")
        return jobs

    def get_job(self, job_id):
        try:
            return PrintJob.objects.select_related("order").get(pk=job_id)
        except (PrintJob.DoesNotExist, ValueError, TypeError):
            raise PrintJobNotFound(f"Print job not found: {job_id}", details={"job_id": job_id})

    @transaction.atomic
    def mark_job_printed(self, job_id):
        job = self._locked_job(job_id)
        if job.status == PrintJob.Status.PRINTED:
            return job
        if job.status != PrintJob.Status.SENT:
            raise InvalidPrintJobState(
                f"Print job {job_id} is {job.status}, expected SENT",
                details={"job_id": job.id, "status": job.status},
            )
        job.status = PrintJob.Status.PRINTED
        job.printed_at = timezone.now()
        job.last_error = None
        job.save(update_fields=["status", "printed_at", "last_error", "updated_at"])
        logger.info(f"Print job {job.id} printed ({job.printer_type}, order {job.order_id})")
        return job

    @transaction.atomic
    def mark_job_failed(self, job_id, error_message):
        job = self._locked_job(job_id)
        if job.status != PrintJob.Status.SENT:
            raise InvalidPrintJobState(
                f"Print job {job_id} is {job.status}, expected SENT",
                details={"job_id": job.id, "status": job.status},
            )
        job.status = PrintJob.Status.FAILED
        job.attempts += 1
        job.last_error = error_message
        job.save(update_fields=["status", "attempts", "last_error", "updated_at"])
        logger.warning(f"Print job {job.id} failed (attempt {job.attempts}): {error_message}")
        return job

    def _locked_job(self, job_id):
        try:
            return PrintJob.objects.select_for_update().get(pk=job_id)
        except (PrintJob.DoesNotExist, ValueError, TypeError):
            raise PrintJobNotFound(f"Print job not found: {job_id}", details={"job_id": job_id})

    # --- retries & housekeeping ---

    def retry_failed_jobs(self):
        """Requeue FAILED jobs that still have attempts left. Returns the count."""
        count = PrintJob.objects.filter(
            status=PrintJob.Status.FAILED, attempts__lt=self.max_attempts
        ).update(status=PrintJob.Status.PENDING, last_error=None, updated_at=timezone.now())
        if count:
            logger.info(f"Requeued {count} failed print job(s)")
        return count

    @transaction.atomic
    def retry_job(self, job_id):
        """Manual retry: no attempt-count gate."""
        job = self._locked_job(job_id)
        job.status = PrintJob.Status.PENDING
        job.last_error = None
        job.save(update_fields=["status", "last_error", "updated_at"])
        logger.info(f"Print job {job.id} manually retried (attempts={job.attempts})")
        return job

    def get_job_statistics(self):
        return PrintJob.objects.aggregate(
            pending=Count("id", filter=Q(status=PrintJob.Status.PENDING)),
            sent=Count("id", filter=Q(status=PrintJob.Status.SENT)),
            printed=Count("id", filter=Q(status=PrintJob.Status.PRINTED)),
            failed=Count("id", filter=Q(status=PrintJob.Status.FAILED)),
        )

    def cleanup_old_jobs(self, days=None):
        """Delete PRINTED jobs older than the retention window."""
        cutoff = timezone.now() - timedelta(days=days if days is not None else self.retention_days)
        deleted, _ = PrintJob.objects.filter(
            status=PrintJob.Status.PRINTED, printed_at__lt=cutoff
        ).delete()
        logger.info(f"Deleted {deleted} printed job(s) older than {cutoff:%Y-%m-%d}")
        return deleted
