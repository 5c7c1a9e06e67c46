from django.core.management.base import BaseCommand

from printing.services import PrintJobService


class Command(BaseCommand):
    help = "Run print job housekeeping by hand: retry sweep, cleanup or stats"

    def add_arguments(self, parser):
        parser.add_argument(
            "action",
            choices=["retry-failed", "cleanup", "stats"],
            help="retry-failed requeues FAILED jobs with attempts left; cleanup deletes old PRINTED jobs",
        )
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Retention window in days for cleanup (defaults to PRINT_JOB_RETENTION_DAYS)",
        )

    def handle(self, *args, **options):
        service = PrintJobService()
        action = options["action"]

        if action == "retry-failed":
            count = service.retry_failed_jobs()
            self.stdout.write(self.style.SUCCESS(f"Requeued {count} failed print job(s)"))
        elif action == "cleanup":
            count = service.cleanup_old_jobs(days=options["days"])
            self.stdout.write(self.style.SUCCESS(f"Deleted {count} printed job(s)"))
        else:
            for status, count in service.get_job_statistics().items():
                self.stdout.write(f"{status}: {count}")
