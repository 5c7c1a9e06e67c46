import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import IsStaffOrHigher
from .authentication import PrintAgentAPIKeyAuthentication
from .models import PrintJob
from .serializers import (
    AgentPrintJobSerializer,
    PrintJobSerializer,
    PrintJobStatusSerializer,
)
from .services import PrintJobService

logger = logging.getLogger(__name__)


class PrintAgentMixin:
    authentication_classes = [PrintAgentAPIKeyAuthentication]
    permission_classes = [IsAuthenticated]

    def get_service(self):
        return PrintJobService()


class PendingPrintJobsView(PrintAgentMixin, APIView):
    """GET: every PENDING job, marked SENT as it is returned."""

    def get(self, request):
        jobs = self.get_service().pull_pending_jobs()
        return Response(AgentPrintJobSerializer(jobs, many=True).data)


class PrintJobStatusView(PrintAgentMixin, APIView):
    """POST: agent acknowledgement, ``{status: PRINTED|FAILED, error?}``."""

    def post(self, request, pk):
        serializer = PrintJobStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = self.get_service()
        if serializer.validated_data["status"] == PrintJob.Status.PRINTED:
            job = service.mark_job_printed(pk)
        else:
            job = service.mark_job_failed(pk, serializer.validated_data["error"].strip())
        return Response({"id": job.id, "status": job.status, "attempts": job.attempts})


class RetryPrintJobView(APIView):
    permission_classes = [IsStaffOrHigher]

    def post(self, request, pk):
        job = PrintJobService().retry_job(pk)
        logger.info(f"User {request.user.pk} retried print job {job.id}")
        return Response(PrintJobSerializer(job).data)


class RetryFailedPrintJobsView(APIView):
    permission_classes = [IsStaffOrHigher]

    def post(self, request):
        count = PrintJobService().retry_failed_jobs()
        return Response({"retried_count": count}, status=status.HTTP_200_OK)


class PrintJobStatsView(APIView):
    permission_classes = [IsStaffOrHigher]

    def get(self, request):
        return Response(PrintJobService().get_job_statistics())
