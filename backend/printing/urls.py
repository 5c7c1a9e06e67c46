from django.urls import path

from . import views

# Print agent (X-API-Key)
agent_urlpatterns = [
    path("pending/", views.PendingPrintJobsView.as_view(), name="print-pending"),
    path("jobs/<int:pk>/status/", views.PrintJobStatusView.as_view(), name="print-job-status"),
]

# Staff / admin
admin_urlpatterns = [
    path("jobs/<int:pk>/retry/", views.RetryPrintJobView.as_view(), name="print-job-retry"),
    path("retry-failed/", views.RetryFailedPrintJobsView.as_view(), name="print-retry-failed"),
    path("stats/", views.PrintJobStatsView.as_view(), name="print-stats"),
]
