from .analytics_service import AnalyticsService
from .appointment_service import AppointmentService
from .queue_service import QueueService
from .stats_service import StatsService
from .transaction_service import TransactionService
from .wait_time_estimator import WaitTimeEstimator

__all__ = [
    "WaitTimeEstimator",
    "QueueService",
    "AppointmentService",
    "StatsService",
    "TransactionService",
    "AnalyticsService",
]
