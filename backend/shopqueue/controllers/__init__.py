from .appointment_controller import appointment_bp
from .dashboard_controller import dashboard_bp
from .health_controller import health_bp
from .queue_controller import queue_bp
from .transaction_controller import transaction_bp

__all__ = [
    "queue_bp",
    "appointment_bp",
    "transaction_bp",
    "dashboard_bp",
    "health_bp",
]
