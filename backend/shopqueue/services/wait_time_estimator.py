"""
Point-in-time wait estimate stamped onto a queue entry at admission.

The estimate is ``waiting entries x requested service duration`` and is never
refreshed afterwards; ``QueueService.live_wait_time`` re-derives a live number
from the current line when one is needed.
"""

from shopqueue.core.exceptions import NotFoundError
from shopqueue.domain.interfaces import IQueueReader, IServiceReader


class WaitTimeEstimator:
    def __init__(self, queue_repo: IQueueReader, service_repo: IServiceReader) -> None:
        self.queue_repo = queue_repo
        self.service_repo = service_repo

    def estimate(self, tenant_id: str, service_id: int) -> int:
        """Minutes a newcomer asking for ``service_id`` would wait right now.

        Returns 0 for an empty waiting line; never negative.
        """
        service = self.service_repo.get_by_id(tenant_id, service_id)
        if service is None:
            raise NotFoundError("Service", service_id, tenant_id)

        waiting = self.queue_repo.count_waiting(tenant_id)
        return max(0, waiting * service.duration)
