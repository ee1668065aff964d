"""
Unit tests for WaitTimeEstimator.

The estimate is ``waiting entries x requested service duration``.
"""

import pytest

from shopqueue.core.exceptions import NotFoundError
from shopqueue.services.wait_time_estimator import WaitTimeEstimator
from tests.factories.repository_factories import (
    QueueRepositoryFactory,
    ServiceRepositoryFactory,
    make_service,
)


def _estimator(waiting: int, duration: int = 30):
    queue_repo = QueueRepositoryFactory.create_mock_reader(waiting=waiting)
    service_repo = ServiceRepositoryFactory.create_mock_reader(make_service(duration=duration))
    return WaitTimeEstimator(queue_repo, service_repo), queue_repo, service_repo


class TestWaitTimeEstimator:
    def test_empty_waiting_line_is_zero(self):
        estimator, _, _ = _estimator(waiting=0)
        assert estimator.estimate("t1", 1) == 0

    @pytest.mark.parametrize("waiting,duration", [(1, 30), (2, 30), (4, 15), (7, 45)])
    def test_estimate_is_waiting_count_times_duration(self, waiting, duration):
        estimator, _, _ = _estimator(waiting=waiting, duration=duration)
        assert estimator.estimate("t1", 1) == waiting * duration

    def test_counts_only_the_tenants_waiting_entries(self):
        estimator, queue_repo, service_repo = _estimator(waiting=3)
        estimator.estimate("t1", 1)
        queue_repo.count_waiting.assert_called_once_with("t1")
        service_repo.get_by_id.assert_called_once_with("t1", 1)

    def test_unknown_service_raises_not_found(self):
        queue_repo = QueueRepositoryFactory.create_mock_reader(waiting=2)
        service_repo = ServiceRepositoryFactory.create_mock_reader(None)
        estimator = WaitTimeEstimator(queue_repo, service_repo)

        with pytest.raises(NotFoundError):
            estimator.estimate("t1", 99)

    def test_inactive_service_still_estimates(self):
        queue_repo = QueueRepositoryFactory.create_mock_reader(waiting=2)
        service_repo = ServiceRepositoryFactory.create_mock_reader(
            make_service(duration=20, is_active=False)
        )
        assert WaitTimeEstimator(queue_repo, service_repo).estimate("t1", 1) == 40
