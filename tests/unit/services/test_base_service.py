"""Transaction handling and operation metrics of BaseService."""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from sportbook.core.exceptions import RepositoryException, ServiceException, ValidationException
from sportbook.services.base import BaseService


class DummyService(BaseService):
    @BaseService.measure_operation("do_work")
    def do_work(self, fail: bool = False) -> str:
        if fail:
            raise ValidationException("nope")
        return "done"


@pytest.fixture
def service():
    svc = DummyService(Mock(spec=Session))
    svc.reset_metrics()
    return svc


def test_transaction_commits(service):
    with service.transaction():
        pass
    service.db.commit.assert_called_once()
    service.db.rollback.assert_not_called()


@pytest.mark.parametrize(
    "error",
    [
        OperationalError("SELECT 1", {}, Exception("connection lost")),
        RepositoryException("query failed"),
    ],
)
def test_store_errors_become_backend_service_exceptions(service, error):
    with pytest.raises(ServiceException) as exc_info:
        with service.transaction():
            raise error
    assert exc_info.value.code == "BACKEND_ERROR"
    assert exc_info.value.kind == "backend"
    service.db.rollback.assert_called_once()


def test_domain_errors_roll_back_and_propagate(service):
    with pytest.raises(ValidationException):
        with service.transaction():
            raise ValidationException("bad input")
    service.db.rollback.assert_called_once()
    service.db.commit.assert_not_called()


def test_metrics_record_success_and_failure(service):
    assert service.do_work() == "done"
    with pytest.raises(ValidationException):
        service.do_work(fail=True)

    metrics = service.get_metrics()["do_work"]
    assert metrics["count"] == 2
    assert metrics["success_rate"] == 0.5
    assert metrics["failure_count"] == 1
