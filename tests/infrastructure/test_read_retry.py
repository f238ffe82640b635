"""Read Retry — verifies bounded backoff on transient read failures."""

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from collabhub.core.errors import DatabaseError
from collabhub.infrastructure.read_retry import ReadRetryPolicy


class _FakeSession:
    def __init__(self):
        self.rollbacks = 0

    async def rollback(self):
        self.rollbacks += 1


def _flaky(failures: int, result="ok"):
    calls = {"n": 0}

    async def operation():
        calls["n"] += 1
        if calls["n"] <= failures:
            raise OperationalError("SELECT 1", {}, Exception("connection reset"))
        return result

    return operation, calls


async def test_recovers_after_transient_errors():
    db = _FakeSession()
    operation, calls = _flaky(2)
    policy = ReadRetryPolicy(attempts=3, base_delay_ms=0)
    assert await policy.run(db, operation, "get") == "ok"
    assert calls["n"] == 3
    assert db.rollbacks == 2


async def test_gives_up_with_database_error():
    db = _FakeSession()
    operation, calls = _flaky(5)
    policy = ReadRetryPolicy(attempts=3, base_delay_ms=0)
    with pytest.raises(DatabaseError) as exc:
        await policy.run(db, operation, "list_by_actor")
    assert calls["n"] == 3
    assert exc.value.http_status == 503


async def test_non_transient_error_propagates_immediately():
    db = _FakeSession()
    calls = {"n": 0}

    async def operation():
        calls["n"] += 1
        raise ProgrammingError("SELECT nope", {}, Exception("syntax error"))

    with pytest.raises(ProgrammingError):
        await ReadRetryPolicy(attempts=3, base_delay_ms=0).run(db, operation, "get")
    assert calls["n"] == 1


def test_backoff_is_capped_with_jitter():
    policy = ReadRetryPolicy(attempts=10, base_delay_ms=100, max_delay_ms=2_000)
    assert 75 <= policy._backoff(0) <= 125
    assert 1_500 <= policy._backoff(8) <= 2_500
