import pytest

from contentful_mcp.external import retry as retry_module
from contentful_mcp.external.errors import ClassifiedError
from contentful_mcp.external.retry import RetryPolicy, with_retry


class StatusError(Exception):
    def __init__(self, status: int):
        super().__init__(f"status {status}")
        self.status = status


@pytest.fixture
def sleeps(monkeypatch):
    recorded: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        recorded.append(seconds)

    monkeypatch.setattr(retry_module, "_sleep", fake_sleep)
    return recorded


class Flaky:
    def __init__(self, failures: list[BaseException], result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


@pytest.mark.asyncio
async def test_non_retryable_failure_makes_one_attempt(sleeps):
    op = Flaky([StatusError(404)] * 5)
    with pytest.raises(ClassifiedError) as exc:
        await with_retry(op, RetryPolicy(max_attempts=4))
    assert op.calls == 1
    assert exc.value.kind == "not_found"
    assert sleeps == []


@pytest.mark.asyncio
async def test_exhausts_max_attempts_and_raises_last_error(sleeps):
    failures = [StatusError(503), StatusError(502), StatusError(429)]
    op = Flaky(failures)
    with pytest.raises(ClassifiedError) as exc:
        await with_retry(op, RetryPolicy(max_attempts=3, jitter_ratio=0))
    assert op.calls == 3
    assert exc.value.status_code == 429
    assert isinstance(exc.value.__cause__, StatusError)
    assert len(sleeps) == 2


@pytest.mark.asyncio
async def test_fail_once_then_succeed(sleeps):
    op = Flaky([StatusError(500)], result={"sys": {"id": "e1"}})
    assert await with_retry(op, RetryPolicy(max_attempts=4)) == {"sys": {"id": "e1"}}
    assert op.calls == 2
    assert len(sleeps) == 1


@pytest.mark.asyncio
async def test_backoff_doubles_and_caps(sleeps):
    policy = RetryPolicy(max_attempts=6, base_delay_ms=100, max_delay_ms=400, jitter_ratio=0)
    op = Flaky([StatusError(503)] * 6)
    with pytest.raises(ClassifiedError):
        await with_retry(op, policy)
    assert sleeps == pytest.approx([0.1, 0.2, 0.4, 0.4, 0.4])


@pytest.mark.parametrize("attempt", [1, 2, 3, 4])
def test_delay_within_jitter_bounds(attempt):
    policy = RetryPolicy(base_delay_ms=100, max_delay_ms=1600, jitter_ratio=0.2)
    nominal = 100 * 2 ** (attempt - 1)
    low, high = nominal * 0.8, nominal * 1.2
    for _ in range(50):
        delay = policy.compute_delay_ms(attempt)
        assert low - 1e-9 <= delay <= high + 1e-9


def test_default_policy_values():
    policy = RetryPolicy()
    assert (policy.max_attempts, policy.base_delay_ms, policy.max_delay_ms, policy.jitter_ratio) == (4, 100, 1600, 0.2)


def test_capped_delay_never_exceeds_max():
    policy = RetryPolicy(base_delay_ms=100, max_delay_ms=1600, jitter_ratio=0.2)
    for attempt in (5, 6, 10):
        for _ in range(50):
            assert 1600 * 0.8 - 1e-9 <= policy.compute_delay_ms(attempt) <= 1600
