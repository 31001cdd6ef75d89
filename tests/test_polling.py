import pytest

from _verify_action.errors import PollTimeoutError
from _verify_action.polling import PollPolicy, poll_until


class Clock:
    def __init__(self):
        self.sleeps = []

    def sleep(self, seconds):
        self.sleeps.append(seconds)


def test_returns_first_non_none():
    clock = Clock()
    answers = iter([None, None, "done"])

    result = poll_until(lambda: next(answers), PollPolicy(3, 120), sleep=clock.sleep)

    assert result == "done"
    assert clock.sleeps == [3, 3]


def test_timeout_after_ceiling():
    clock = Clock()
    attempts = []

    def check():
        attempts.append(1)
        return None

    with pytest.raises(PollTimeoutError, match=r"120s"):
        poll_until(check, PollPolicy(3, 120), sleep=clock.sleep)

    assert len(attempts) == 40
    assert sum(clock.sleeps) == 120


def test_error_from_check_propagates_immediately():
    clock = Clock()

    def check():
        raise RuntimeError("stop")

    with pytest.raises(RuntimeError):
        poll_until(check, PollPolicy(3, 120), sleep=clock.sleep)
    assert clock.sleeps == []


def test_policy_is_a_parameter():
    clock = Clock()
    with pytest.raises(PollTimeoutError):
        poll_until(lambda: None, PollPolicy(interval_seconds=5, max_wait_seconds=12), sleep=clock.sleep)
    assert clock.sleeps == [5, 5, 5]
