import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

from ..exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Bounded attempts with linear backoff: retry n waits n * base_delay seconds."""

    def __init__(self, max_attempts: int = 3, base_delay: float = 1.0):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if base_delay <= 0:
            raise ValueError("base_delay must be positive")
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    def delay_for(self, retry_number: int) -> float:
        return retry_number * self.base_delay

    def wait_strategy(self) -> wait_incrementing:
        return wait_incrementing(start=self.base_delay, increment=self.base_delay)

    def __repr__(self):
        return f"RetryPolicy(max_attempts={self.max_attempts}, base_delay={self.base_delay})"


def run_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    retry_on: Tuple[Type[BaseException], ...],
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
    log: Optional[logging.Logger] = None,
) -> T:
    """
    Call ``operation`` until it succeeds or ``policy.max_attempts`` is reached.

    Only exceptions in ``retry_on`` are retried; anything else propagates
    immediately. Running out of attempts raises RetryExhaustedError with the
    last error attached.
    """
    log = log or logger

    def log_retry(retry_state):
        log.warning(
            f"{description} failed (attempt {retry_state.attempt_number}/{policy.max_attempts}), "
            f"retrying in {retry_state.next_action.sleep:.1f}s: {retry_state.outcome.exception()}"
        )

    retrying = Retrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=policy.wait_strategy(),
        retry=retry_if_exception_type(retry_on),
        sleep=sleep,
        before_sleep=log_retry,
    )

    try:
        return retrying(operation)
    except RetryError as e:
        last_error = e.last_attempt.exception()
        attempts = e.last_attempt.attempt_number
        log.error(f"{description} exhausted after {attempts} attempts: {last_error}")
        raise RetryExhaustedError(description, attempts, last_error) from last_error
