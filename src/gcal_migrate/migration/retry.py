"""
Bounded flat retry for provider calls.
"""

import logging
import time
from typing import Callable

from tenacity import RetryCallState
from tenacity import Retrying
from tenacity import stop_after_attempt
from tenacity import wait_fixed

from gcal_migrate.models import RetryPolicy


def call_with_retry(
    func: Callable,
    *args,
    policy: RetryPolicy,
    logger: logging.Logger,
    action: str,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Call ``func(*args)`` until it succeeds or the policy's attempts run out.

    Every exception counts as a failed attempt; the delay is the same between
    all attempts and there is no sleep after the last one.

    Returns:
        True on the first successful attempt, False once all attempts failed
    """

    def _log_attempt(retry_state: RetryCallState):
        logger.warning(
            f"Error {action} (attempt {retry_state.attempt_number}/{policy.attempts}): "
            f"{retry_state.outcome.exception()}"
        )

    retrying = Retrying(
        stop=stop_after_attempt(policy.attempts),
        wait=wait_fixed(policy.delay),
        sleep=sleep,
        before_sleep=_log_attempt,
        reraise=True,
    )
    try:
        for attempt in retrying:
            with attempt:
                func(*args)
    except Exception as e:
        logger.error(f"Error {action}, giving up after {policy.attempts} attempts: {e}")
        return False
    return True
