from collections.abc import Callable
import logging
import time


logger = logging.getLogger(__name__)


class RetryExhaustedError(RuntimeError):
    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


def run_with_retries(
    operation: Callable[[], object],
    *,
    max_retries: int,
    backoff_seconds: float,
    should_retry: Callable[[Exception], bool] | None = None,
    label: str = "operation",
) -> object:
    last_error: Exception | None = None
    attempt = 0

    while attempt <= max_retries:
        attempt += 1
        try:
            return operation()
        except Exception as exc:
            last_error = exc
            if should_retry is not None and not should_retry(exc):
                logger.warning("%s failed with a non-retryable error", label, extra={"attempt": attempt})
                break
            if attempt > max_retries:
                break
            delay = backoff_seconds * attempt
            logger.warning("%s failed, retrying", label, extra={"attempt": attempt, "delay_seconds": delay})
            time.sleep(delay)

    raise RetryExhaustedError(f"{label}: {last_error}", attempts=attempt) from last_error
