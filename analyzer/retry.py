"""
Retry policy shared by the fetcher, probe generator and answer prober.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from .errors import is_retryable

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """
    Bounded retries with linear backoff.

    Attempt n (1-indexed) that fails with a retryable error is followed by a
    sleep of n * base_delay before attempt n + 1. `attempts` records how many
    calls the most recent run() made.
    """
    max_retries: int = 2
    base_delay: float = 1.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    attempts: int = field(default=0, init=False)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        return attempt * self.base_delay

    def run(
        self,
        fn: Callable[[], T],
        retryable: Callable[[Exception], bool] = is_retryable,
        on_retry: Optional[Callable[[int, Exception], None]] = None,
    ) -> T:
        """
        Call fn until it succeeds, the error is not retryable, or attempts run out.

        The last error is re-raised unchanged.
        """
        self.attempts = 0
        while True:
            self.attempts += 1
            try:
                return fn()
            except Exception as e:
                if not retryable(e) or self.attempts >= self.max_attempts:
                    raise
                if on_retry:
                    on_retry(self.attempts, e)
                self.sleep(self.delay_for(self.attempts))
