import random
from dataclasses import dataclass, field


@dataclass
class ExponentialBackoff:
    """
    Exponential backoff with optional jitter between probe attempts.

    The delay grows according to:

        next_delay = min(current * factor, maximum) + jitter

    Jitter keeps a fan-out of probes that failed together from retrying
    in lockstep against the same daemons.
    """

    initial: float = 0.2
    """Initial delay (in seconds) before the first retry."""

    maximum: float = 5.0
    """Maximum allowed delay (in seconds)."""

    factor: float = 2.0
    """Multiplicative factor applied to the delay after each retry."""

    jitter: float = 0.1
    """Maximum random jitter added to each delay."""

    _current: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self):
        self._current = self.initial

    def next_delay(self) -> float:
        """
        Compute and return the next backoff delay.

            delay = current_delay + random_jitter
            current_delay = min(current_delay * factor, maximum)
        """
        delay = self._current
        self._current = min(self._current * self.factor, self.maximum)

        if self.jitter > 0:
            delay += random.uniform(0, self.jitter)

        return delay

    def worst_case_delay(self, sleeps: int) -> float:
        """
        Upper bound of the total time spent sleeping over `sleeps` successive
        delays, jitter included, starting from the initial delay.
        """
        total, current = 0.0, self.initial
        for _ in range(max(sleeps, 0)):
            total += current + max(self.jitter, 0)
            current = min(current * self.factor, self.maximum)
        return total
