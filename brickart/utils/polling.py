import time
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class PollResult:
    found: bool
    value: Any = None
    attempts: int = 0

    @property
    def timed_out(self) -> bool:
        return not self.found


def poll_until(
    fetch: Callable[[], Any],
    *,
    interval: float,
    max_attempts: int,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """Call ``fetch`` until it returns a truthy value or attempts run out.

    Sleeps ``interval`` seconds before every attempt, so the first call happens
    after one interval (the caller has usually just tried once already).
    Exceptions raised by ``fetch`` propagate.
    """
    for attempt in range(1, max_attempts + 1):
        sleep(interval)
        value = fetch()
        if value:
            return PollResult(found=True, value=value, attempts=attempt)
    return PollResult(found=False, attempts=max_attempts)
