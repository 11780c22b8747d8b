from __future__ import annotations

from time import monotonic, sleep


def wait_until(predicate, timeout: float, interval: float = 0.2):
    """Polls a predicate until it returns a truthy value or the deadline passes.

    The sleep between polls never runs past the deadline, so the call returns
    within ``timeout`` plus the cost of one final predicate call.
    """

    deadline = monotonic() + timeout
    while True:
        result = predicate()
        if result:
            return result
        remaining = deadline - monotonic()
        if remaining <= 0:
            return result
        sleep(min(interval, remaining))
