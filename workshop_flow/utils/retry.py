import random


def compute_backoff(attempt: int, base: float = 0.5, jitter: float = 0.25) -> float:
    """Exponential backoff with jitter: base, 2*base, 4*base, ... plus noise."""
    delay = base * (2 ** (attempt - 1))
    return delay + random.uniform(0, jitter)
