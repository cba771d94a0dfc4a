"""UCB1 bandit scoring.

    ucb1 = w / n + c * sqrt(log2(N) / n)

w is the child's accumulated value, n its visit count and N the parent's
visit count. The natural log of the textbook formula is replaced by an
integer floor of log2; the constant factor log2(e) is folded into c.
"""

import math

from bluefin.core.errors import InvariantViolation

EXPLORATION_CONSTANT = 1.0


def floor_log2(n: int) -> int:
    """Exact floor(log2(n)) for n >= 1, via the bit length (leading-zero count)."""
    if n < 1:
        raise ValueError(f"floor_log2 requires n >= 1, got {n}")
    return n.bit_length() - 1


def ucb1(visits: int, value_sum: float, parent_visits: int,
         c: float = EXPLORATION_CONSTANT) -> float:
    # Unvisited children are ranked by the caller and never reach this point.
    if visits < 1 or parent_visits < 1:
        raise InvariantViolation(
            f"ucb1 called with visits={visits}, parent_visits={parent_visits}"
        )
    return value_sum / visits + c * math.sqrt(floor_log2(parent_visits) / visits)
