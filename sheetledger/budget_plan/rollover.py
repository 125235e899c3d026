"""
Envelope rollover accounting.

Unspent budget carries into the next month; overspend eats into the carried
buffer, which never goes below zero. For a row of monthly amounts:

    rollover[0] = 0
    rollover[i] = max(0, rollover[i-1] + reference_budget - amounts[i-1])
"""
from decimal import Decimal
from typing import Iterable, List

ZERO = Decimal("0")


def compute_rollover_balances(amounts: Iterable[Decimal], reference_budget: Decimal) -> List[Decimal]:
    """Return the opening rollover balance of every month in amounts."""
    balances: List[Decimal] = []
    running = ZERO

    for amount in amounts:
        balances.append(running)
        running = max(ZERO, running + (reference_budget - amount))

    return balances


def rollover_balances_for(
    rollover_flag: bool,
    monthly_budget: Decimal,
    amounts: List[Decimal],
) -> List[Decimal]:
    """Rollover balances for a category row; all zero unless rollover is enabled."""
    if not rollover_flag:
        return [ZERO for _ in amounts]
    return compute_rollover_balances(amounts, monthly_budget)
