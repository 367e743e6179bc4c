"""
Debt settlement for shared pool expenses.

All amounts are integer cents. Balances are signed: positive means the
participant is owed money, negative means they owe money.

Splitting uses integer arithmetic and hands the division remainder out one
cent at a time to the first members of ``split_between``, so every expense
contributes exactly zero to the sum of balances. The extra cents are not
given to the payer, who may be absent from ``split_between``.
"""
import logging
from typing import Dict, List, Tuple

from exceptions import InvalidExpenseError, InvalidStrategyError
from models import Expense, Payback, SettlementSummary

logger = logging.getLogger(__name__)

GREEDY = 'greedy'
MINIMAL = 'minimal'


def validate_expense(expense: Expense) -> None:
    """Raise InvalidExpenseError if the expense cannot be split"""
    amount = expense.amount_cents
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidExpenseError("amount_cents must be an integer", expense.id)
    if amount <= 0:
        raise InvalidExpenseError("amount_cents must be positive", expense.id)
    if not expense.paid_by:
        raise InvalidExpenseError("paid_by is required", expense.id)
    if not expense.split_between:
        raise InvalidExpenseError("split_between must not be empty", expense.id)
    if len(set(expense.split_between)) != len(expense.split_between):
        raise InvalidExpenseError("split_between contains duplicate members", expense.id)


def split_shares(amount_cents: int, members: List[str]) -> List[Tuple[str, int]]:
    """
    Split an amount between members with cent precision.

    The first ``amount_cents % len(members)`` members carry one extra cent,
    so the shares always add up to ``amount_cents``.

    Example:
        >>> split_shares(1000, ['a', 'b', 'c'])
        [('a', 334), ('b', 333), ('c', 333)]
    """
    if not members:
        raise InvalidExpenseError("At least one member required")

    base, remainder = divmod(amount_cents, len(members))
    return [
        (member, base + 1 if i < remainder else base)
        for i, member in enumerate(members)
    ]


def compute_balances(expenses: List[Expense]) -> Dict[str, int]:
    """
    Compute each participant's net balance across all expenses.

    The payer is credited the full amount and every member of
    ``split_between`` is debited their share. A payer who is also a member
    therefore nets ``amount - own share``; a payer outside the split is
    credited the whole amount.

    Participants appear in the result in order of first appearance
    (payer first, then split members).
    """
    balances: Dict[str, int] = {}

    for expense in expenses:
        validate_expense(expense)

        balances[expense.paid_by] = balances.get(expense.paid_by, 0) + expense.amount_cents
        for member, share in split_shares(expense.amount_cents, expense.split_between):
            balances[member] = balances.get(member, 0) - share

    return balances


def compute_paybacks(balances: Dict[str, int]) -> List[Payback]:
    """
    Suggest paybacks by walking creditors and debtors in insertion order.

    Each creditor collects from debtors in order until their credit is used
    up; a debtor's remaining debt carries over to the next creditor. This is
    order dependent and may produce more transactions than
    compute_minimal_paybacks. The given mapping is not modified.
    """
    working = dict(balances)
    creditors = [person for person, amount in working.items() if amount > 0]
    debtors = [person for person, amount in working.items() if amount < 0]

    paybacks = []
    for creditor in creditors:
        remaining_credit = working[creditor]

        for debtor in debtors:
            debt = -working[debtor]
            if debt > 0 and remaining_credit > 0:
                payment = min(remaining_credit, debt)
                paybacks.append(Payback(
                    from_person=debtor,
                    to_person=creditor,
                    amount_cents=payment
                ))

                remaining_credit -= payment
                working[debtor] += payment

        working[creditor] = remaining_credit

    return paybacks


def compute_minimal_paybacks(balances: Dict[str, int]) -> List[Payback]:
    """
    Suggest paybacks by matching the largest debtor with the largest creditor.

    Every step settles at least one participant completely, so for balanced
    input the result has at most ``n - 1`` paybacks where ``n`` is the number
    of participants with a non-zero balance. Ties go to the participant that
    appears first in ``balances``.
    """
    order = {person: i for i, person in enumerate(balances)}
    creditors = [[person, amount] for person, amount in balances.items() if amount > 0]
    debtors = [[person, -amount] for person, amount in balances.items() if amount < 0]

    def by_size(entry):
        return (-entry[1], order[entry[0]])

    paybacks = []
    while creditors and debtors:
        creditors.sort(key=by_size)
        debtors.sort(key=by_size)
        creditor, debtor = creditors[0], debtors[0]

        payment = min(creditor[1], debtor[1])
        paybacks.append(Payback(
            from_person=debtor[0],
            to_person=creditor[0],
            amount_cents=payment
        ))

        creditor[1] -= payment
        debtor[1] -= payment

        if creditor[1] == 0:
            creditors.pop(0)
        if debtor[1] == 0:
            debtors.pop(0)

    return paybacks


def apply_paybacks(balances: Dict[str, int], paybacks: List[Payback]) -> Dict[str, int]:
    """Return a copy of balances with every payback carried out"""
    adjusted = dict(balances)
    for payback in paybacks:
        adjusted[payback.from_person] = adjusted.get(payback.from_person, 0) + payback.amount_cents
        adjusted[payback.to_person] = adjusted.get(payback.to_person, 0) - payback.amount_cents
    return adjusted


STRATEGIES = {
    GREEDY: compute_paybacks,
    MINIMAL: compute_minimal_paybacks,
}


def settle(expenses: List[Expense], strategy: str = GREEDY) -> SettlementSummary:
    """Compute balances and payback suggestions for a list of expenses"""
    if strategy not in STRATEGIES:
        raise InvalidStrategyError(
            f"Unknown settlement strategy '{strategy}'. Choose from: {', '.join(STRATEGIES)}"
        )

    balances = compute_balances(expenses)
    paybacks = STRATEGIES[strategy](balances)

    logger.debug(
        "Settled %d expenses among %d participants with %s strategy: %d paybacks",
        len(expenses), len(balances), strategy, len(paybacks)
    )

    return SettlementSummary(balances=balances, paybacks=paybacks, strategy=strategy)
