"""
Domain exceptions for expense splitting.

Routes translate these into JSON error responses; the settlement functions
raise them instead of dividing by zero or returning nonsense balances.
"""


class SettlementError(Exception):
    """Base exception for settlement errors."""
    pass


class InvalidExpenseError(SettlementError):
    """Raised when an expense cannot take part in a settlement."""

    def __init__(self, message, expense_id=None):
        self.expense_id = expense_id
        if expense_id is not None:
            message = f"Expense {expense_id}: {message}"
        super().__init__(message)


class InvalidStrategyError(SettlementError):
    """Raised for an unknown payback strategy name."""
    pass
