from dataclasses import dataclass, field
from typing import Optional, List, Dict
from datetime import datetime

@dataclass
class Expense:
    """Represents a shared expense fronted by one payer"""
    id: Optional[str]
    description: str
    amount_cents: int
    paid_by: str
    split_between: List[str]
    created_at: datetime = field(default_factory=datetime.now)
    pool_id: str = '1'
    paid_by_name: Optional[str] = None

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'amount_cents': self.amount_cents,
            'paid_by': self.paid_by,
            'paid_by_name': self.paid_by_name,
            'split_between': list(self.split_between),
            'created_at': self.created_at.isoformat(),
            'pool_id': self.pool_id
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Expense':
        created_at = data.get('created_at')
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)

        return cls(
            id=str(data['id']) if data.get('id') is not None else None,
            description=data.get('description', ''),
            amount_cents=data['amount_cents'],
            paid_by=str(data['paid_by']),
            split_between=[str(m) for m in data.get('split_between', [])],
            created_at=created_at or datetime.now(),
            pool_id=str(data.get('pool_id', '1')),
            paid_by_name=data.get('paid_by_name')
        )

@dataclass
class Payback:
    """Represents a suggested payment from a debtor to a creditor"""
    from_person: str
    to_person: str
    amount_cents: int

    @property
    def description(self) -> str:
        return f"{self.from_person} owes {self.to_person}"

    def to_dict(self):
        return {
            'from': self.from_person,
            'to': self.to_person,
            'amount_cents': self.amount_cents,
            'amount': f"{self.amount_cents / 100:.2f}",
            'description': self.description
        }

@dataclass
class SettlementSummary:
    """Balances and payback suggestions computed for a list of expenses"""
    balances: Dict[str, int]
    paybacks: List[Payback]
    strategy: str = 'greedy'

    @property
    def is_settled(self) -> bool:
        return not self.paybacks

    @property
    def message(self) -> str:
        if self.is_settled:
            return "All settled up!"
        count = len(self.paybacks)
        return f"{count} payback{'s' if count != 1 else ''} suggested"

    def to_dict(self):
        return {
            'balances': dict(self.balances),
            'paybacks': [p.to_dict() for p in self.paybacks],
            'strategy': self.strategy,
            'is_settled': self.is_settled,
            'message': self.message
        }
