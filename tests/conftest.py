import pytest
from datetime import datetime

from app import create_app
from config import Config
from database import Database
from models import Expense


@pytest.fixture
def make_expense():
    """Return a factory for Expense objects with sensible defaults."""
    counter = {'next': 1}

    def _make(amount_cents, paid_by, split_between, description='Shared cost', pool_id='1', expense_id=None):
        if expense_id is None:
            expense_id = str(counter['next'])
            counter['next'] += 1
        return Expense(
            id=expense_id,
            description=description,
            amount_cents=amount_cents,
            paid_by=paid_by,
            split_between=list(split_between),
            created_at=datetime(2024, 1, 15, 12, 0),
            pool_id=pool_id,
        )

    return _make


@pytest.fixture
def no_twilio(monkeypatch):
    """Make sure no test ever talks to Twilio."""
    monkeypatch.setattr(Config, 'TWILIO_ACCOUNT_SID', '')
    monkeypatch.setattr(Config, 'TWILIO_AUTH_TOKEN', '')


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / 'test_expenses.db')


@pytest.fixture
def database(db_path):
    return Database(db_path)


@pytest.fixture
def app(db_path, no_twilio):
    """Flask app bound to a temporary sqlite ledger."""

    class TestConfig(Config):
        TESTING = True
        DATABASE_PATH = db_path
        SETTLEMENT_STRATEGY = 'greedy'

    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def trip_pool(client):
    """Pool '1' with the hotel and dinner expenses from the trip example."""
    client.post('/api/pools/1/expenses', json={
        'description': 'Hotel booking',
        'amount_cents': 24000,
        'paid_by': 'you',
        'paid_by_name': 'You',
        'split_between': ['you', 'sarah', 'mike'],
    })
    client.post('/api/pools/1/expenses', json={
        'description': 'Dinner at restaurant',
        'amount': '85.00',
        'paid_by': 'sarah',
        'paid_by_name': 'Sarah',
        'split_between': ['you', 'sarah'],
    })
    return '1'
