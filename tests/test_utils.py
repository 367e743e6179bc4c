"""
Tests for input validation, money formatting and WhatsApp reminders.
"""

import pytest

import utils
from config import Config
from models import Payback
from utils import (
    build_settlement_message,
    format_cents,
    format_phone_number,
    parse_amount_to_cents,
    send_whatsapp_notification,
    validate_expense_data,
    validate_notify_members,
    validate_phone_number,
)


def expense_payload(**overrides):
    data = {
        'description': 'Dinner',
        'amount_cents': 8500,
        'paid_by': '2',
        'split_between': ['1', '2'],
    }
    data.update(overrides)
    return data


class TestMoney:

    @pytest.mark.parametrize('value, expected', [
        ('12.34', 1234),
        ('$5', 500),
        (19.99, 1999),
        (240, 24000),
        ('10.005', 1001),
        (' 0.10 ', 10),
    ])
    def test_parse_amount_to_cents(self, value, expected):
        assert parse_amount_to_cents(value) == expected

    @pytest.mark.parametrize('value', ['abc', '', 'nan', None, True, '1e30'])
    def test_parse_amount_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_amount_to_cents(value)

    def test_format_cents(self):
        assert format_cents(1234) == '$12.34'
        assert format_cents(0) == '$0.00'
        assert format_cents(-500) == '-$5.00'
        assert format_cents(100, signed=True) == '+$1.00'
        assert format_cents(0, signed=True) == '$0.00'


class TestValidateExpenseData:

    def test_valid_with_cents(self):
        assert validate_expense_data(expense_payload()) == (True, "")

    def test_valid_with_dollars(self):
        data = expense_payload(amount='85.00')
        del data['amount_cents']

        assert validate_expense_data(data) == (True, "")

    def test_not_a_dict(self):
        is_valid, error = validate_expense_data(['Dinner'])

        assert not is_valid
        assert 'JSON object' in error

    def test_missing_description(self):
        is_valid, error = validate_expense_data(expense_payload(description='  '))

        assert not is_valid
        assert error == "Description is required"

    def test_missing_amount(self):
        data = expense_payload()
        del data['amount_cents']

        assert validate_expense_data(data) == (False, "Amount is required")

    def test_missing_payer(self):
        assert validate_expense_data(expense_payload(paid_by='')) == (False, "Please select who paid")

    @pytest.mark.parametrize('paid_by', ['   ', None, True])
    def test_blank_payer(self, paid_by):
        assert validate_expense_data(expense_payload(paid_by=paid_by)) == (False, "Please select who paid")

    def test_zero_is_a_valid_payer_id(self):
        assert validate_expense_data(expense_payload(paid_by=0, split_between=[0, 1])) == (True, "")

    def test_blank_split_member(self):
        is_valid, error = validate_expense_data(expense_payload(split_between=['1', '  ']))

        assert not is_valid
        assert error == "Split members must have an id"

    def test_huge_dollar_amount(self):
        data = expense_payload(amount='1e30')
        del data['amount_cents']

        assert validate_expense_data(data) == (False, "Invalid amount")

    def test_fractional_cents_rejected(self):
        is_valid, error = validate_expense_data(expense_payload(amount_cents=10.5))

        assert not is_valid
        assert 'whole number' in error

    def test_invalid_dollar_amount(self):
        data = expense_payload(amount='lots')
        del data['amount_cents']

        assert validate_expense_data(data) == (False, "Invalid amount")

    def test_amount_limits(self):
        is_valid, error = validate_expense_data(expense_payload(amount_cents=0))
        assert not is_valid
        assert 'at least' in error

        is_valid, error = validate_expense_data(expense_payload(amount_cents=Config.MAX_AMOUNT_CENTS + 1))
        assert not is_valid
        assert 'cannot exceed' in error

    def test_empty_split(self):
        assert validate_expense_data(expense_payload(split_between=[])) == (
            False, "Please select who to split the expense with"
        )

    def test_too_many_members(self):
        members = [str(i) for i in range(Config.MAX_PARTICIPANTS + 1)]
        is_valid, error = validate_expense_data(expense_payload(split_between=members))

        assert not is_valid
        assert str(Config.MAX_PARTICIPANTS) in error

    def test_duplicate_members(self):
        is_valid, error = validate_expense_data(expense_payload(split_between=['1', '2', '1']))

        assert not is_valid
        assert 'only appear once' in error


class TestPhoneNumbers:

    def test_validate_phone_number(self):
        assert validate_phone_number('(555) 123-4567')
        assert validate_phone_number('+44 20 7946 0958')
        assert not validate_phone_number('12345')
        assert not validate_phone_number('')

    def test_format_phone_number(self):
        assert format_phone_number('555-123-4567') == 'whatsapp:+15551234567'
        assert format_phone_number('+44 20 7946 0958') == 'whatsapp:+442079460958'
        assert format_phone_number('') is None


class TestValidateNotifyMembers:

    def test_valid_members(self):
        members = [
            {'id': 'you', 'name': 'You', 'phone_number': '555-123-4567'},
            {'id': 'sarah'},
            {'id': 3, 'phone_number': ''},
        ]

        assert validate_notify_members(members) == (True, "")

    @pytest.mark.parametrize('members', [None, [], 'alice'])
    def test_members_required(self, members):
        assert validate_notify_members(members) == (False, "members is required")

    def test_member_must_be_object(self):
        assert validate_notify_members(['alice']) == (False, "Member 1 must be an object")

    @pytest.mark.parametrize('member', [{'name': 'Alice'}, {'id': '  '}, {'id': None}])
    def test_member_needs_id(self, member):
        assert validate_notify_members([{'id': 'you'}, member]) == (False, "Member 2 must have an id")

    def test_invalid_phone_number(self):
        is_valid, error = validate_notify_members([{'id': 'you', 'name': 'Alex', 'phone_number': '12345'}])

        assert not is_valid
        assert error == "Invalid phone number for Alex"

    def test_phone_number_must_be_text(self):
        is_valid, error = validate_notify_members([{'id': 'you', 'phone_number': 5551234567}])

        assert not is_valid
        assert 'phone number' in error


class TestSettlementMessage:

    balances = {'you': 11750, 'sarah': -3750, 'mike': -8000, 'ana': 0}
    paybacks = [Payback('sarah', 'you', 3750), Payback('mike', 'you', 8000)]
    names = {'you': 'Alex', 'sarah': 'Sarah Chen', 'mike': 'Mike Rodriguez'}

    def test_creditor_message(self):
        message = build_settlement_message(
            'you', 'Alex', self.balances, self.paybacks, pool_name='Tokyo Trip', names=self.names
        )

        assert message.startswith('Hi Alex! Here is where things stand for Tokyo Trip.')
        assert 'You get back $117.50.' in message
        assert '• Sarah Chen owes you $37.50' in message
        assert '• Mike Rodriguez owes you $80.00' in message

    def test_debtor_message(self):
        message = build_settlement_message('mike', 'Mike', self.balances, self.paybacks, names=self.names)

        assert 'You owe $80.00.' in message
        assert '• Pay $80.00 to Alex' in message
        assert 'Sarah' not in message

    def test_settled_message(self):
        message = build_settlement_message('ana', 'Ana', self.balances, self.paybacks)

        assert "You're all settled up!" in message

    def test_unknown_names_fall_back_to_ids(self):
        message = build_settlement_message('sarah', 'Sarah', self.balances, self.paybacks)

        assert '• Pay $37.50 to you' in message


class FakeMessages:

    def __init__(self):
        self.sent = []

    def create(self, **kwargs):
        self.sent.append(kwargs)

        class Sent:
            sid = 'SM123'

        return Sent()


class FakeClient:
    instances = []

    def __init__(self, account_sid, auth_token):
        self.credentials = (account_sid, auth_token)
        self.messages = FakeMessages()
        FakeClient.instances.append(self)


class TestSendWhatsappNotification:

    def test_skipped_without_credentials(self, no_twilio):
        assert send_whatsapp_notification('5551234567', 'hello', 'Alex') is False

    def test_skipped_without_phone(self, monkeypatch):
        monkeypatch.setattr(Config, 'TWILIO_ACCOUNT_SID', 'AC123')
        monkeypatch.setattr(Config, 'TWILIO_AUTH_TOKEN', 'secret')

        assert send_whatsapp_notification(None, 'hello', 'Alex') is False

    def test_sends_through_twilio(self, monkeypatch):
        monkeypatch.setattr(Config, 'TWILIO_ACCOUNT_SID', 'AC123')
        monkeypatch.setattr(Config, 'TWILIO_AUTH_TOKEN', 'secret')
        monkeypatch.setattr(utils, 'Client', FakeClient)
        FakeClient.instances = []

        assert send_whatsapp_notification('555-123-4567', 'You owe $5.00.', 'Alex') is True

        client = FakeClient.instances[0]
        assert client.credentials == ('AC123', 'secret')
        assert client.messages.sent == [{
            'from_': Config.TWILIO_WHATSAPP_NUMBER,
            'body': 'You owe $5.00.',
            'to': 'whatsapp:+15551234567',
        }]
