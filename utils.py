import re
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple
from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException
from models import Payback
from config import Config

logger = logging.getLogger(__name__)

def validate_phone_number(phone: str) -> bool:
    """Validate phone number format"""
    if not phone:
        return False

    # Remove all non-digit characters
    digits = re.sub(r'\D', '', phone)

    # Phone number should have 10-15 digits
    return 10 <= len(digits) <= 15

def format_phone_number(phone: str) -> Optional[str]:
    """Format phone number for WhatsApp (E.164 format)"""
    if not phone:
        return None

    digits = re.sub(r'\D', '', phone)

    # If doesn't start with country code, assume +1 (US)
    if len(digits) == 10:
        digits = '1' + digits

    return f'whatsapp:+{digits}'

def parse_amount_to_cents(value) -> int:
    """
    Convert a dollar amount (string or number) into integer cents.
    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")

    try:
        amount = Decimal(str(value).strip().lstrip('$'))
    except (InvalidOperation, AttributeError):
        raise ValueError(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")

    try:
        # amounts beyond the context precision cannot be quantized
        return int((amount * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")

def format_cents(cents: int, signed: bool = False) -> str:
    """Format cents as dollars, e.g. 1234 -> '$12.34'"""
    sign = ''
    if cents < 0:
        sign = '-'
    elif signed and cents > 0:
        sign = '+'

    return f"{sign}${abs(cents) / 100:.2f}"

def member_id(value) -> Optional[str]:
    """Normalize a participant id; None when missing or blank"""
    if value is None or isinstance(value, (bool, dict, list)):
        return None

    value = str(value).strip()
    return value or None

def validate_expense_data(data: dict) -> Tuple[bool, str]:
    """
    Validate expense input data
    Returns (is_valid, error_message)
    """
    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    # Check required fields
    description = data.get('description')
    if not isinstance(description, str) or not description.strip():
        return False, "Description is required"

    if 'amount_cents' not in data and 'amount' not in data:
        return False, "Amount is required"

    if member_id(data.get('paid_by')) is None:
        return False, "Please select who paid"

    # Validate amount
    if 'amount_cents' in data:
        amount_cents = data['amount_cents']
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
            return False, "amount_cents must be a whole number of cents"
    else:
        try:
            amount_cents = parse_amount_to_cents(data['amount'])
        except ValueError:
            return False, "Invalid amount"

    if amount_cents < Config.MIN_AMOUNT_CENTS:
        return False, f"Amount must be at least {format_cents(Config.MIN_AMOUNT_CENTS)}"
    if amount_cents > Config.MAX_AMOUNT_CENTS:
        return False, f"Amount cannot exceed {format_cents(Config.MAX_AMOUNT_CENTS)}"

    # Validate split members
    split_between = data.get('split_between')
    if not isinstance(split_between, list) or len(split_between) == 0:
        return False, "Please select who to split the expense with"

    if len(split_between) > Config.MAX_PARTICIPANTS:
        return False, f"Cannot split between more than {Config.MAX_PARTICIPANTS} people"

    members = [member_id(m) for m in split_between]
    if any(m is None for m in members):
        return False, "Split members must have an id"

    if len(set(members)) != len(members):
        return False, "Each member can only appear once in the split"

    return True, ""

def validate_notify_members(members) -> Tuple[bool, str]:
    """
    Validate the member list of a reminder request
    Returns (is_valid, error_message)
    """
    if not isinstance(members, list) or not members:
        return False, "members is required"

    if len(members) > Config.MAX_PARTICIPANTS:
        return False, f"Cannot notify more than {Config.MAX_PARTICIPANTS} members"

    for index, member in enumerate(members):
        if not isinstance(member, dict):
            return False, f"Member {index + 1} must be an object"

        if member_id(member.get('id')) is None:
            return False, f"Member {index + 1} must have an id"

        phone = member.get('phone_number') or ''
        if not isinstance(phone, str):
            return False, f"Invalid phone number for member {index + 1}"
        if phone.strip() and not validate_phone_number(phone):
            return False, f"Invalid phone number for {member.get('name') or member['id']}"

    return True, ""

def build_settlement_message(
    participant_id: str,
    name: str,
    balances: Dict[str, int],
    paybacks: List[Payback],
    pool_name: str = 'your pool',
    names: Optional[Dict[str, str]] = None
) -> str:
    """Build the reminder text for one participant"""
    names = names or {}
    balance = balances.get(participant_id, 0)

    message = f"Hi {name}! Here is where things stand for {pool_name}.\n\n"

    if balance > 0:
        message += f"You get back {format_cents(balance)}.\n\n"
        message += "Settlement details:\n"

        for payback in paybacks:
            if payback.to_person == participant_id:
                debtor = names.get(payback.from_person, payback.from_person)
                message += f"• {debtor} owes you {format_cents(payback.amount_cents)}\n"

    elif balance < 0:
        message += f"You owe {format_cents(balance)[1:]}.\n\n"
        message += "Settlement details:\n"

        for payback in paybacks:
            if payback.from_person == participant_id:
                creditor = names.get(payback.to_person, payback.to_person)
                message += f"• Pay {format_cents(payback.amount_cents)} to {creditor}\n"

    else:
        message += "You're all settled up! No payments needed.\n"

    return message

def send_whatsapp_notification(phone_number: Optional[str], message: str, name: str = '') -> bool:
    """
    Send WhatsApp notification to participant
    Returns True if successful, False otherwise
    """
    # Check if Twilio credentials are configured
    if not Config.TWILIO_ACCOUNT_SID or not Config.TWILIO_AUTH_TOKEN:
        logger.info("Twilio credentials not configured. Skipping notification for %s", name)
        return False

    if not phone_number:
        logger.info("No phone number for %s", name)
        return False

    try:
        client = Client(Config.TWILIO_ACCOUNT_SID, Config.TWILIO_AUTH_TOKEN)

        twilio_message = client.messages.create(
            from_=Config.TWILIO_WHATSAPP_NUMBER,
            body=message,
            to=format_phone_number(phone_number)
        )

        logger.info("WhatsApp notification sent to %s: %s", name, twilio_message.sid)
        return True

    except TwilioRestException as e:
        logger.error("Error sending WhatsApp notification to %s: %s", name, e)
        return False
