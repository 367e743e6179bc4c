import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Application configuration"""

    # Flask settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Database settings
    DATABASE_PATH = os.getenv('DATABASE_PATH', 'poolup_expenses.db')

    # Twilio settings for WhatsApp
    TWILIO_ACCOUNT_SID = os.getenv('TWILIO_ACCOUNT_SID', '')
    TWILIO_AUTH_TOKEN = os.getenv('TWILIO_AUTH_TOKEN', '')
    TWILIO_WHATSAPP_NUMBER = os.getenv('TWILIO_WHATSAPP_NUMBER', 'whatsapp:+14155238886')

    # Settlement settings ("greedy" or "minimal")
    SETTLEMENT_STRATEGY = os.getenv('SETTLEMENT_STRATEGY', 'greedy')

    # Application settings
    MAX_PARTICIPANTS = 50
    MIN_AMOUNT_CENTS = 1
    MAX_AMOUNT_CENTS = 100000000
