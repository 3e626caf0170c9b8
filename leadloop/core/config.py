"""Centralized environment configuration for LeadLoop"""
import os
from pathlib import Path
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent.parent
load_dotenv(ROOT_DIR / '.env')

# Runtime environment
ENVIRONMENT: str = os.environ.get('ENVIRONMENT', 'development').lower()

# MongoDB
MONGO_URL: str = os.environ['MONGO_URL']
DB_NAME: str = os.environ['DB_NAME']

# JWT (required)
JWT_SECRET: str = os.environ.get('JWT_SECRET', '')
JWT_ALGORITHM: str = "HS256"
JWT_EXPIRATION_HOURS: int = int(os.environ.get('JWT_EXPIRATION_HOURS', '24'))

# Twilio (system-wide sender when a client has no number of its own)
TWILIO_ACCOUNT_SID: str = os.environ.get('TWILIO_ACCOUNT_SID', '')
TWILIO_AUTH_TOKEN: str = os.environ.get('TWILIO_AUTH_TOKEN', '')
TWILIO_FROM_NUMBER: str = os.environ.get('TWILIO_FROM_NUMBER', '')

# Resend
RESEND_API_KEY: str = os.environ.get('RESEND_API_KEY', '')
RESEND_FROM_EMAIL: str = os.environ.get('RESEND_FROM_EMAIL', 'LeadLoop <notifications@leadloop.app>')

# Public URL Twilio uses to reach the call-status webhook
PUBLIC_BASE_URL: str = os.environ.get('PUBLIC_BASE_URL', '').rstrip('/')

# Rate limiting on public endpoints
RATE_LIMIT_ENABLED: bool = os.environ.get('RATE_LIMIT_ENABLED', 'true').lower() in {'1', 'true', 'yes'}
PUBLIC_RATE_LIMIT: str = os.environ.get('PUBLIC_RATE_LIMIT', '30/minute')


# First admin account, created at startup when no admin exists
BOOTSTRAP_ADMIN_EMAIL: str = os.environ.get('BOOTSTRAP_ADMIN_EMAIL', '')
BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get('BOOTSTRAP_ADMIN_PASSWORD', '')


def _default_cors() -> str:
    return 'http://localhost:3000,http://localhost:5173,http://localhost'

CORS_ORIGINS: list[str] = [origin.strip() for origin in os.environ.get('CORS_ORIGINS', _default_cors()).split(',') if origin.strip()]


def is_production() -> bool:
    return ENVIRONMENT in {"prod", "production"}


def validate_security_settings() -> None:
    """Fail fast for insecure runtime defaults."""
    if not JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set")

    if JWT_SECRET == 'default-secret-change-me' or len(JWT_SECRET) < 16:
        raise RuntimeError("JWT_SECRET is too weak; set a stronger secret")

    if not CORS_ORIGINS or '*' in CORS_ORIGINS:
        raise RuntimeError("CORS_ORIGINS must be explicit and cannot include '*'")

    if is_production() and len(JWT_SECRET) < 32:
        raise RuntimeError("In production, JWT_SECRET must be at least 32 chars long")

    if is_production() and not PUBLIC_BASE_URL:
        raise RuntimeError("In production, PUBLIC_BASE_URL must be set for Twilio callbacks")
