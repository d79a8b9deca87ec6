# classvote/config.py

import os


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me-in-production')

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///classvote.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Base URL the emailed links point at when the request carries no Origin/Referer
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', 'http://localhost:3001')
    # Build links from the request's Origin/Referer instead of PUBLIC_BASE_URL
    TRUST_REQUEST_ORIGIN = _env_bool('TRUST_REQUEST_ORIGIN', False)

    REGISTRATION_TOKEN_TTL_MINUTES = int(os.environ.get('REGISTRATION_TOKEN_TTL_MINUTES', '60'))
    VOTING_TOKEN_TTL_MINUTES = int(os.environ.get('VOTING_TOKEN_TTL_MINUTES', '30'))

    # Self-exclusion is a presentation rule unless this is switched on
    REJECT_SELF_VOTES = _env_bool('REJECT_SELF_VOTES', False)

    # Rate limiting (Flask-Limiter)
    LINK_RATE_LIMIT = os.environ.get('LINK_RATE_LIMIT', '20/hour')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_ENABLED = _env_bool('RATELIMIT_ENABLED', True)

    # Outbound mail (Flask-Mail); delivery is best effort
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', '1025'))
    MAIL_USE_TLS = _env_bool('MAIL_USE_TLS', False)
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'noreply@voting-app.local')
    MAIL_SUPPRESS_SEND = _env_bool('MAIL_SUPPRESS_SEND', False)

    AUDIT_LOG_DIR = os.environ.get('AUDIT_LOG_DIR', 'logs')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    RATELIMIT_ENABLED = False
    MAIL_SUPPRESS_SEND = True
    REJECT_SELF_VOTES = False
