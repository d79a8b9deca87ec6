# classvote/__init__.py

import logging
from datetime import timedelta

from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_mail import Mail
from flask_sqlalchemy import SQLAlchemy
from werkzeug.middleware.proxy_fix import ProxyFix

db = SQLAlchemy()  # Database ORM backing the key-value store
mail = Mail()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object('classvote.config.Config')
    if config_object is not None:
        app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Fix proxy headers so link origins and rate-limit keys see the client
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    db.init_app(app)
    mail.init_app(app)
    limiter.init_app(app)

    # Ensure model modules are imported so SQLAlchemy metadata is populated
    from classvote.database import models  # noqa: F401

    with app.app_context():
        db.create_all()

    app.extensions['classvote'] = build_services(app)

    from classvote.routes import api
    from classvote.cli import register_commands
    app.register_blueprint(api)
    register_commands(app)
    return app


def build_services(app):
    """Wire the services with explicit dependencies; no module-level singletons."""
    from classvote.audit.audit_logger import AuditLogger
    from classvote.database.kv_store import KeyValueStore
    from classvote.notifications.mailer import Notifier
    from classvote.registration.manager import RegistrationManager
    from classvote.security.input_validator import InputValidator
    from classvote.security.token_manager import TokenStore
    from classvote.voting.ballot_box import BallotBox
    from classvote.voting.ballot_issuer import BallotIssuer

    store = KeyValueStore()
    tokens = TokenStore(store)
    notifier = Notifier(mail)
    validator = InputValidator()
    base_url = app.config['PUBLIC_BASE_URL']

    return {
        'store': store,
        'tokens': tokens,
        'validator': validator,
        'audit': AuditLogger(log_dir=app.config['AUDIT_LOG_DIR']),
        'registration': RegistrationManager(
            store, tokens, notifier,
            token_ttl=timedelta(minutes=app.config['REGISTRATION_TOKEN_TTL_MINUTES']),
            base_url=base_url),
        'issuer': BallotIssuer(
            store, tokens, notifier,
            token_ttl=timedelta(minutes=app.config['VOTING_TOKEN_TTL_MINUTES']),
            base_url=base_url),
        'ballot_box': BallotBox(
            store, tokens, validator,
            reject_self_votes=app.config['REJECT_SELF_VOTES']),
    }
