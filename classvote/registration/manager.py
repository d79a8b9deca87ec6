# classvote/registration/manager.py
"""Voter registration, direct or through an emailed single-use link.

Registration writes two records under the anonymized voter key: the
VoterRecord (``voter:<key>``) and the CandidateRecord (``candidate:<key>``).
The store has no multi-key transactions, so the pair is written voter
first, candidate second. A failure between the two writes leaves a voter
without a candidate entry; it is logged and surfaced as ``StorageError``,
and a retry is refused with ``AlreadyRegistered``.

Registration tokens hold the raw email because registration is not final
until ``complete_registration``. They are consumed only after both records
are written, so a failed completion can be retried with the same link.
"""

import logging
from datetime import datetime, timedelta, timezone

from classvote.database.records import build_link, candidate_key, voter_key
from classvote.errors import (
    AlreadyRegistered,
    InvalidOrExpiredToken,
    StorageError,
    TokenExpired,
    TokenNotFound,
)
from classvote.security.identity_hasher import anonymize
from classvote.security.token_manager import TokenKind

logger = logging.getLogger(__name__)


class RegistrationManager:
    def __init__(self, store, tokens, notifier=None,
                 token_ttl=timedelta(hours=1), base_url='http://localhost:3001'):
        self.store = store
        self.tokens = tokens
        self.notifier = notifier
        self.token_ttl = token_ttl
        self.base_url = base_url

    def _now(self):
        return datetime.now(timezone.utc)

    def is_registered(self, voter_id):
        return self.store.get(voter_key(voter_id)) is not None

    def register_direct(self, email, full_name, class_label):
        voter_id = anonymize(email)
        if self.is_registered(voter_id):
            raise AlreadyRegistered()
        self._create_records(voter_id, full_name, class_label)
        logger.info("Registered new voter/candidate in class %s", class_label)
        return voter_id

    def request_registration_link(self, email, origin=None):
        voter_id = anonymize(email)
        if self.is_registered(voter_id):
            raise AlreadyRegistered()

        token = self.tokens.issue(TokenKind.REGISTRATION, {"email": email}, self.token_ttl)
        link = build_link(origin or self.base_url, "regToken", token)

        email_sent = False
        if self.notifier is not None:
            email_sent = self.notifier.send_registration_link(
                email, link, int(self.token_ttl.total_seconds() // 60))
        if not email_sent:
            logger.info("Registration email not delivered, returning link directly")
        return {"link": link, "token": token, "email_sent": email_sent}

    def verify_registration_token(self, token):
        record = self._resolve_live(token)
        return {"email": record["email"]}

    def complete_registration(self, token, full_name, class_label):
        record = self._resolve_live(token)
        voter_id = anonymize(record["email"])

        # The link may have been issued before another path registered this email
        if self.is_registered(voter_id):
            raise AlreadyRegistered()

        self._create_records(voter_id, full_name, class_label)
        self.tokens.consume(TokenKind.REGISTRATION, token)
        logger.info("Completed registration in class %s", class_label)
        return voter_id

    def _resolve_live(self, token):
        try:
            record = self.tokens.resolve(TokenKind.REGISTRATION, token)
        except TokenNotFound:
            raise InvalidOrExpiredToken("Invalid or expired registration token")
        if self.tokens.is_expired(record):
            self.tokens.consume(TokenKind.REGISTRATION, token)
            logger.info("Deleted expired registration token")
            raise TokenExpired("Registration token has expired")
        return record

    def _create_records(self, voter_id, full_name, class_label):
        registered_at = self._now().isoformat()
        self.store.set(voter_key(voter_id), {
            "full_name": full_name,
            "class_label": class_label,
            "registered_at": registered_at,
            "has_voted": False,
            "voted_at": None,
        })
        try:
            self.store.set(candidate_key(voter_id), {
                "name": full_name,
                "class_label": class_label,
                "registered_at": registered_at,
            })
        except StorageError:
            logger.error("Voter record written but candidate record failed for class %s", class_label)
            raise
