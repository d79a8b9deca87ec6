# classvote/voting/ballot_issuer.py

import logging
from datetime import timedelta

from classvote.database.records import build_link, voter_key
from classvote.errors import (
    AlreadyVoted,
    InvalidOrExpiredToken,
    TokenExpired,
    TokenNotFound,
    VoterNotFound,
)
from classvote.security.identity_hasher import anonymize
from classvote.security.token_manager import TokenKind

logger = logging.getLogger(__name__)


class BallotIssuer:
    """Turns a registered, not-yet-voted email into a single-use voting link."""

    def __init__(self, store, tokens, notifier=None,
                 token_ttl=timedelta(minutes=30), base_url='http://localhost:3001'):
        self.store = store
        self.tokens = tokens
        self.notifier = notifier
        self.token_ttl = token_ttl
        self.base_url = base_url

    def request_voting_link(self, email, origin=None):
        voter_id = anonymize(email)
        voter = self.store.get(voter_key(voter_id))
        if voter is None:
            raise VoterNotFound()
        if voter.get("has_voted"):
            raise AlreadyVoted()

        token = self.tokens.issue(TokenKind.VOTING, {"voter_id": voter_id}, self.token_ttl)
        link = build_link(origin or self.base_url, "token", token)

        email_sent = False
        if self.notifier is not None:
            email_sent = self.notifier.send_voting_link(
                email, voter["full_name"], voter["class_label"], link,
                int(self.token_ttl.total_seconds() // 60))
        if not email_sent:
            logger.info("Voting email not delivered, returning link directly")
        return {"link": link, "token": token, "email_sent": email_sent}

    def verify_voting_token(self, token):
        try:
            record = self.tokens.resolve(TokenKind.VOTING, token)
        except TokenNotFound:
            raise InvalidOrExpiredToken("Invalid or expired voting token")
        if self.tokens.is_expired(record):
            self.tokens.consume(TokenKind.VOTING, token)
            logger.info("Deleted expired voting token")
            raise TokenExpired("Voting token has expired")

        voter = self.store.get(voter_key(record["voter_id"]))
        if voter is None:
            raise VoterNotFound("Voter not found")
        # Another link for the same voter may already have been used
        if voter.get("has_voted"):
            raise AlreadyVoted()

        return {
            "class_label": voter["class_label"],
            "voter_name": voter["full_name"],
            "candidate_id": record["voter_id"],
        }
