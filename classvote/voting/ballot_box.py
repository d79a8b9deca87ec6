# classvote/voting/ballot_box.py
"""Ballot submission and preference-weighted tally.

A ballot names two different candidates of the voter's class, each with
an opaque reason code. The first choice scores 2 points and the second
choice 1 point. Candidates are referenced by their anonymized voter key;
names are only used for display.

Submission ordering, against a store with no multi-key transactions:

1. validate the ballot shape (no reads, no writes)
2. resolve the voting token
3. load the chosen candidates
4. load the voter record: the has-voted check is the last read before
   any write
5. write the VoteRecord (no voter reference in it)
6. flip the voter's has-voted flag
7. delete the token

A malformed ballot is rejected at step 1, so it reports ValidationError
even when the token is also forged; either way nothing is written.

A crash after step 6 leaves a token whose replay fails at step 4. Two
submissions racing with different tokens for the same voter can both pass
step 4 before either reaches step 6; that window is narrow but real and
nothing here locks against it.
"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone

from classvote.database.records import (
    CANDIDATE_PREFIX,
    VOTE_PREFIX,
    candidate_key,
    vote_key,
    voter_key,
)
from classvote.errors import (
    InvalidToken,
    InvalidVoterOrAlreadyVoted,
    TokenNotFound,
    ValidationError,
)
from classvote.security.input_validator import InputValidator
from classvote.security.token_manager import TokenKind

logger = logging.getLogger(__name__)

FIRST_CHOICE_POINTS = 2
SECOND_CHOICE_POINTS = 1


# Ballots and voter records never share a precise timestamp; a vote keeps
# only the hour it was cast and the voter only the day.
def submission_hour(moment):
    return moment.replace(minute=0, second=0, microsecond=0).isoformat()


class BallotBox:
    def __init__(self, store, tokens, validator=None, reject_self_votes=False):
        self.store = store
        self.tokens = tokens
        self.validator = validator or InputValidator()
        self.reject_self_votes = reject_self_votes

    def _now(self):
        return datetime.now(timezone.utc)

    def list_candidates(self, class_label, exclude=None):
        candidates = [
            {"id": key[len(CANDIDATE_PREFIX):], "name": record["name"]}
            for key, record in self.store.scan_items_by_prefix(CANDIDATE_PREFIX)
            if record.get("class_label") == class_label
        ]
        if exclude:
            candidates = [c for c in candidates if c["id"] != exclude]
        return sorted(candidates, key=lambda c: (c["name"].lower(), c["id"]))

    def submit_vote(self, token, first_choice, first_reason, second_choice, second_reason):
        first_choice, first_reason, second_choice, second_reason = \
            self.validator.normalize_ballot(first_choice, first_reason, second_choice, second_reason)

        try:
            token_record = self.tokens.resolve(TokenKind.VOTING, token)
        except TokenNotFound:
            raise InvalidToken()
        if self.tokens.is_expired(token_record):
            self.tokens.consume(TokenKind.VOTING, token)
            raise InvalidToken()
        voter_id = token_record["voter_id"]

        first = self.store.get(candidate_key(first_choice))
        second = self.store.get(candidate_key(second_choice))
        if first is None or second is None:
            raise ValidationError("Unknown candidate")

        # Authoritative double-vote check; keep it the last read before writing
        voter = self.store.get(voter_key(voter_id))
        if voter is None or voter.get("has_voted"):
            raise InvalidVoterOrAlreadyVoted()

        class_label = voter["class_label"]
        if first["class_label"] != class_label or second["class_label"] != class_label:
            raise ValidationError("Candidates must belong to the voter's class")
        if self.reject_self_votes and voter_id in (first_choice, second_choice):
            raise ValidationError("You cannot vote for yourself")

        now = self._now()
        vote_id = str(uuid.uuid4())
        self.store.set(vote_key(vote_id), {
            "class_label": class_label,
            "first_choice": first_choice,
            "first_reason": first_reason,
            "second_choice": second_choice,
            "second_reason": second_reason,
            "submitted_at": submission_hour(now),
        })

        voter["has_voted"] = True
        voter["voted_at"] = now.date().isoformat()
        self.store.set(voter_key(voter_id), voter)

        self.tokens.consume(TokenKind.VOTING, token)
        logger.info("Vote submitted for class %s", class_label)
        return vote_id

    def tally(self):
        """Scores per class and candidate id, recomputed from every stored vote."""
        results = defaultdict(lambda: defaultdict(int))
        for vote in self.store.scan_by_prefix(VOTE_PREFIX):
            bucket = results[vote["class_label"]]
            if vote.get("first_choice"):
                bucket[vote["first_choice"]] += FIRST_CHOICE_POINTS
            if vote.get("second_choice"):
                bucket[vote["second_choice"]] += SECOND_CHOICE_POINTS
        return {label: dict(scores) for label, scores in results.items()}

    def get_results(self):
        names = {}
        for key, record in self.store.scan_items_by_prefix(CANDIDATE_PREFIX):
            names[key[len(CANDIDATE_PREFIX):]] = record

        results = {}
        for class_label, scores in self.tally().items():
            labels = self._display_names(class_label, names)
            results[class_label] = {
                labels.get(candidate_id, candidate_id): score
                for candidate_id, score in scores.items()
            }
        return results

    @staticmethod
    def _display_names(class_label, candidates):
        in_class = {
            candidate_id: record["name"]
            for candidate_id, record in candidates.items()
            if record.get("class_label") == class_label
        }
        counts = defaultdict(int)
        for name in in_class.values():
            counts[name] += 1
        # Same name twice in one class: suffix the id so scores never merge
        return {
            candidate_id: name if counts[name] == 1 else f"{name} ({candidate_id[:8]})"
            for candidate_id, name in in_class.items()
        }
