# classvote/database/records.py

# Key layout inside the key-value store. Voter and candidate records share
# the anonymized voter key; votes get a random id and no voter reference.

VOTER_PREFIX = "voter:"
CANDIDATE_PREFIX = "candidate:"
VOTE_PREFIX = "vote:"


def voter_key(voter_id):
    return f"{VOTER_PREFIX}{voter_id}"


def candidate_key(voter_id):
    return f"{CANDIDATE_PREFIX}{voter_id}"


def vote_key(vote_id):
    return f"{VOTE_PREFIX}{vote_id}"


def build_link(base_url, param, token):
    return f"{base_url.rstrip('/')}?{param}={token}"
