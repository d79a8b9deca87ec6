# classvote/security/identity_hasher.py

from cryptography.hazmat.primitives import hashes

from classvote.errors import ValidationError

# One-way, case-insensitive email -> voter key. The key is the only identity
# persisted next to voting state, so storage never joins an email to a ballot.


def anonymize(raw_identity: str) -> str:
    if not isinstance(raw_identity, str) or not raw_identity.strip():
        raise ValidationError("Email is required")
    digest = hashes.Hash(hashes.SHA256())
    digest.update(raw_identity.strip().lower().encode())
    return digest.finalize().hex()
