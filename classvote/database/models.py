# classvote/database/models.py

from classvote import db


# Generic key/value table; every record family (voter:, candidate:, vote:,
# registration-token:, voting-token:) lives here under its key prefix.
# No write-time columns: they would let a vote row be matched to the voter
# row updated alongside it.

class KeyValueEntry(db.Model):
    __tablename__ = 'kv_store'
    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.JSON, nullable=False)

    def __repr__(self):
        return f'<KeyValueEntry {self.key}>'
