# classvote/audit/audit_logger.py

import os
import json
import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

# Append-only JSON-lines log of registration and voting events.
# Entries must never put an email or voter key next to ballot content.


class AuditLogger:
    def __init__(self, log_dir='logs'):
        self.log_dir = log_dir
        self.log_file = os.path.join(log_dir, 'audit.log')
        os.makedirs(log_dir, exist_ok=True)

    def log_security_event(self, event_type, data=None):
        try:
            log_entry = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "event_type": event_type,
                "data": data or {},
            }
            with open(self.log_file, 'a') as f:
                f.write(json.dumps(log_entry, sort_keys=True) + "\n")
        except Exception as e:
            logger.warning("Audit log error: %s", e)

    def read_entries(self):
        if not os.path.exists(self.log_file):
            return []
        entries = []
        with open(self.log_file, 'r') as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except ValueError:
                    entries.append({'raw': line})
        return entries
