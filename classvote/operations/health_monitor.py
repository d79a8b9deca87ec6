# classvote/operations/health_monitor.py
# Liveness checks: key-value store reachable, enough free disk for the audit log

import os
import shutil
from typing import Dict

MIN_FREE_DISK_GB = float(os.getenv("MIN_FREE_DISK_GB", "0.1"))


def _check_db(store) -> Dict:
    try:
        store.ping()
        return {"ok": True, "detail": "kv store ok"}
    except Exception as e:
        return {"ok": False, "error": str(e)}


def _check_disk(path=".") -> Dict:
    total, used, free = shutil.disk_usage(path)
    free_gb = free / (1024**3)
    return {"ok": free_gb >= MIN_FREE_DISK_GB, "free_gb": round(free_gb, 2), "min_required_gb": MIN_FREE_DISK_GB}


def check_health(store, disk_path=".") -> Dict:
    """Aggregate overall system health."""
    db = _check_db(store)
    disk = _check_disk(disk_path)
    return {"db": db, "disk": disk, "overall_ok": db["ok"] and disk["ok"]}
