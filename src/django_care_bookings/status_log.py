"""Status history append with merge-on-repeat.

The status log is an ordered list of ``{status, created_at, updated_at?}``
dicts persisted as JSON on the booking. Appending the status already at
the end of the log refreshes that entry's ``updated_at`` instead of
adding a duplicate.
"""

from datetime import datetime

from django.utils import timezone


def append_status(log: list[dict] | None, new_status: str, now: datetime | None = None) -> list[dict]:
    """Return a new status log with ``new_status`` appended or merged.

    Args:
        log: Existing entries, oldest first (None is treated as empty)
        new_status: Status name to record
        now: Timestamp to use (defaults to timezone.now())

    Returns:
        A new list; the input list and its entries are not mutated.
    """
    stamp = (now or timezone.now()).isoformat()
    entries = [dict(entry) for entry in (log or [])]

    if entries and entries[-1].get("status") == new_status:
        entries[-1]["updated_at"] = stamp
        return entries

    entries.append({"status": new_status, "created_at": stamp})
    return entries
