"""Tests for the status history append."""

from datetime import datetime, timezone

from django_care_bookings.status_log import append_status

T1 = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)
T2 = datetime(2025, 1, 15, 11, 30, tzinfo=timezone.utc)


class TestAppendStatus:
    """Tests for append_status()."""

    def test_appends_to_empty_log(self):
        """First entry records the status and its creation time."""
        log = append_status([], "enquiry", now=T1)

        assert log == [{"status": "enquiry", "created_at": "2025-01-15T10:00:00+00:00"}]

    def test_none_is_treated_as_empty(self):
        """A missing log starts a new one."""
        assert len(append_status(None, "enquiry", now=T1)) == 1

    def test_repeat_status_merges_into_last_entry(self):
        """Appending the current status only refreshes updated_at."""
        log = append_status([], "booking_amended", now=T1)
        log = append_status(log, "booking_amended", now=T2)

        assert len(log) == 1
        assert log[0]["created_at"] == T1.isoformat()
        assert log[0]["updated_at"] == T2.isoformat()

    def test_merge_is_idempotent(self):
        """Repeating the same status any number of times keeps one entry."""
        log = append_status([], "on_hold", now=T1)
        for _ in range(3):
            log = append_status(log, "on_hold", now=T2)

        assert [entry["status"] for entry in log] == ["on_hold"]

    def test_new_status_is_appended(self):
        """A different status adds an entry at the end."""
        log = append_status([], "enquiry", now=T1)
        log = append_status(log, "confirmed", now=T2)

        assert [entry["status"] for entry in log] == ["enquiry", "confirmed"]
        assert "updated_at" not in log[0]

    def test_only_last_entry_is_compared(self):
        """A status seen earlier but not last is appended again."""
        log = append_status([], "on_hold", now=T1)
        log = append_status(log, "confirmed", now=T1)
        log = append_status(log, "on_hold", now=T2)

        assert [entry["status"] for entry in log] == ["on_hold", "confirmed", "on_hold"]

    def test_input_is_not_mutated(self):
        """The caller's list and entries are left untouched."""
        original = [{"status": "enquiry", "created_at": T1.isoformat()}]

        append_status(original, "enquiry", now=T2)
        append_status(original, "confirmed", now=T2)

        assert original == [{"status": "enquiry", "created_at": T1.isoformat()}]
