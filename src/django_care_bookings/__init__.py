"""Booking status and amendment reconciliation for care bookings.

Tracks booking lifecycle status, records post-completion answer changes
as amendments awaiting staff approval, and schedules the notifications
and emails that follow a submission.
"""

__version__ = "0.1.0"
