"""Tests for in-app notifications."""

from datetime import date, timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from django_care_bookings import dispatch
from django_care_bookings.models import AlertType, Notification, NotificationLibrary
from django_care_bookings.notifications import (
    STATUS_CHANGE_LIBRARY,
    dispatch_notification,
    generate_notifications,
    generate_status_change_notifications,
    notification_handler,
    status_change_message,
)


@pytest.mark.django_db
class TestDispatchNotification:
    """Tests for dispatch_notification()."""

    def test_notifies_staff_user(self, staff_user):
        notification = dispatch_notification("JANE@example.com", "Hello", "/bookings/1")

        assert notification.notifyee == staff_user
        assert notification.link == "/bookings/1"
        assert notification.read is False

    def test_notifies_guest(self, guest):
        notification = dispatch_notification("alice@example.com", "Hello")

        assert notification.notifyee == guest

    def test_staff_user_takes_precedence(self, guest, django_user_model):
        user = django_user_model.objects.create_user(username="alice", email="alice@example.com")

        notification = dispatch_notification("alice@example.com", "Hello")

        assert notification.notifyee == user

    def test_unknown_recipient_writes_nothing(self, db):
        assert dispatch_notification("nobody@example.com", "Hello") is None
        assert not Notification.objects.exists()


@pytest.mark.django_db
class TestNotificationHandler:
    """Tests for notification_handler()."""

    @freeze_time("2025-01-15 10:00:00")
    def test_due_notification_is_written_now(self, staff_user, queued):
        notification = notification_handler("jane@example.com", "Now", None, timezone.now())

        assert notification is not None
        assert queued == []

    @freeze_time("2025-01-15 10:00:00")
    def test_future_notification_is_deferred(self, staff_user, queued):
        result = notification_handler("jane@example.com", "Later", "/x", timezone.now() + timedelta(days=2))

        assert result is None
        assert not Notification.objects.exists()
        assert queued == [
            {
                "type": dispatch.DISPATCH_NOTIFICATION,
                "payload": {"notification_to": "jane@example.com", "message": "Later", "link": "/x"},
                "countdown": 2 * 24 * 60 * 60,
            }
        ]


@pytest.mark.django_db
class TestGenerateNotifications:
    """Tests for generate_notifications()."""

    @freeze_time("2025-01-15 10:00:00")
    def test_applies_library_entries(self, booking, staff_user, queued):
        booking.preferred_arrival_date = date(2025, 3, 1)
        booking.save()
        NotificationLibrary.objects.create(
            name="New booking",
            notification="[guest_name] arrives on [arrival_date] ([booking_id])",
            notification_to="jane@example.com",
        )
        NotificationLibrary.objects.create(
            name="Arrival follow-up",
            notification="Follow up with [guest_name]",
            notification_to="jane@example.com",
            date_factor=3,
        )
        NotificationLibrary.objects.create(
            name="Disabled",
            notification="Never",
            notification_to="jane@example.com",
            enabled=False,
        )
        NotificationLibrary.objects.create(
            name=STATUS_CHANGE_LIBRARY,
            notification="Status changed",
            notification_to="jane@example.com",
        )

        count = generate_notifications(booking)

        assert count == 2
        notification = Notification.objects.get()
        assert notification.message == f"Alice Smith arrives on 01/03/2025 ({booking.reference_id})"
        assert notification.link == f"https://bookings.example.com/bookings/{booking.uuid}"
        assert [call["countdown"] for call in queued] == [3 * 24 * 60 * 60]

    def test_marks_booking(self, booking):
        generate_notifications(booking)

        booking.refresh_from_db()
        assert booking.metainfo["notifications"] is True
        assert booking.metainfo["triggered_emails"] == {"on_submit": False, "on_booking_confirmed": False}

    def test_missing_arrival_date(self, booking, staff_user):
        NotificationLibrary.objects.create(
            name="New booking",
            notification="Arrives [arrival_date]",
            notification_to="jane@example.com",
        )

        generate_notifications(booking)

        assert Notification.objects.get().message == "Arrives -"


@pytest.mark.django_db
class TestStatusChangeNotifications:
    """Tests for status change wording and recipients."""

    def test_ready_to_process_wording(self, booking):
        message = status_change_message(
            "Booking [booking_id] [has been] [status]", booking, "ready to process", AlertType.ADMIN
        )
        assert message == f"Booking {booking.reference_id} has been received and is awaiting processing"

    def test_pending_approval_wording(self, booking):
        message = status_change_message("Booking [has been] [status]", booking, "pending approval", AlertType.ADMIN)
        assert message == "Booking has been marked pending approval"

    def test_guest_messages_keep_name_placeholder(self, booking):
        message = status_change_message("[guest_name] [has been] [status]", booking, "confirmed", AlertType.GUEST)
        assert message == "[guest_name] has been confirmed"

    def test_admin_and_guest_recipients(self, booking, guest, staff_user):
        NotificationLibrary.objects.create(
            name=STATUS_CHANGE_LIBRARY,
            notification="[guest_name]'s booking [has been] [status]",
            notification_to="jane@example.com",
            alert_type=AlertType.ADMIN,
        )
        NotificationLibrary.objects.create(
            name=STATUS_CHANGE_LIBRARY,
            notification="Your booking [has been] [status]",
            alert_type=AlertType.GUEST,
        )

        assert generate_status_change_notifications(booking, "confirmed") == 2

        staff_notification = Notification.objects.get(message="Alice Smith's booking has been confirmed")
        guest_notification = Notification.objects.get(message="Your booking has been confirmed")
        assert staff_notification.notifyee == staff_user
        assert staff_notification.link.endswith(str(booking.uuid))
        assert guest_notification.notifyee == guest
        assert guest_notification.link is None
