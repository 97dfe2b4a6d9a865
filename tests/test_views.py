"""Tests for the JSON API views."""

import json
import uuid

import pytest
from django.urls import reverse

from django_care_bookings.models import AmendmentLog, QaPair
from django_care_bookings.statuses import BookingStatus, EligibilityStatus, booking_status, eligibility_status
from tests.helpers import complete_payload, payload


def post_json(client, url, body):
    return client.post(url, data=json.dumps(body), content_type="application/json")


def qa_url(booking):
    return reverse("care_bookings:save_qa_pairs", kwargs={"uuid": booking.uuid})


def status_url(booking):
    return reverse("care_bookings:update_status", kwargs={"uuid": booking.uuid})


AMENDMENTS_URL = "/api/amendments/"


@pytest.fixture
def pending_log(confirmed_booking, questions):
    qa_pair = QaPair.objects.get(section__booking=confirmed_booking, template_question=questions["check_in"])
    change = payload(confirmed_booking, questions["check_in"], "2025-03-08", id=qa_pair.pk, dirty=True, oldAnswer="2025-03-01")
    from django_care_bookings.changes import parse_changes
    from django_care_bookings.reconciler import reconcile_submission

    reconcile_submission(confirmed_booking, parse_changes([change]))
    return AmendmentLog.objects.get(booking=confirmed_booking)


@pytest.mark.django_db
class TestSaveQaPairs:
    """Tests for POST bookings/<uuid>/qa-pairs/."""

    def test_complete_submission(self, client, booking, questions):
        response = post_json(client, qa_url(booking), {"qa_pairs": complete_payload(booking, questions)})

        booking.refresh_from_db()
        assert response.status_code == 200
        assert response.json() == {"success": True, "bookingAmended": False}
        assert booking.complete is True

    def test_amendment_is_reported(self, client, confirmed_booking, questions):
        qa_pair = QaPair.objects.get(section__booking=confirmed_booking, template_question=questions["name"])
        change = payload(
            confirmed_booking, questions["name"], "Alicia Smith", id=qa_pair.pk, dirty=True, oldAnswer="Alice Smith"
        )

        response = post_json(client, qa_url(confirmed_booking), {"qa_pairs": [change], "flags": {}})

        confirmed_booking.refresh_from_db()
        assert response.json() == {"success": True, "bookingAmended": True}
        assert confirmed_booking.status_name == BookingStatus.BOOKING_AMENDED

    def test_equipment_change_is_reported(self, client, completed_booking, equipment):
        shower_chair = equipment["shower_chair"]
        body = {
            "qa_pairs": [],
            "equipmentChanges": [
                {
                    "category": "mobility",
                    "isDirty": True,
                    "equipments": [
                        {"id": shower_chair.pk, "name": shower_chair.name, "type": "independent", "value": True}
                    ],
                }
            ],
        }

        response = post_json(client, qa_url(completed_booking), body)

        assert response.json() == {"success": True, "bookingAmended": True}

    def test_unchanged_equipment_is_not_reported(self, client, completed_booking, equipment):
        shower_chair = equipment["shower_chair"]
        change = {
            "category": "mobility",
            "isDirty": False,
            "equipments": [{"id": shower_chair.pk, "name": shower_chair.name, "type": "independent", "value": False}],
        }

        response = post_json(client, qa_url(completed_booking), {"qa_pairs": [], "equipmentChanges": [change]})

        assert response.json() == {"success": True, "bookingAmended": False}

    def test_batch_failure_returns_500(self, client, booking, questions):
        bad = payload(booking, questions["name"], "Alice", section_id=999999)

        response = post_json(client, qa_url(booking), {"qa_pairs": [bad]})

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert not QaPair.objects.exists()

    def test_invalid_json(self, client, booking):
        response = client.post(qa_url(booking), data="{not json", content_type="application/json")

        assert response.status_code == 400

    def test_unknown_booking(self, client, db):
        url = reverse("care_bookings:save_qa_pairs", kwargs={"uuid": uuid.uuid4()})

        assert post_json(client, url, {"qa_pairs": []}).status_code == 404

    def test_get_not_allowed(self, client, booking):
        assert client.get(qa_url(booking)).status_code == 405


@pytest.mark.django_db
class TestUpdateStatus:
    """Tests for POST bookings/<uuid>/status/."""

    def test_status_update(self, client, completed_booking):
        response = post_json(
            client,
            status_url(completed_booking),
            {"status": booking_status(BookingStatus.BOOKING_CONFIRMED).to_dict()},
        )

        completed_booking.refresh_from_db()
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Booking status updated successfully"}
        assert completed_booking.status_name == BookingStatus.BOOKING_CONFIRMED

    def test_status_as_json_string(self, client, booking):
        response = post_json(client, status_url(booking), {"status": booking_status(BookingStatus.ON_HOLD).to_json()})

        booking.refresh_from_db()
        assert response.status_code == 200
        assert booking.status_name == BookingStatus.ON_HOLD

    def test_eligibility_update(self, client, booking):
        response = post_json(
            client,
            status_url(booking),
            {"eligibility": eligibility_status(EligibilityStatus.ELIGIBLE).to_dict()},
        )

        booking.refresh_from_db()
        assert response.status_code == 200
        assert booking.eligibility_name == EligibilityStatus.ELIGIBLE

    def test_both_fields_rejected(self, client, booking):
        body = {
            "status": booking_status(BookingStatus.ON_HOLD).to_dict(),
            "eligibility": eligibility_status(EligibilityStatus.ELIGIBLE).to_dict(),
        }

        assert post_json(client, status_url(booking), body).status_code == 400

    def test_neither_field_rejected(self, client, booking):
        assert post_json(client, status_url(booking), {}).status_code == 400

    def test_unknown_status_rejected(self, client, booking):
        response = post_json(client, status_url(booking), {"status": {"name": "archived"}})

        booking.refresh_from_db()
        assert response.status_code == 400
        assert booking.status_name == BookingStatus.ENQUIRY

    def test_malformed_status_rejected(self, client, booking):
        assert post_json(client, status_url(booking), {"status": "not json"}).status_code == 400


@pytest.mark.django_db
class TestResolveAmendment:
    """Tests for POST amendments/."""

    def test_approve(self, client, pending_log):
        response = post_json(client, AMENDMENTS_URL, {"id": pending_log.pk, "approved": True, "approved_by": "Jane"})

        pending_log.refresh_from_db()
        assert response.status_code == 200
        assert response.json() == {"message": "Log updated successfully"}
        assert pending_log.approved is True
        assert pending_log.data["approved_by"] == "Jane"

    def test_reject(self, client, pending_log, questions):
        response = post_json(client, AMENDMENTS_URL, {"id": pending_log.pk, "approved": False})

        assert response.status_code == 200
        assert response.json() == {"message": "Answer to the question reverted due to declining of changes."}
        assert not AmendmentLog.objects.exists()
        assert QaPair.objects.get(template_question=questions["check_in"]).answer == "2025-03-01"

    def test_unknown_log(self, client, db):
        response = post_json(client, AMENDMENTS_URL, {"id": 999999, "approved": True})

        assert response.status_code == 404
        assert response.json() == {"message": "Log not found"}

    def test_missing_id(self, client, db):
        assert post_json(client, AMENDMENTS_URL, {"approved": True}).status_code == 400

    @pytest.mark.parametrize("log_id", ["abc", [1], {"id": 1}])
    def test_non_numeric_id(self, client, db, log_id):
        response = post_json(client, AMENDMENTS_URL, {"id": log_id, "approved": True})

        assert response.status_code == 400
        assert response.json() == {"message": "Log id must be an integer"}

    def test_numeric_string_id(self, client, pending_log):
        response = post_json(client, AMENDMENTS_URL, {"id": str(pending_log.pk), "approved": True})

        assert response.status_code == 200

    def test_already_approved(self, client, pending_log):
        post_json(client, AMENDMENTS_URL, {"id": pending_log.pk, "approved": True})

        response = post_json(client, AMENDMENTS_URL, {"id": pending_log.pk, "approved": False})

        assert response.status_code == 400
        assert AmendmentLog.objects.filter(pk=pending_log.pk, approved=True).exists()
