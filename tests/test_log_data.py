"""Tests for amendment log payloads."""

import pytest

from django_care_bookings.log_data import (
    EquipmentLogData,
    LogKind,
    QaPairLogData,
    QaPairSnapshot,
    parse_log_data,
)


class TestParseLogData:
    """Tests for parse_log_data()."""

    def test_qa_pair_payload(self):
        payload = parse_log_data(
            LogKind.QA_PAIR,
            {
                "approved": False,
                "qa_pair": {"question": "Q", "answer": "new", "question_type": "text", "oldAnswer": "old"},
                "modifiedBy": "Alice",
            },
        )

        assert isinstance(payload, QaPairLogData)
        assert not isinstance(payload, EquipmentLogData)
        assert payload.qa_pair.oldAnswer == "old"
        assert payload.modifiedBy == "Alice"

    def test_equipment_payload(self):
        payload = parse_log_data(
            LogKind.EQUIPMENT,
            {"qa_pair": {"question": "Equipment Changed"}, "id": 4, "oldAnswerId": 3},
        )

        assert isinstance(payload, EquipmentLogData)
        assert (payload.id, payload.oldAnswerId) == (4, 3)

    def test_unknown_keys_survive_a_round_trip(self):
        """Fields added by staff tools are kept when the payload is rewritten."""
        data = {"qa_pair": {"question": "Q"}, "note": "called guest"}

        assert parse_log_data(LogKind.QA_PAIR, data).to_dict()["note"] == "called guest"

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            parse_log_data("invoice", {})

    def test_snapshot_defaults(self):
        snapshot = QaPairSnapshot.from_dict({})

        assert snapshot.oldAnswer == ""
        assert snapshot.id is None
