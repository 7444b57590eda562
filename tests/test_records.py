"""
Tests for decoding API payloads into client records.
"""
from datetime import datetime

import pytest

from squadboard.client.records import PersonRecord, TaskRecord, field_name, is_draft_id


class TestTaskRecordDecode:
    def test_camel_case_payload(self):
        record = TaskRecord.model_validate(
            {
                "id": "t1",
                "name": "Sprint plan",
                "type": "training",
                "status": "in_progress",
                "priority": "high",
                "deadline": "2024-03-12T09:00:00",
                "assigneeId": "coach1",
                "creatorId": "coach2",
                "relatedAthleteIds": ["a1"],
                "createdAt": "2024-03-01T10:00:00",
                "updatedAt": "2024-03-02T10:00:00",
            }
        )
        assert record.assignee_id == "coach1"
        assert record.related_athlete_ids == ["a1"]
        assert record.deadline == datetime(2024, 3, 12, 9, 0)

    def test_missing_enums_use_defaults(self):
        record = TaskRecord.model_validate({"id": "t1", "name": "x", "status": None, "priority": ""})
        assert (record.status, record.priority, record.type) == ("new", "medium", "general")

    def test_unknown_enums_are_kept_verbatim(self):
        record = TaskRecord.model_validate({"id": "t1", "name": "x", "status": "Frobnicate", "type": "yoga"})
        assert record.status == "frobnicate"
        assert record.type == "yoga"

    @pytest.mark.parametrize("deadline", ["nope", "", 17, None])
    def test_bad_deadline_decodes_to_none(self, deadline):
        assert TaskRecord.model_validate({"id": "t1", "name": "x", "deadline": deadline}).deadline is None

    def test_missing_related_athletes_is_empty_list(self):
        assert TaskRecord.model_validate({"id": "t1", "relatedAthleteIds": None}).related_athlete_ids == []

    def test_empty_assignee_means_unassigned(self):
        assert TaskRecord.model_validate({"id": "t1", "assigneeId": ""}).assignee_id is None

    def test_dump_uses_wire_names(self):
        record = TaskRecord.model_validate({"id": "t1", "name": "x", "assigneeId": "coach1"})
        dumped = record.model_dump(mode="json", by_alias=True)
        assert dumped["assigneeId"] == "coach1"
        assert dumped["relatedAthleteIds"] == []


class TestHelpers:
    def test_draft_ids(self):
        assert is_draft_id("draft_123")
        assert not is_draft_id("3f2c")
        assert not is_draft_id(None)
        assert TaskRecord(id="draft_1").is_draft

    def test_field_name_accepts_both_spellings(self):
        assert field_name("assigneeId") == "assignee_id"
        assert field_name("assignee_id") == "assignee_id"
        with pytest.raises(ValueError):
            field_name("colour")

    def test_person_record(self):
        person = PersonRecord.model_validate({"id": "a1", "name": "Ana", "type": "athlete", "team": "U21"})
        assert person.team == "U21"
