import json
from datetime import date, datetime

from placement_portal.utils.json_fields import as_date, dump_list, load_list


def test_load_list_reads_json_text():
    assert load_list(json.dumps(["Python", "SQL"])) == ["Python", "SQL"]
    assert load_list(["already", "a list"]) == ["already", "a list"]


def test_load_list_bad_values_are_empty():
    for raw in (None, "", "{oops", json.dumps({"a": 1}), "[" * 100000):
        assert load_list(raw) == []


def test_dump_list_handles_none():
    assert dump_list(None) == "[]"


def test_as_date_accepts_driver_values():
    assert as_date("2025-03-01") == date(2025, 3, 1)
    assert as_date("2025-03-01 10:00:00") == date(2025, 3, 1)
    assert as_date(datetime(2025, 3, 1, 10)) == date(2025, 3, 1)
    assert as_date(None) is None
