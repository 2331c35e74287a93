import pytest
from fastapi import HTTPException

from placement_portal.utils.csv_parser import parse_invitation_csv


def test_parses_pairs():
    content = b"email,department\na@college.edu,Computer Science\nb@college.edu,Civil Engineering\n"
    assert parse_invitation_csv(content) == [
        ("a@college.edu", "Computer Science"),
        ("b@college.edu", "Civil Engineering"),
    ]


def test_headers_are_case_insensitive_and_trimmed():
    content = "\ufeff Email , DEPARTMENT,extra\n a@college.edu , Computer Science ,x\n".encode("utf-8")
    assert parse_invitation_csv(content) == [("a@college.edu", "Computer Science")]


def test_blank_rows_are_skipped():
    content = b"email,department\n,\na@college.edu,Civil Engineering\n\n"
    assert parse_invitation_csv(content) == [("a@college.edu", "Civil Engineering")]


def test_missing_column_is_rejected():
    with pytest.raises(HTTPException) as exc:
        parse_invitation_csv(b"email,branch\na@college.edu,CS\n")
    assert exc.value.status_code == 400
    assert "department" in exc.value.detail


def test_empty_file_is_rejected():
    with pytest.raises(HTTPException) as exc:
        parse_invitation_csv(b"")
    assert exc.value.status_code == 400
