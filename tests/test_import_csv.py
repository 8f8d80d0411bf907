"""
Delimited-text (CSV) normalizer.
"""

import pytest
from src.core.errors import MalformedInputError
from src.services.normalize_service import parse_csv

HEADER = "customer_id,customer_email,customer_name,subject,description,category,priority,status,source,browser,device_type"


def test_parses_sample_csv_with_50_rows(read_fixture):
    records = parse_csv(read_fixture("sample_tickets.csv"))
    assert len(records) == 50
    assert records[0]["customer_id"] == "CUST-001"
    assert records[-1]["customer_id"] == "CUST-050"


def test_maps_fields_correctly():
    csv_text = f"{HEADER}\nID,email@example.com,Name,Subj,Valid desc,other,low,new,api,,desktop"
    record = parse_csv(csv_text)[0]

    assert record["customer_email"] == "email@example.com"
    assert record["priority"] == "low"
    assert record["metadata"]["source"] == "api"
    assert record["metadata"]["device_type"] == "desktop"
    assert "browser" not in record["metadata"]


def test_handles_tags_list():
    csv_text = (
        "customer_id,customer_email,customer_name,subject,description,tags\n"
        'ID,email@example.com,Name,Subj,Valid desc,"tag1, tag2"'
    )
    record = parse_csv(csv_text)[0]
    assert record["tags"] == ["tag1", "tag2"]


def test_accepts_camel_case_headers():
    csv_text = "customerId,customerEmail,customerName,subject,description\nC9,c9@example.com,Carol,Subj,Valid desc"
    record = parse_csv(csv_text)[0]

    assert record["customer_id"] == "C9"
    assert record["customer_email"] == "c9@example.com"
    assert record["customer_name"] == "Carol"


def test_works_with_extra_columns():
    csv_text = "customer_id,extra,subject\nID,whatever,Subj"
    records = parse_csv(csv_text)
    assert len(records) == 1
    assert "extra" not in records[0]


def test_trims_values():
    csv_text = f"{HEADER}\n ID , email@example.com , Name , Subj , Valid desc , other , low , new , api , , desktop "
    record = parse_csv(csv_text)[0]

    assert record["customer_id"] == "ID"
    assert record["description"] == "Valid desc"
    assert record["metadata"]["device_type"] == "desktop"


def test_skips_blank_lines():
    csv_text = "customer_id,subject\n\nA,One\n\nB,Two\n"
    records = parse_csv(csv_text)
    assert [r["customer_id"] for r in records] == ["A", "B"]


def test_empty_document_has_no_records():
    assert parse_csv("") == []
    assert parse_csv("customer_id,subject\n") == []


def test_throws_on_inconsistent_row_shape():
    with pytest.raises(MalformedInputError) as exc_info:
        parse_csv("bad,bad\nno")

    assert exc_info.value.format == "delimited"
    assert exc_info.value.message == "Malformed CSV file"


def test_throws_on_broken_quoting():
    with pytest.raises(MalformedInputError):
        parse_csv('customer_id,subject\nA,"unterminated')
