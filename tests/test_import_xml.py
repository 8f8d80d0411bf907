"""
Markup (XML) normalizer.
"""

import pytest
from src.core.errors import MalformedInputError
from src.services.normalize_service import parse_xml

TICKET_XML = (
    "<ticket><customer_id>{cid}</customer_id><customer_email>x@example.com</customer_email>"
    "<customer_name>X</customer_name><subject>S</subject><description>desc long enough</description>"
    "<source>api</source><device_type>desktop</device_type></ticket>"
)


def test_parses_sample_xml_with_30_tickets(read_fixture):
    records = parse_xml(read_fixture("sample_tickets.xml"))
    assert len(records) == 30
    assert records[0]["tags"] == ["security", "xml"]
    assert records[0]["metadata"] == {"source": "web_form", "browser": "Safari", "device_type": "tablet"}


def test_parses_single_ticket():
    records = parse_xml(TICKET_XML.format(cid="X"))
    assert len(records) == 1
    assert records[0]["customer_id"] == "X"


def test_maps_device_type():
    records = parse_xml(f"<tickets>{TICKET_XML.format(cid='X')}</tickets>")
    assert records[0]["metadata"]["device_type"] == "desktop"


def test_handles_array_and_single_object():
    xml = f"<tickets>{TICKET_XML.format(cid='A')}{TICKET_XML.format(cid='B')}</tickets>"
    records = parse_xml(xml)
    assert [r["customer_id"] for r in records] == ["A", "B"]


def test_handles_sibling_tickets_at_root():
    xml = '<?xml version="1.0"?>' + TICKET_XML.format(cid="A") + TICKET_XML.format(cid="B")
    records = parse_xml(xml)
    assert [r["customer_id"] for r in records] == ["A", "B"]


def test_trims_text_and_splits_tag_string():
    xml = "<ticket><customer_id>  X  </customer_id><tags> one, two </tags></ticket>"
    record = parse_xml(xml)[0]
    assert record["customer_id"] == "X"
    assert record["tags"] == ["one", "two"]


def test_document_without_tickets_yields_empty_list():
    assert parse_xml("<catalog><item>1</item></catalog>") == []
    assert parse_xml("<tickets></tickets>") == []


def test_throws_on_malformed_xml():
    with pytest.raises(MalformedInputError) as exc_info:
        parse_xml("<tickets><ticket><subject>S</tickets>")

    assert exc_info.value.format == "markup"
    assert exc_info.value.message == "Malformed XML file"


def test_attributes_on_leaf_ticket_become_fields():
    xml = (
        '<tickets><ticket customer_id="A"><subject>S</subject></ticket>'
        '<ticket customer_id="B" subject="S2"/></tickets>'
    )
    records = parse_xml(xml)

    assert [r["customer_id"] for r in records] == ["A", "B"]
    assert records[1]["subject"] == "S2"


def test_attributes_on_metadata_become_fields():
    xml = TICKET_XML.format(cid="X").replace(
        "<source>api</source><device_type>desktop</device_type>",
        '<metadata source="email" device_type="mobile"/>',
    )
    record = parse_xml(xml)[0]

    assert record["metadata"] == {"source": "email", "device_type": "mobile"}


def test_deeply_nested_document_is_malformed():
    xml = "<ticket>" + "<a>" * 10000 + "</a>" * 10000 + "</ticket>"

    with pytest.raises(MalformedInputError) as exc_info:
        parse_xml(xml)

    assert exc_info.value.format == "markup"
