"""
Format normalizers for bulk import.

Each parser maps raw import content to an ordered list of pre-validation
records. No defaulting or validation happens here; that is left to
`validate_and_fill`. A structurally broken document fails the whole call
with `MalformedInputError`.
"""

import csv
import json
import re
import xml.etree.ElementTree as ET
from io import StringIO
from typing import Any, Callable, Dict, List

from src.core.errors import MalformedInputError

Record = Dict[str, Any]

FIELD_ALIASES = {
    "customer_id": "customerId",
    "customer_email": "customerEmail",
    "customer_name": "customerName",
}

PASSTHROUGH_FIELDS = ("subject", "description", "category", "priority", "status")

METADATA_FIELDS = ("source", "browser", "device_type")

XML_PROLOG = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)


def _pick(record: Record, *keys: str) -> Any:
    """First non-empty value among `keys`, canonical name first."""
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def parse_tags(value: Any) -> List[Any]:
    """Accept a list as-is or split a comma-separated string, trimming each entry."""
    if isinstance(value, list):
        return value
    if value in (None, ""):
        return []
    return [part.strip() for part in str(value).split(",")]


def _resolve_metadata(record: Record) -> Record:
    nested = record.get("metadata")
    if not isinstance(nested, dict):
        nested = {}

    metadata = {}
    for field in METADATA_FIELDS:
        value = _pick(nested, field)
        if value is None:
            value = _pick(record, field)
        if value is not None:
            metadata[field] = value
    return metadata


def normalize_record(record: Any) -> Record:
    """Map one raw record onto the canonical pre-validation field set."""
    if not isinstance(record, dict):
        record = {}

    normalized = {}
    for field, alias in FIELD_ALIASES.items():
        normalized[field] = _pick(record, field, alias)
    for field in PASSTHROUGH_FIELDS:
        normalized[field] = record.get(field)
    normalized["assigned_to"] = _pick(record, "assigned_to")
    normalized["tags"] = parse_tags(record.get("tags"))
    normalized["metadata"] = _resolve_metadata(record)
    return normalized


# ============================================================
# Delimited text (csv)
# ============================================================

def parse_csv(content: str) -> List[Record]:
    """
    Header row + data rows. Cells are trimmed and blank lines skipped.

    Raises:
        MalformedInputError: on unparsable quoting or a row whose cell count
        differs from the header.
    """
    try:
        reader = csv.reader(StringIO(content), strict=True)
        rows = [row for row in reader if row]
    except csv.Error as e:
        raise MalformedInputError("delimited", [str(e)]) from e

    if not rows:
        return []

    headers = [h.strip() for h in rows[0]]
    records = []
    for line_no, row in enumerate(rows[1:], start=2):
        if len(row) != len(headers):
            raise MalformedInputError(
                "delimited",
                [f"Row {line_no} has {len(row)} columns, expected {len(headers)}"]
            )
        records.append({key: cell.strip() for key, cell in zip(headers, row)})

    return [normalize_record(r) for r in records]


# ============================================================
# Tree (json)
# ============================================================

def parse_json(content: str) -> List[Record]:
    """
    Accepts a single ticket object, an array of ticket objects, or a wrapper
    object with a `tickets` array.
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedInputError("tree", [str(e)]) from e
    except RecursionError as e:
        raise MalformedInputError("tree", ["Document is nested too deeply"]) from e

    if isinstance(data, list):
        records = data
    elif isinstance(data, dict):
        if "tickets" in data:
            records = data["tickets"]
            if not isinstance(records, list):
                raise MalformedInputError("tree", ["'tickets' must be an array"])
        else:
            records = [data]
    else:
        raise MalformedInputError("tree", ["Expected a ticket object or an array of tickets"])

    return [normalize_record(r) for r in records]


# ============================================================
# Markup (xml)
# ============================================================

def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    text = (element.text or "").strip()
    if not children and not element.attrib:
        return text

    # <tags><tag>a</tag><tag>b</tag></tags>
    if children and element.tag == "tags":
        return [(child.text or "").strip() for child in children]

    # Attributes become fields: <metadata source="email"/>
    result: Record = dict(element.attrib)
    if not children:
        if text:
            result["#text"] = text
        return result

    for child in children:
        value = _element_to_value(child)
        if child.tag in result:
            existing = result[child.tag]
            if not isinstance(existing, list):
                result[child.tag] = [existing]
            result[child.tag].append(value)
        else:
            result[child.tag] = value
    return result


def _ticket_elements(root: ET.Element) -> List[ET.Element]:
    elements = []
    for child in root:
        if child.tag == "tickets":
            elements.extend(child.findall("ticket"))
        elif child.tag == "ticket":
            elements.append(child)
    return elements


def parse_xml(content: str) -> List[Record]:
    """
    Accepts `<tickets><ticket>...</ticket></tickets>`, a single root
    `<ticket>`, or `<ticket>` elements repeated at top level. A well-formed
    document without ticket elements yields no records.
    """
    body = XML_PROLOG.sub("", content or "", count=1)
    try:
        # Synthetic root so that sibling <ticket> elements parse as one document.
        root = ET.fromstring(f"<document>{body}</document>")
    except ET.ParseError as e:
        raise MalformedInputError("markup", [str(e)]) from e

    records = []
    try:
        for element in _ticket_elements(root):
            value = _element_to_value(element)
            records.append(value if isinstance(value, dict) else {})
    except RecursionError as e:
        raise MalformedInputError("markup", ["Document is nested too deeply"]) from e
    return [normalize_record(r) for r in records]


NORMALIZERS: Dict[str, Callable[[str], List[Record]]] = {
    "csv": parse_csv,
    "json": parse_json,
    "xml": parse_xml,
}
