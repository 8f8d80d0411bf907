"""
Ticket validation with defaulting.

`validate_and_fill` turns a loosely-typed candidate (direct API payload or a
normalized import record) into a fully-populated `Ticket`, or raises
`TicketValidationError` listing every violated field.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from pydantic import ValidationError

from src.core.errors import TicketValidationError
from src.db.models import Ticket, Category, Priority, TicketStatus, Source, DeviceType


def apply_defaults(candidate: Dict[str, Any]) -> Dict[str, Any]:
    """
    Resolve every default before validation.

    Empty values fall back to their default the same way missing ones do.
    Legacy top-level `source`/`browser`/`device_type` fields fill in for a
    missing nested `metadata` entry.
    """
    now = datetime.now(timezone.utc)
    metadata = candidate.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    tags = candidate.get("tags")

    return {
        "id": candidate.get("id") or str(uuid4()),
        "customer_id": candidate.get("customer_id"),
        "customer_email": candidate.get("customer_email"),
        "customer_name": candidate.get("customer_name"),
        "subject": candidate.get("subject"),
        "description": candidate.get("description"),
        "category": candidate.get("category") or Category.OTHER.value,
        "priority": candidate.get("priority") or Priority.MEDIUM.value,
        "status": candidate.get("status") or TicketStatus.NEW.value,
        "created_at": candidate.get("created_at") or now,
        "updated_at": candidate.get("updated_at") or now,
        "resolved_at": candidate.get("resolved_at"),
        "assigned_to": candidate.get("assigned_to"),
        "tags": tags if isinstance(tags, list) else [],
        "metadata": {
            "source": metadata.get("source") or candidate.get("source") or Source.API.value,
            "browser": metadata.get("browser") or candidate.get("browser") or "",
            "device_type": metadata.get("device_type") or candidate.get("device_type") or DeviceType.DESKTOP.value,
        },
        "classification_confidence": candidate.get("classification_confidence"),
    }


def format_errors(exc: ValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


def validate_and_fill(candidate: Any) -> Ticket:
    """
    Build a validated ticket from a raw candidate.

    Raises:
        TicketValidationError: with one message per violated field; all
        fields are checked, not just the first failing one.
    """
    if not isinstance(candidate, dict):
        raise TicketValidationError(["ticket payload must be an object"])

    try:
        return Ticket.model_validate(apply_defaults(candidate))
    except ValidationError as e:
        raise TicketValidationError(format_errors(e)) from e
