from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response
from typing import Any, Dict, List, Optional
from src.core.config import settings
from src.db.models import (
    Ticket, ImportRequest, ImportResponse, AutoClassifyResponse, ClassificationLogEntry
)
from src.services.ticket_service import TicketService

router = APIRouter()


def get_ticket_service(request: Request) -> TicketService:
    return TicketService(request.app.state.store)


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Ticket not found")


# ============================================================
# Ticket creation & import
# ============================================================

@router.post("/tickets", response_model=Ticket, status_code=201)
async def create_ticket(
    payload: Dict[str, Any] = Body(...),
    auto_classify: bool = False,
    ticket_service: TicketService = Depends(get_ticket_service)
):
    classify = auto_classify or bool(payload.pop("auto_classify", False))
    return ticket_service.create_ticket(payload, auto_classify=classify)


@router.post("/tickets/import", response_model=ImportResponse, status_code=201)
async def import_tickets(
    body: ImportRequest,
    ticket_service: TicketService = Depends(get_ticket_service)
):
    """
    Bulk import tickets from CSV, JSON or XML content.

    Records that fail validation are reported in `summary.errors`; the rest
    are stored. A malformed document or unknown format rejects the request.
    """
    if len(body.content.encode("utf-8")) > settings.MAX_IMPORT_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"Import content exceeds {settings.MAX_IMPORT_BYTES} bytes"
        )

    tickets, summary = ticket_service.import_tickets(
        body.format.strip().lower(),
        body.content,
        auto_classify=body.auto_classify
    )
    return {"summary": summary, "tickets": tickets}


# ============================================================
# Ticket queries
# ============================================================

@router.get("/tickets", response_model=List[Ticket])
async def list_tickets(
    category: Optional[str] = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
    tags: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    ticket_service: TicketService = Depends(get_ticket_service)
):
    requested_tags = [t.strip() for t in tags.split(",") if t.strip()] if tags else None
    tickets = ticket_service.list_tickets(
        category=category,
        priority=priority,
        status=status,
        tags=requested_tags,
        search=search
    )
    start = (page - 1) * page_size
    return tickets[start:start + page_size]


@router.get("/tickets/{ticket_id}", response_model=Ticket)
async def get_ticket(
    ticket_id: str,
    ticket_service: TicketService = Depends(get_ticket_service)
):
    ticket = ticket_service.get_ticket(ticket_id)
    if ticket is None:
        raise _not_found()
    return ticket


# ============================================================
# Ticket updates
# ============================================================

@router.put("/tickets/{ticket_id}", response_model=Ticket)
async def update_ticket(
    ticket_id: str,
    changes: Dict[str, Any] = Body(...),
    ticket_service: TicketService = Depends(get_ticket_service)
):
    ticket = ticket_service.update_ticket(ticket_id, changes)
    if ticket is None:
        raise _not_found()
    return ticket


@router.delete("/tickets/{ticket_id}", status_code=204)
async def delete_ticket(
    ticket_id: str,
    ticket_service: TicketService = Depends(get_ticket_service)
):
    if not ticket_service.delete_ticket(ticket_id):
        raise _not_found()
    return Response(status_code=204)


# ============================================================
# Classification
# ============================================================

@router.post("/tickets/{ticket_id}/auto-classify", response_model=AutoClassifyResponse)
async def auto_classify_ticket(
    ticket_id: str,
    ticket_service: TicketService = Depends(get_ticket_service)
):
    decision = ticket_service.auto_classify(ticket_id)
    if decision is None:
        raise _not_found()
    return {"id": ticket_id, **decision.model_dump()}


@router.get("/tickets/{ticket_id}/classifications", response_model=List[ClassificationLogEntry])
async def get_classification_history(
    ticket_id: str,
    limit: int = Query(50, ge=1, le=200),
    ticket_service: TicketService = Depends(get_ticket_service)
):
    """
    Classification log entries for a ticket, newest first.
    """
    if ticket_service.get_ticket(ticket_id) is None:
        raise _not_found()
    return ticket_service.get_classification_history(ticket_id, limit)
