from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from src.core.logging import logger
from src.db.memory import TicketStore
from src.db.models import Ticket, ImportSummary, ClassificationDecision, ClassificationLogEntry
from src.services.classify_service import ClassifyService
from src.services.import_service import ImportService
from src.services.validation_service import validate_and_fill


class TicketService:
    """
    Ticket operations exposed to the API layer.

    Runs the validation / import / classification pipeline and writes accepted
    tickets into the store. The pipeline itself never updates or removes
    stored tickets; `update_ticket` and `delete_ticket` are caller-level.
    """

    def __init__(self, store: TicketStore):
        self.store = store
        self.classify_service = ClassifyService(store)
        self.import_service = ImportService()

    def create_ticket(self, payload: Any, auto_classify: bool = False) -> Ticket:
        ticket = self.store.append(validate_and_fill(payload))
        # Classification log entries only ever reference stored tickets.
        if auto_classify:
            _, ticket = self.classify_service.classify(ticket)
            self.store.update(ticket.id, ticket)

        logger.info(f"Created ticket {ticket.id} (category={ticket.category}, priority={ticket.priority})")
        return ticket

    def import_tickets(
        self,
        format_tag: str,
        content: str,
        auto_classify: bool = False
    ) -> Tuple[List[Ticket], ImportSummary]:
        tickets, summary = self.import_service.bulk_import(format_tag, content)

        saved = []
        for ticket in tickets:
            if auto_classify:
                _, ticket = self.classify_service.classify(ticket)
            self.store.append(ticket)
            saved.append(ticket)

        return saved, summary

    def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        return self.store.find(ticket_id)

    def list_tickets(
        self,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
        tags: Optional[List[str]] = None,
        search: Optional[str] = None
    ) -> List[Ticket]:
        return self.store.list(
            category=category,
            priority=priority,
            status=status,
            tags=tags,
            search=search
        )

    def update_ticket(self, ticket_id: str, changes: Dict[str, Any]) -> Optional[Ticket]:
        """
        Merge `changes` over the stored ticket and re-validate the result.

        The stored id always wins and `updated_at` is bumped to now.

        Returns:
            The updated ticket, or None if no ticket has this id.
        """
        existing = self.store.find(ticket_id)
        if existing is None:
            return None

        merged = {
            **existing.model_dump(),
            **changes,
            "id": existing.id,
            "updated_at": datetime.now(timezone.utc),
        }
        ticket = validate_and_fill(merged)
        self.store.update(ticket_id, ticket)
        logger.info(f"Updated ticket {ticket_id}")
        return ticket

    def delete_ticket(self, ticket_id: str) -> bool:
        deleted = self.store.remove(ticket_id)
        if deleted:
            logger.info(f"Deleted ticket {ticket_id}")
        return deleted

    def auto_classify(self, ticket_id: str) -> Optional[ClassificationDecision]:
        ticket = self.store.find(ticket_id)
        if ticket is None:
            return None

        decision, updated = self.classify_service.classify(ticket)
        self.store.update(ticket_id, updated)
        return decision

    def get_classification_history(self, ticket_id: str, limit: int = 50) -> List[ClassificationLogEntry]:
        return self.store.get_logs(ticket_id=ticket_id, limit=limit)
