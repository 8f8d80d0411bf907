"""
In-memory ticket store.

Single-process, no transactional guarantees. The application owns one
instance on `app.state.store`; tests build a fresh one per case.
"""

from typing import Dict, List, Optional, Set
from src.core.errors import DuplicateTicketError
from src.db.models import Ticket, ClassificationLogEntry


class TicketStore:
    def __init__(self):
        self._tickets: Dict[str, Ticket] = {}
        self._issued_ids: Set[str] = set()
        self._classification_logs: List[ClassificationLogEntry] = []

    def append(self, ticket: Ticket) -> Ticket:
        """
        Add a new ticket.

        Raises:
            DuplicateTicketError: if the id was ever issued by this store,
            including ids of tickets that have since been removed.
        """
        if ticket.id in self._issued_ids:
            raise DuplicateTicketError(ticket.id)
        self._issued_ids.add(ticket.id)
        self._tickets[ticket.id] = ticket
        return ticket

    def find(self, ticket_id: str) -> Optional[Ticket]:
        return self._tickets.get(ticket_id)

    def list(
        self,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
        tags: Optional[List[str]] = None,
        search: Optional[str] = None
    ) -> List[Ticket]:
        """
        Return tickets in insertion order matching every given filter.

        `tags` requires the ticket to carry all requested tags; `search` is a
        case-insensitive substring match over subject and description.
        """
        needle = search.lower() if search else None
        results = []

        for ticket in self._tickets.values():
            if category and ticket.category != category:
                continue
            if priority and ticket.priority != priority:
                continue
            if status and ticket.status != status:
                continue
            if tags and not all(tag in ticket.tags for tag in tags):
                continue
            if needle:
                haystack = f"{ticket.subject} {ticket.description}".lower()
                if needle not in haystack:
                    continue
            results.append(ticket)

        return results

    def update(self, ticket_id: str, ticket: Ticket) -> Optional[Ticket]:
        if ticket_id not in self._tickets:
            return None
        self._tickets[ticket_id] = ticket
        return ticket

    def remove(self, ticket_id: str) -> bool:
        return self._tickets.pop(ticket_id, None) is not None

    def count(self) -> int:
        return len(self._tickets)

    def append_log(self, entry: ClassificationLogEntry) -> None:
        self._classification_logs.append(entry)

    def get_logs(self, ticket_id: Optional[str] = None, limit: Optional[int] = None) -> List[ClassificationLogEntry]:
        """
        Classification log entries, newest first.

        Args:
            ticket_id: Only entries for this ticket when given.
            limit: Maximum number of entries to return.
        """
        entries = [
            entry for entry in reversed(self._classification_logs)
            if ticket_id is None or entry.ticket_id == ticket_id
        ]
        if limit is not None:
            entries = entries[:limit]
        return entries
