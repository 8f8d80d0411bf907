from typing import List, Tuple
from src.core.errors import MalformedInputError, TicketValidationError, UnsupportedFormatError
from src.core.logging import logger
from src.db.models import Ticket, ImportSummary, ImportErrorEntry
from src.services.normalize_service import NORMALIZERS
from src.services.validation_service import validate_and_fill


class ImportService:
    SUPPORTED_FORMATS = tuple(NORMALIZERS)

    def bulk_import(self, format_tag: str, content: str) -> Tuple[List[Ticket], ImportSummary]:
        """
        Parse `content` in the given format and validate every record.

        Structural failures (unsupported format, malformed document) abort the
        whole call. A record that fails validation is recorded in the summary
        and processing moves on to the next one.

        Returns:
            The validated tickets and the import summary, both in source order.
        """
        normalizer = NORMALIZERS.get(format_tag)
        if normalizer is None:
            logger.warning(f"Import rejected: unsupported format {format_tag!r}")
            raise UnsupportedFormatError(format_tag, self.SUPPORTED_FORMATS)

        try:
            records = normalizer(content)
        except MalformedInputError as e:
            logger.warning(f"Import aborted: {e.message} {e.details}")
            raise

        summary = ImportSummary(total=len(records))
        tickets = []

        for index, record in enumerate(records):
            try:
                ticket = validate_and_fill(record)
            except TicketValidationError as e:
                summary.failed += 1
                summary.errors.append(
                    ImportErrorEntry(index=index, message=e.message, details=e.details)
                )
                logger.warning(f"Import record {index} rejected: {e.details[0] if e.details else e.message}")
                continue

            summary.successful += 1
            tickets.append(ticket)

        logger.info(
            f"Import finished ({format_tag}): total={summary.total} "
            f"successful={summary.successful} failed={summary.failed}"
        )
        return tickets, summary
