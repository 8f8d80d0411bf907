from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum
import re


class Category(str, Enum):
    ACCOUNT_ACCESS = "account_access"
    TECHNICAL_ISSUE = "technical_issue"
    BILLING_QUESTION = "billing_question"
    FEATURE_REQUEST = "feature_request"
    BUG_REPORT = "bug_report"
    OTHER = "other"


class Priority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TicketStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    WAITING_CUSTOMER = "waiting_customer"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Source(str, Enum):
    WEB_FORM = "web_form"
    EMAIL = "email"
    API = "api"
    CHAT = "chat"
    PHONE = "phone"


class DeviceType(str, Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
    TABLET = "tablet"


EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class TicketMetadata(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    source: Source
    browser: str = ""
    device_type: DeviceType


class Ticket(BaseModel):
    """Canonical support ticket. Enum fields are stored as their plain string values."""
    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    customer_email: str
    customer_name: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    category: Category
    priority: Priority
    status: TicketStatus
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    assigned_to: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    metadata: TicketMetadata
    classification_confidence: Optional[float] = Field(None, ge=0, le=1)

    @field_validator("customer_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("must be a valid email address")
        return v


class ClassificationDecision(BaseModel):
    category: str
    priority: str
    confidence: float = Field(..., ge=0, le=1)
    reasoning: str
    keywords_found: List[str] = Field(default_factory=list)


class ClassificationLogEntry(BaseModel):
    """One append-only classification log record."""
    ticket_id: str
    decision: ClassificationDecision
    timestamp: datetime


class ImportErrorEntry(BaseModel):
    index: int
    message: str
    details: List[str] = Field(default_factory=list)


class ImportSummary(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: List[ImportErrorEntry] = Field(default_factory=list)


class ImportRequest(BaseModel):
    format: str
    content: str
    auto_classify: bool = False


class ImportResponse(BaseModel):
    summary: ImportSummary
    tickets: List[Ticket]


class AutoClassifyResponse(ClassificationDecision):
    id: str
