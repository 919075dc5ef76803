"""
Data model for approval letter generation.

Inputs (form data and attachment files) are immutable once constructed. The
per-stage outcome types replace exception-driven control flow between the
merge engine and the fallback assembler.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class AttachmentFile:
    """A user-supplied file whose bytes are fully resident in memory."""

    name: str
    declared_mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AttachmentGroup:
    """A named, ordered collection of attachment files."""

    key: str
    title: str
    files: Tuple[AttachmentFile, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'files', tuple(self.files))

    @property
    def is_empty(self) -> bool:
        return not self.files


@dataclass(frozen=True)
class FormData:
    """Structured letter content. Every string field may be empty."""

    address: str = ""
    lot: str = ""
    project_type: str = ""
    review_comments: str = ""
    approval_reason: str = ""
    owner_name: str = ""
    contractor_name: str = ""
    approved_by: str = ""
    approval_date: Optional[date] = None
    deposit_amount: Optional[float] = None

    # Keys used by the web form, mapped to field names
    _FORM_KEYS = {
        'address': 'address',
        'lot': 'lot',
        'projectType': 'project_type',
        'reviewComments': 'review_comments',
        'approvalReason': 'approval_reason',
        'ownerName': 'owner_name',
        'ownerLastName': 'owner_name',
        'contractorName': 'contractor_name',
        'approvedBy': 'approved_by',
        'approvalDate': 'approval_date',
        'dateApproved': 'approval_date',
        'depositAmount': 'deposit_amount',
    }

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'FormData':
        """
        Build form data from a mapping using either field names or the web
        form's camelCase keys. Dates may be ``date`` objects, ISO strings or
        ``MM/DD/YYYY`` strings.
        """
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            name = cls._FORM_KEYS.get(key, key)
            if name not in cls.__dataclass_fields__ or name.startswith('_'):
                continue
            kwargs[name] = value

        for name in ('address', 'lot', 'project_type', 'review_comments',
                     'approval_reason', 'owner_name', 'contractor_name', 'approved_by'):
            if name in kwargs:
                kwargs[name] = str(kwargs[name] or "").strip()

        if 'approval_date' in kwargs:
            kwargs['approval_date'] = _parse_date(kwargs['approval_date'])

        if kwargs.get('deposit_amount') in ("", None):
            kwargs['deposit_amount'] = None
        elif 'deposit_amount' in kwargs:
            kwargs['deposit_amount'] = float(str(kwargs['deposit_amount']).replace('$', '').replace(',', ''))

        return cls(**kwargs)

    def effective_date(self) -> date:
        return self.approval_date or date.today()


def _parse_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in ('%m/%d/%Y', '%Y-%m-%d'):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized approval date: {value!r}")


# Classified attachments

@dataclass(frozen=True)
class PaginatedDocument:
    name: str
    data: bytes


@dataclass(frozen=True)
class RasterImage:
    name: str
    data: bytes
    encoding: str


@dataclass(frozen=True)
class Unsupported:
    name: str
    reason: str


Attachment = Union[PaginatedDocument, RasterImage, Unsupported]


# Stage outcomes

@dataclass(frozen=True)
class Embedded:
    page_count: int


@dataclass(frozen=True)
class Skipped:
    reason: str


@dataclass(frozen=True)
class FallbackRequired:
    reason: str


EmbedOutcome = Union[Embedded, Skipped, FallbackRequired]


@dataclass(frozen=True)
class SectionRecord:
    """A contiguous run of output pages belonging to one logical section."""

    title: str
    start_page: int
    page_count: int


@dataclass
class AssemblyOutcome:
    """Result of one assembly path (primary merge or fallback)."""

    document_bytes: Optional[bytes] = None
    page_count: int = 0
    sections: List[SectionRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    failure_reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.failure_reason is None and self.document_bytes is not None


@dataclass
class GenerationResult:
    """What the caller receives from a generation request."""

    success: bool
    document_bytes: Optional[bytes]
    filename: str
    page_count: int = 0
    sections: List[SectionRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    used_fallback: bool = False


@dataclass(frozen=True)
class LogoImage:
    """Decoded organization logo with its intrinsic pixel size."""

    data: bytes
    width: int
    height: int
