"""
Local document filtering.

Pure, synchronous narrowing of an in-memory document collection. The search
screen fetches everything once and re-runs these filters on every keystroke
or filter change instead of going back to the network.

All active predicates are combined with AND; within the tag predicate a
document needs only one of the selected tags (OR). Filters only remove
documents, they never reorder them.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..api.dto import Document, DocumentSearchRequest, Tag
from ..core.logging_config import get_logger

logger = get_logger(__name__)

MAJOR_HEADS = ("Personal", "Professional")

MINOR_HEAD_OPTIONS = {
    "Personal": ("John", "Tom", "Emily", "Sarah", "Michael", "Jessica"),
    "Professional": ("Accounts", "HR", "IT", "Finance", "Marketing", "Operations"),
}

DateBound = Union[str, date, datetime, None]


def _to_iso_date(value: DateBound) -> Optional[str]:
    """Normalise a date bound to YYYY-MM-DD (None/empty disables the bound)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    value = value.strip()
    return value[:10] if value else None


def _tag_names(tags: Iterable[Union[Tag, str]]) -> Tuple[str, ...]:
    names = []
    for tag in tags:
        name = tag if isinstance(tag, str) else tag.tag_name
        key = name.strip().lower()
        if key and key not in names:
            names.append(key)
    return tuple(names)


@dataclass(frozen=True)
class DocumentFilters:
    """
    The filter state of the search screen.

    Immutable so the same instance can be applied repeatedly without
    side effects. Tag names are stored lower-cased.
    """
    search_text: str = ""
    major_head: str = ""
    minor_head: str = ""
    tags: Tuple[str, ...] = field(default_factory=tuple)
    from_date: Optional[str] = None
    to_date: Optional[str] = None

    @classmethod
    def create(
        cls,
        search_text: str = "",
        major_head: Optional[str] = None,
        minor_head: Optional[str] = None,
        tags: Sequence[Union[Tag, str]] = (),
        from_date: DateBound = None,
        to_date: DateBound = None,
    ) -> "DocumentFilters":
        return cls(
            search_text=search_text or "",
            major_head=major_head or "",
            minor_head=minor_head or "",
            tags=_tag_names(tags),
            from_date=_to_iso_date(from_date),
            to_date=_to_iso_date(to_date),
        )

    @classmethod
    def from_request(cls, request: DocumentSearchRequest) -> "DocumentFilters":
        """Build the equivalent local filters for a backend search request."""
        return cls.create(
            search_text=request.search.value if request.search else "",
            major_head=request.major_head,
            minor_head=request.minor_head,
            tags=request.tags or (),
            from_date=request.from_date,
            to_date=request.to_date,
        )

    @property
    def search_term(self) -> str:
        return self.search_text.strip().lower()


def matches_text(doc: Document, term: str) -> bool:
    """Case-insensitive substring match on filename, remarks, major and minor head."""
    if not term:
        return True
    fields = (
        doc.file.name if doc.file else "",
        doc.document_remarks,
        doc.major_head,
        doc.minor_head,
    )
    return any(term in (value or "").lower() for value in fields)


def matches_tags(doc: Document, selected: Tuple[str, ...]) -> bool:
    """True when the document shares at least one tag with the selection."""
    if not selected:
        return True
    doc_tags = {tag.key for tag in doc.tags}
    return any(name in doc_tags for name in selected)


def matches_date_range(doc: Document, from_date: Optional[str], to_date: Optional[str]) -> bool:
    """Inclusive range on document_date, compared as ISO strings."""
    doc_date = (doc.document_date or "")[:10]
    if from_date and doc_date < from_date:
        return False
    if to_date and doc_date > to_date:
        return False
    return True


def matches_filters(doc: Document, filters: DocumentFilters) -> bool:
    """
    Apply every active predicate to a single document.

    Args:
        doc: Document to test
        filters: Current filter state

    Returns:
        True if the document passes all active filters, False otherwise
    """
    if not matches_text(doc, filters.search_term):
        return False
    if filters.major_head and doc.major_head != filters.major_head:
        return False
    if filters.minor_head and doc.minor_head != filters.minor_head:
        return False
    if not matches_tags(doc, filters.tags):
        return False
    return matches_date_range(doc, filters.from_date, filters.to_date)


def filter_documents(documents: Sequence[Document], filters: DocumentFilters) -> List[Document]:
    """Return the documents passing all filters, in their original order."""
    filtered = [doc for doc in documents if matches_filters(doc, filters)]
    logger.debug(f"Filtered {len(documents)} documents down to {len(filtered)}")
    return filtered


def has_active_filters(filters: DocumentFilters) -> bool:
    # Raw text, so whitespace-only input still counts as a search
    return bool(
        filters.search_text
        or filters.major_head
        or filters.minor_head
        or filters.tags
        or filters.from_date
        or filters.to_date
    )


def results_label(filters: DocumentFilters, count: int) -> str:
    if has_active_filters(filters):
        return f"Filtered Results ({count})"
    return f"All Documents ({count})"


def empty_state_message(filters: DocumentFilters) -> str:
    if has_active_filters(filters):
        return "No documents match your search criteria"
    return "No documents available"


def minor_head_options(major_head: Optional[str]) -> Tuple[str, ...]:
    """Minor-head vocabulary for a major head (empty until one is chosen)."""
    return MINOR_HEAD_OPTIONS.get(major_head or "", ())
