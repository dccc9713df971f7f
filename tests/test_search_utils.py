from datetime import date

import pytest

from dms_core.api.dto import Document, DocumentSearchRequest, SearchValue, Tag
from dms_core.utils.search_utils import (
    DocumentFilters,
    empty_state_message,
    filter_documents,
    has_active_filters,
    matches_filters,
    minor_head_options,
    results_label,
)


def make_doc(doc_id, name="file.pdf", major="Personal", minor="John", date_="2024-01-10", remarks="", tags=()):
    return Document.model_validate({
        "id": doc_id,
        "major_head": major,
        "minor_head": minor,
        "document_date": date_,
        "document_remarks": remarks,
        "tags": [{"tag_name": t} for t in tags],
        "file": {"name": name, "type": "application/pdf", "size": 10},
    })


@pytest.fixture
def documents():
    return [
        make_doc("1", "Invoice_March.pdf", "Professional", "Accounts", "2024-03-01", "march invoice", ["Invoice", "Finance"]),
        make_doc("2", "passport.png", "Personal", "John", "2023-12-31", "scan", ["Passport"]),
        make_doc("3", "payslip.pdf", "Professional", "HR", "2024-01-15T10:30:00", "", ["finance"]),
        make_doc("4", "notes.txt", "Personal", "Emily", "2024-02-29", "Tax notes", []),
    ]


def ids(docs):
    return [d.id for d in docs]


def test_no_filters_returns_everything_in_order(documents):
    assert ids(filter_documents(documents, DocumentFilters())) == ["1", "2", "3", "4"]


def test_text_matches_name_remarks_and_heads_case_insensitively(documents):
    assert ids(filter_documents(documents, DocumentFilters.create("INVOICE"))) == ["1"]
    assert ids(filter_documents(documents, DocumentFilters.create("tax"))) == ["4"]
    assert ids(filter_documents(documents, DocumentFilters.create("  personal "))) == ["2", "4"]
    assert ids(filter_documents(documents, DocumentFilters.create("hr"))) == ["3"]


def test_major_and_minor_heads_are_exact(documents):
    filters = DocumentFilters.create(major_head="Professional", minor_head="HR")
    assert ids(filter_documents(documents, filters)) == ["3"]
    assert filter_documents(documents, DocumentFilters.create(major_head="professional")) == []


def test_tags_are_or_within_and_case_insensitive(documents):
    filters = DocumentFilters.create(tags=["FINANCE", Tag(tag_name="passport")])
    assert ids(filter_documents(documents, filters)) == ["1", "2", "3"]


def test_date_range_is_inclusive(documents):
    filters = DocumentFilters.create(from_date="2024-01-15", to_date=date(2024, 3, 1))
    assert ids(filter_documents(documents, filters)) == ["1", "3", "4"]


def test_open_ended_date_bounds(documents):
    assert ids(filter_documents(documents, DocumentFilters.create(to_date="2023-12-31"))) == ["2"]
    assert ids(filter_documents(documents, DocumentFilters.create(from_date="2024-02-29"))) == ["1", "4"]


def test_predicates_combine_with_and(documents):
    filters = DocumentFilters.create("pdf", major_head="Professional", tags=["finance"], from_date="2024-02-01")
    assert ids(filter_documents(documents, filters)) == ["1"]


def test_filtering_is_idempotent_and_a_subset(documents):
    filters = DocumentFilters.create(tags=["finance"])
    once = filter_documents(documents, filters)
    twice = filter_documents(once, filters)
    assert once == twice
    assert all(doc in documents for doc in once)
    assert all(matches_filters(doc, filters) for doc in once)


def test_document_without_file_only_matches_other_fields():
    doc = Document(id="x", major_head="Personal", minor_head="Tom", document_date="2024-01-01")
    assert matches_filters(doc, DocumentFilters.create("tom"))
    assert not matches_filters(doc, DocumentFilters.create("pdf"))


def test_from_request_mirrors_search_request():
    request = DocumentSearchRequest(
        major_head="Personal",
        tags=[Tag(tag_name="Tax")],
        from_date="2024-01-01",
        search=SearchValue(value="Notes"),
    )
    filters = DocumentFilters.from_request(request)
    assert filters.search_term == "notes"
    assert filters.major_head == "Personal"
    assert filters.tags == ("tax",)
    assert filters.from_date == "2024-01-01"
    assert filters.to_date is None


def test_labels_and_empty_messages():
    assert results_label(DocumentFilters(), 4) == "All Documents (4)"
    assert results_label(DocumentFilters.create("x"), 1) == "Filtered Results (1)"
    assert empty_state_message(DocumentFilters()) == "No documents available"
    assert empty_state_message(DocumentFilters.create(tags=["a"])) == "No documents match your search criteria"
    assert has_active_filters(DocumentFilters()) is False


def test_whitespace_search_text_is_an_active_filter(documents):
    filters = DocumentFilters.create("   ")
    assert has_active_filters(filters) is True
    assert results_label(filters, 4) == "Filtered Results (4)"
    # Matching still uses the trimmed term, so nothing is excluded
    assert ids(filter_documents(documents, filters)) == ["1", "2", "3", "4"]


def test_minor_head_options():
    assert "Accounts" in minor_head_options("Professional")
    assert "Jessica" in minor_head_options("Personal")
    assert minor_head_options(None) == ()


def test_date_bounds_one_day_outside_fail():
    doc = make_doc("d", date_="2024-05-10")
    assert matches_filters(doc, DocumentFilters.create(from_date="2024-05-10", to_date="2024-05-10"))
    assert not matches_filters(doc, DocumentFilters.create(from_date="2024-05-11"))
    assert not matches_filters(doc, DocumentFilters.create(to_date="2024-05-09"))


def test_document_passing_only_one_of_two_filters_is_excluded():
    only_major = make_doc("a", major="Professional", tags=["Tax"])
    only_tag = make_doc("b", major="Personal", tags=["Legal"])
    filters = DocumentFilters.create(major_head="Professional", tags=["Legal"])
    assert filter_documents([only_major, only_tag], filters) == []


def test_tag_selection_against_unrelated_tags():
    filters = DocumentFilters.create(tags=["X", "Y"])
    assert matches_filters(make_doc("x", tags=["X"]), filters)
    assert not matches_filters(make_doc("z", tags=["Z"]), filters)
