"""Parse and normalize Open Library API responses."""
from typing import Dict, Any, List, Optional
from bookdash.models import AuthorDetails, BookRecord, NOT_AVAILABLE, UNKNOWN


def _first(values: Any) -> Optional[Any]:
    """Return the first element of a list-valued field, if any."""
    if isinstance(values, list) and values:
        return values[0]
    return None


def extract_docs(response_json: Any) -> Optional[List[Dict[str, Any]]]:
    """
    Pull the document list out of a search response.

    Args:
        response_json: Complete search API response JSON

    Returns:
        List of raw documents, or None if the payload is malformed
    """
    if not isinstance(response_json, dict):
        return None
    docs = response_json.get("docs")
    if not isinstance(docs, list):
        return None
    return [doc if isinstance(doc, dict) else {} for doc in docs]


def first_author_key(doc: Dict[str, Any]) -> Optional[str]:
    """Return the first author key of a search document."""
    key = _first(doc.get("author_key"))
    return key if isinstance(key, str) and key else None


def parse_birth_date(profile: Dict[str, Any]) -> str:
    """Author profile to birth date, "Unknown" if absent."""
    return profile.get("birth_date") or UNKNOWN


def select_top_work(entries: List[Dict[str, Any]]) -> str:
    """
    Pick the author's top work.

    The top work is the first entry, in returned order, whose title is a
    non-empty string.

    Args:
        entries: Works list from the author works endpoint

    Returns:
        Work title or "N/A"
    """
    for work in entries:
        title = work.get("title") if isinstance(work, dict) else None
        if isinstance(title, str) and title:
            return title
    return NOT_AVAILABLE


def parse_book_record(
    doc: Dict[str, Any],
    record_id: int,
    author: AuthorDetails
) -> BookRecord:
    """
    Merge a search document and its author details into a record.

    Args:
        doc: Raw search document
        record_id: Position of the document in the search response
        author: Resolved (or sentinel) author details

    Returns:
        BookRecord with every field populated
    """
    return BookRecord(
        record_id=record_id,
        title=doc.get("title") or UNKNOWN,
        author_name=_first(doc.get("author_name")) or UNKNOWN,
        first_publish_year=doc.get("first_publish_year"),
        ratings_average=doc.get("ratings_average") or NOT_AVAILABLE,
        subject=_first(doc.get("subject")) or NOT_AVAILABLE,
        author_birth_date=author.birth_date,
        author_top_work=author.top_work,
    )


NUMERIC_FIELDS = {"first_publish_year": int, "ratings_average": float}


def parse_field_value(name: str, raw: str) -> Any:
    """
    Convert text typed into an edit form to the field's value.

    Numeric columns keep sorting numerically when the input parses;
    anything else is stored as typed.
    """
    convert = NUMERIC_FIELDS.get(name)
    if convert is None:
        return raw
    text = raw.strip()
    if not text:
        return None if name == "first_publish_year" else NOT_AVAILABLE
    try:
        return convert(text)
    except ValueError:
        return raw
