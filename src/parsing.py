"""Family document ingestion: date handling, JSON documents and GEDCOM import."""

from datetime import date
import json
import logging
from pathlib import Path
import re

from ged4py import GedcomReader

from family_tree import FamilyGraph
from models import Gender, Person
from relationships import normalize
from validation import validate_record

logger = logging.getLogger(__name__)


class DocumentError(ValueError):
    """The family document could not be parsed at all."""


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

YEAR_RE = re.compile(r"^(\d{4})$")
ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def _iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalize_date(value) -> str | None:
    """
    Normalize a document date to ISO format (YYYY-MM-DD).

    Accepts "YYYY-MM-DD" and year-only values ("1950" or 1950), the latter
    becoming the first day of that year. Returns None for empty values.

    Raises:
        ValueError: if the value is neither form or not a real calendar date
    """
    if value is None or value == "":
        return None
    s = str(value).strip()

    match = YEAR_RE.match(s)
    if match:
        return f"{int(match.group(1)):04d}-01-01"

    match = ISO_RE.match(s)
    if match:
        iso = _iso(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        if iso:
            return iso

    raise ValueError(f"Invalid date format: {value!r}. Expected YYYY or YYYY-MM-DD.")


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a GEDCOM date string into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Handles formats like:
    - "25 NOV 1954"
    - "1698"
    - "ABOUT 1905"
    - "JAN 1905"
    - "(1839-08-29)"
    - "(May, 1837)"
    - "(1789?)"
    """
    if not date_str:
        return None

    # Clean up the string
    s = date_str.strip().strip("()").rstrip("?")
    # Remove qualifiers (ABT, ABOUT, BEF, AFT, EST, CAL, AROUND, etc.) - with optional colon
    s = re.sub(
        r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|FROM|TO|BET\.?|AND|CIRCA|CA\.?|AROUND):?\s*",
        "",
        s,
        flags=re.IGNORECASE,
    ).strip()

    if not s:
        return None

    # "1839-08-29" (YYYY-MM-DD)
    match = ISO_RE.match(s)
    if match:
        return _iso(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    # "25 NOV 1954" or "11 Aug. 1968" (day month year)
    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(2).upper())
        if month:
            return _iso(int(match.group(3)), month, int(match.group(1)))

    # "NOV 1954" or "May, 1837" (month year, optional comma)
    match = re.match(r"^([A-Za-z]+)\.?,?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        if month:
            return f"{int(match.group(2)):04d}-{month:02d}-01"

    # "1698" (year only)
    match = YEAR_RE.match(s)
    if match:
        return f"{int(match.group(1)):04d}-01-01"

    return None


def _lenient_date(value, person_id: str, field_name: str) -> str | None:
    try:
        return normalize_date(value)
    except ValueError as e:
        logger.warning("%s of %s dropped: %s", field_name, person_id, e)
        return None


def _optional_id(value) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def person_from_record(record: dict) -> Person:
    """
    Build a Person from a document record.

    Malformed dates are dropped with a warning; use `validation.validate_record`
    on the raw record to report them.

    Raises:
        KeyError: if the record has no id or no name
    """
    if not record.get("id") or not record.get("name"):
        raise KeyError(f"Missing required field: id or name in data: {record!r}")

    person_id = str(record["id"])
    raw_spouses = record.get("spouse_ids") or []
    if not isinstance(raw_spouses, (list, tuple)):
        logger.warning("spouse_ids of %s is not a list, ignoring: %r", person_id, raw_spouses)
        raw_spouses = []
    spouse_ids = [str(s) for s in raw_spouses if s]

    birth_order = record.get("birth_order")
    if birth_order is not None:
        try:
            birth_order = int(birth_order)
        except (TypeError, ValueError):
            logger.warning("birth_order of %s is not an integer: %r", person_id, birth_order)
            birth_order = None

    return Person(
        id=person_id,
        name=str(record["name"]),
        gender=Gender.from_string(record.get("gender")),
        birth_date=_lenient_date(record.get("birth_date"), person_id, "birth_date"),
        death_date=_lenient_date(record.get("death_date"), person_id, "death_date"),
        father_id=_optional_id(record.get("father_id")),
        mother_id=_optional_id(record.get("mother_id")),
        spouse_ids=tuple(dict.fromkeys(spouse_ids)),
        birth_order=birth_order,
        note=record.get("note") or None,
    )


def load_document(
    data: dict | str | bytes, errors: dict[str, dict[str, list[str]]] | None = None
) -> FamilyGraph:
    """
    Build a normalized FamilyGraph from a family document.

    The document is a dict (or its JSON text) with "title", "description" and
    "persons", a mapping of id -> record. A record whose "id" disagrees with its
    key takes the key. Records that cannot be turned into a Person are skipped
    with a warning, and any "children_ids" in the input are ignored since they
    are recomputed.

    Args:
        data: The document, or its JSON text
        errors: If given, filled with person id -> `validate_record` errors for
            every raw record that fails validation (skipped records included)

    Raises:
        DocumentError: if the text is not valid JSON or the document is not an object
    """
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DocumentError(f"Family document is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DocumentError("Family document must be a JSON object")

    graph = FamilyGraph(title=data.get("title") or "", description=data.get("description") or "")

    records = data.get("persons")
    if records is None:
        logger.warning("Family document has no persons")
        records = {}
    if isinstance(records, list):
        records = {str(r["id"]): r for r in records if isinstance(r, dict) and r.get("id")}
    if not isinstance(records, dict):
        raise DocumentError("'persons' must be a mapping of id -> person record")

    for key, record in records.items():
        key = str(key)
        if not isinstance(record, dict):
            logger.error("Skipping person %s: record is not an object", key)
            if errors is not None:
                errors[key] = {"record": ["Person record must be an object"]}
            continue
        if errors is not None:
            record_errors = validate_record(record)
            if record_errors:
                errors[key] = record_errors
        if str(record.get("id", key)) != key:
            logger.warning(
                "Person ID mismatch: record says %s but key is %s; using the key",
                record.get("id"),
                key,
            )
        try:
            person = person_from_record({**record, "id": key})
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Skipping person %s: %s", key, e)
            continue
        graph.add_person(person)

    logger.info("Loaded %d persons from document %r", len(graph), graph.title)
    return normalize(graph)


def load_document_file(
    path: Path, errors: dict[str, dict[str, list[str]]] | None = None
) -> FamilyGraph:
    with open(path, "rb") as f:
        return load_document(f.read(), errors)


def dump_document(graph: FamilyGraph) -> dict:
    """Serialize the graph back to the document shape, children_ids included as a cache."""
    children = graph.children_index()
    persons = {}
    for person_id, person in graph.persons().items():
        record = person.to_dict()
        record["children_ids"] = children.get(person_id, [])
        persons[person_id] = record
    return {"title": graph.title, "description": graph.description, "persons": persons}


def dumps_document(graph: FamilyGraph, indent: int = 2) -> str:
    return json.dumps(dump_document(graph), indent=indent, ensure_ascii=False)


# ============================================================================
# GEDCOM import
# ============================================================================


def _xref(xref_id: str) -> str:
    """'@I12@' -> 'I12'"""
    return xref_id.strip("@")


def extract_name(indi) -> str:
    """Extract a display name from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return "Unknown"

    name_value = name_rec.value
    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_value, tuple):
        parts = [p for p in name_value if p]
        return " ".join(parts) if parts else "Unknown"

    # Fallback: string format "Given /Surname/"
    return " ".join(str(name_value).replace("/", " ").split()) or "Unknown"


def extract_event_date(indi, tag: str) -> str | None:
    """ISO date of an event tag (BIRT, DEAT), if it has a parseable DATE."""
    event = indi.sub_tag(tag)
    if event is None:
        return None
    date_rec = event.sub_tag("DATE")
    if date_rec is None or not date_rec.value:
        return None
    return parse_date_string(str(date_rec.value))


def import_gedcom(filepath: Path, title: str = "") -> FamilyGraph:
    """
    Read INDI and FAM records of a GEDCOM file into a normalized FamilyGraph.

    HUSB/WIFE of a family become father_id/mother_id of each CHIL and each
    other's spouses. Non-standard tags are ignored.
    """
    reader = GedcomReader(str(filepath))
    records: dict[str, dict] = {}

    for rec in reader.records0("INDI"):
        if rec.xref_id is None:
            continue
        sex_rec = rec.sub_tag("SEX")
        person_id = _xref(rec.xref_id)
        records[person_id] = {
            "id": person_id,
            "name": extract_name(rec),
            "gender": sex_rec.value if sex_rec else None,
            "birth_date": extract_event_date(rec, "BIRT"),
            "death_date": extract_event_date(rec, "DEAT"),
            "spouse_ids": [],
        }

    for rec in reader.records0("FAM"):
        husb = rec.sub_tag("HUSB")
        wife = rec.sub_tag("WIFE")
        husb_id = _xref(husb.xref_id) if husb is not None and husb.xref_id else None
        wife_id = _xref(wife.xref_id) if wife is not None and wife.xref_id else None

        if husb_id in records and wife_id in records:
            records[husb_id]["spouse_ids"].append(wife_id)
            records[wife_id]["spouse_ids"].append(husb_id)

        for child in rec.sub_tags("CHIL"):
            if child.xref_id is None:
                continue
            child_record = records.get(_xref(child.xref_id))
            if child_record is None:
                continue
            if husb_id:
                child_record["father_id"] = husb_id
            if wife_id:
                child_record["mother_id"] = wife_id

    graph = FamilyGraph(title=title or Path(filepath).stem)
    for record in records.values():
        graph.add_person(person_from_record(record))
    logger.info("Imported %d persons from GEDCOM %s", len(graph), filepath)
    return normalize(graph)
