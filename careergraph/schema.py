from typing import Any, Dict, List, Optional

PERSON_EDGE_LIST = "companies"
COMPANY_EDGE_LIST = "notable_people"

RELATIONSHIP_FIELDS = [
    "position",
    "start_year",
    "end_year",
    "projects",
    "coworkers",
    "manager_name",
]

PERSON_TEXT_FIELDS = ["summary"]
COMPANY_TEXT_FIELDS = ["description", "products", "history"]


class LookupResultError(ValueError):
    """A lookup payload that cannot be folded into the store."""


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _str(v: Any) -> str:
    if isinstance(v, str):
        return v
    return "" if v is None else str(v)


def _opt_str(v: Any) -> Optional[str]:
    return v if _is_non_empty_str(v) else None


def _year(v: Any) -> Optional[int]:
    # bool is an int subclass; a true/false year is garbage
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float) and v.is_integer():
        return int(v)
    return None


def _str_list(v: Any) -> List[str]:
    if not isinstance(v, list):
        return []
    return [_str(item) for item in v]


# --- stored records ---


def new_person(name: str, key: str, photo_ref: Optional[str] = None, expanded: bool = False) -> Dict[str, Any]:
    return {
        "name": name,
        "key": key,
        "summary": "",
        "photo_ref": photo_ref,
        "expanded": expanded,
        PERSON_EDGE_LIST: [],
    }


def new_company(name: str, key: str, logo_ref: Optional[str] = None, expanded: bool = False) -> Dict[str, Any]:
    return {
        "name": name,
        "key": key,
        "description": "",
        "products": "",
        "history": "",
        "logo_ref": logo_ref,
        "expanded": expanded,
        COMPANY_EDGE_LIST: [],
        "aliases": [],
    }


def company_edge(ref: Dict[str, Any], company_key: str) -> Dict[str, Any]:
    """Edge stored on a person, pointing at a company."""
    return {
        "company_name": ref.get("company_name", ""),
        "company_key": company_key,
        "logo_ref": ref.get("logo_ref"),
        "position": ref.get("position", ""),
        "start_year": ref.get("start_year"),
        "end_year": ref.get("end_year"),
        "projects": list(ref.get("projects") or []),
        "coworkers": list(ref.get("coworkers") or []),
        "manager_name": ref.get("manager_name"),
        "notes": ref.get("notes"),
    }


def person_edge(ref: Dict[str, Any], person_key: str) -> Dict[str, Any]:
    """Edge stored on a company, pointing at a person."""
    return {
        "person_name": ref.get("person_name", ""),
        "person_key": person_key,
        "photo_ref": ref.get("photo_ref"),
        "position": ref.get("position", ""),
        "start_year": ref.get("start_year"),
        "end_year": ref.get("end_year"),
        "projects": list(ref.get("projects") or []),
        "coworkers": list(ref.get("coworkers") or []),
        "manager_name": ref.get("manager_name"),
    }


# --- lookup results ---


def parse_person_result(data: Any) -> Dict[str, Any]:
    """
    Coerce a loosely-typed person lookup payload into the shape
    EntityStore.upsert_person expects.

    Raises:
        LookupResultError: payload is not an object or has no name
    """
    if not isinstance(data, dict) or not _is_non_empty_str(data.get("name")):
        raise LookupResultError("Invalid person result: missing name")
    companies = data.get("companies")
    return {
        "name": data["name"].strip(),
        "summary": _str(data.get("summary")),
        "photo_ref": _opt_str(data.get("photo_ref")),
        "companies": [
            {
                "company_name": _str(c.get("company_name")).strip(),
                "position": _str(c.get("position")),
                "start_year": _year(c.get("start_year")),
                "end_year": _year(c.get("end_year")),
                "projects": _str_list(c.get("projects")),
                "coworkers": _str_list(c.get("coworkers")),
                "manager_name": _opt_str(c.get("manager_name")),
                "notes": _opt_str(c.get("notes")),
                "logo_ref": _opt_str(c.get("logo_ref")),
            }
            for c in (companies if isinstance(companies, list) else [])
            if isinstance(c, dict)
        ],
    }


def parse_company_result(data: Any) -> Dict[str, Any]:
    """
    Coerce a loosely-typed company lookup payload into the shape
    EntityStore.upsert_company expects.

    Raises:
        LookupResultError: payload is not an object or has no name
    """
    if not isinstance(data, dict) or not _is_non_empty_str(data.get("name")):
        raise LookupResultError("Invalid company result: missing name")
    people = data.get("notable_people")
    return {
        "name": data["name"].strip(),
        "description": _str(data.get("description")),
        "products": _str(data.get("products")),
        "history": _str(data.get("history")),
        "logo_ref": _opt_str(data.get("logo_ref")),
        "notable_people": [
            {
                "person_name": _str(p.get("person_name")).strip(),
                "position": _str(p.get("position")),
                "start_year": _year(p.get("start_year")),
                "end_year": _year(p.get("end_year")),
                "projects": _str_list(p.get("projects")),
                "coworkers": _str_list(p.get("coworkers")),
                "manager_name": _opt_str(p.get("manager_name")),
                "photo_ref": _opt_str(p.get("photo_ref")),
            }
            for p in (people if isinstance(people, list) else [])
            if isinstance(p, dict)
        ],
    }


def _validate_refs(refs: Any, list_field: str, name_field: str) -> List[str]:
    errors: List[str] = []
    if refs is None:
        return errors
    if not isinstance(refs, list):
        return [f"Field '{list_field}' must be a list if provided"]
    for i, ref in enumerate(refs):
        if not isinstance(ref, dict):
            errors.append(f"{list_field}[{i}] must be an object")
            continue
        if not _is_non_empty_str(ref.get(name_field)):
            errors.append(f"{list_field}[{i}].{name_field} must be a non-empty string")
        for year_field in ("start_year", "end_year"):
            v = ref.get(year_field)
            if v is not None and _year(v) is None:
                errors.append(f"{list_field}[{i}].{year_field} must be an integer year")
        start, end = _year(ref.get("start_year")), _year(ref.get("end_year"))
        if start is not None and end is not None and end < start:
            errors.append(f"{list_field}[{i}] ends ({end}) before it starts ({start})")
    return errors


def validate_person_result(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []
    if not _is_non_empty_str(data.get("name")):
        errors.append("Field 'name' must be a non-empty string")
    for f in PERSON_TEXT_FIELDS + ["photo_ref"]:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")
    errors.extend(_validate_refs(data.get("companies"), "companies", "company_name"))
    return errors


def validate_company_result(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []
    if not _is_non_empty_str(data.get("name")):
        errors.append("Field 'name' must be a non-empty string")
    for f in COMPANY_TEXT_FIELDS + ["logo_ref"]:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")
    errors.extend(_validate_refs(data.get("notable_people"), "notable_people", "person_name"))
    return errors
