"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Dict, Any

from careergraph.logger import get_logger, reset_logger
from careergraph.storage import MemoryBlobStore
from careergraph.store import EntityStore


@pytest.fixture(autouse=True)
def quiet_logger():
    """Global logger with no console or file output, fresh metrics per test."""
    reset_logger()
    logger = get_logger(enable_file=False, enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def store(blobs, quiet_logger) -> EntityStore:
    return EntityStore(blobs, logger=quiet_logger)


@pytest.fixture
def jane_result() -> Dict[str, Any]:
    """Person lookup result naming one company."""
    return {
        "name": "Jane Doe",
        "summary": "Platform engineer.",
        "photo_ref": "https://img.example.com/jane.jpg",
        "companies": [
            {
                "company_name": "Acme Corp",
                "position": "Engineer",
                "start_year": 2015,
                "end_year": 2018,
                "projects": ["Roadrunner"],
                "coworkers": ["Wile Coyote"],
                "manager_name": "Road Runner",
                "notes": "Shipped on time.",
                "logo_ref": "https://img.example.com/acme.png",
            }
        ],
    }


@pytest.fixture
def acme_result() -> Dict[str, Any]:
    """Company lookup result naming Jane Doe."""
    return {
        "name": "Acme",
        "description": "Maker of anvils.",
        "products": "Anvils, rockets",
        "history": "Founded 1949.",
        "logo_ref": None,
        "notable_people": [
            {
                "person_name": "Jane Doe",
                "position": "Engineer",
                "start_year": 2015,
                "end_year": 2018,
                "projects": [],
                "coworkers": [],
                "manager_name": None,
                "photo_ref": None,
            }
        ],
    }


def person_result(name, *companies, **fields) -> Dict[str, Any]:
    """Build a person result; each company is (name, position[, start, end])."""
    refs = []
    for c in companies:
        company_name, position = c[0], c[1]
        refs.append({
            "company_name": company_name,
            "position": position,
            "start_year": c[2] if len(c) > 2 else None,
            "end_year": c[3] if len(c) > 3 else None,
            "projects": [],
            "coworkers": [],
            "manager_name": None,
            "notes": None,
            "logo_ref": fields.pop(f"logo_{company_name}", None),
        })
    result = {"name": name, "summary": "", "photo_ref": None, "companies": refs}
    result.update(fields)
    return result


def company_result(name, *people, **fields) -> Dict[str, Any]:
    """Build a company result; each person is (name, position[, start, end])."""
    refs = []
    for p in people:
        person_name, position = p[0], p[1]
        refs.append({
            "person_name": person_name,
            "position": position,
            "start_year": p[2] if len(p) > 2 else None,
            "end_year": p[3] if len(p) > 3 else None,
            "projects": [],
            "coworkers": [],
            "manager_name": None,
            "photo_ref": fields.pop(f"photo_{person_name}", None),
        })
    result = {
        "name": name,
        "description": "",
        "products": "",
        "history": "",
        "logo_ref": None,
        "notable_people": refs,
    }
    result.update(fields)
    return result
