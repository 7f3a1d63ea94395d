"""
Entity store: the persons and companies maps and every write into them.

Each lookup result is folded into the maps with fuzzy key resolution so that
"Acme" and "Acme Corp" land on one record, and every entity a result merely
mentions gets a placeholder (stub) record on the other side.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .logger import StructuredLogger, get_logger
from .normalize import PERSON, COMPANY, normalize_person, normalize_company, normalizer_for
from .resolver import KeyMatch, resolve_match
from .schema import (
    PERSON_EDGE_LIST,
    COMPANY_EDGE_LIST,
    new_person,
    new_company,
    company_edge,
    person_edge,
)
from .storage import (
    BlobStore,
    CorruptBlobError,
    PERSONS,
    COMPANIES,
    SETTINGS,
    decode_blob,
    encode_blob,
)

DEFAULT_PROVIDER = "anthropic"

Record = Dict[str, Any]


@dataclass
class UnitOfWork:
    """Working copies of both maps, committed together."""

    persons: Dict[str, Record]
    companies: Dict[str, Record]


class EntityStore:
    """
    Persons and companies keyed by canonical key, persisted through a
    BlobStore.

    The store assumes a single writer. Every multi-map write goes through
    unit_of_work() so persons and companies are committed together.
    """

    def __init__(
        self,
        blobs: BlobStore,
        logger: Optional[StructuredLogger] = None,
        strict: bool = False,
        default_provider: str = DEFAULT_PROVIDER,
    ):
        """
        Args:
            blobs: Persistence backend
            logger: Logger (default: global logger)
            strict: Raise CorruptBlobError instead of treating a corrupt blob as empty
            default_provider: Provider reported when settings hold none
        """
        self.blobs = blobs
        self.logger = logger or get_logger()
        self.strict = strict
        self.default_provider = default_provider
        self.corrupt_blobs: set = set()

    # --- blob access ---

    def _load(self, name: str) -> Dict[str, Any]:
        try:
            return decode_blob(self.blobs.get(name), name)
        except CorruptBlobError as e:
            self.corrupt_blobs.add(name)
            self.logger.record_corrupt_blob(name)
            if self.strict:
                raise
            self.logger.warning("Corrupt blob treated as empty", blob=name, reason=e.reason)
            return {}

    def persons(self) -> Dict[str, Record]:
        return self._load(PERSONS)

    def companies(self) -> Dict[str, Record]:
        return self._load(COMPANIES)

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """
        Load both maps, let the caller mutate them, then write both in one
        set_many call. Nothing is written if the body raises.
        """
        work = UnitOfWork(persons=self.persons(), companies=self.companies())
        yield work
        self.blobs.set_many({
            PERSONS: encode_blob(work.persons),
            COMPANIES: encode_blob(work.companies),
        })

    # --- key resolution ---

    def _resolve(self, keys, candidate: str, kind: str) -> KeyMatch:
        match = resolve_match(keys, candidate)
        self.logger.record_resolution(match)
        if match.ambiguous:
            self.logger.debug(
                "Ambiguous key resolution",
                kind=kind,
                candidate=candidate,
                chosen=match.key,
                candidates=match.candidates,
            )
        return match

    def _find(self, records: Dict[str, Record], key: str, kind: str) -> Optional[str]:
        """Resolve a stored key or a display name to the key of an existing record."""
        if not key:
            return None
        found = resolve_match(records.keys(), key).key
        if found is None:
            found = resolve_match(records.keys(), normalizer_for(kind)(key)).key
        return found

    def find_person_key(self, key: str, persons: Optional[Dict[str, Record]] = None) -> Optional[str]:
        return self._find(self.persons() if persons is None else persons, key, PERSON)

    def find_company_key(self, key: str, companies: Optional[Dict[str, Record]] = None) -> Optional[str]:
        return self._find(self.companies() if companies is None else companies, key, COMPANY)

    # --- upserts ---

    def upsert_person(self, result: Dict[str, Any]) -> None:
        """
        Fold a person lookup result into the store.

        The person is resolved against existing person keys and marked
        expanded. A company reference is appended as an edge only when the
        person has no edge to that company key yet. Referenced companies that
        don't exist become stubs; existing ones without a logo get one.
        """
        name = result.get("name") or ""
        fresh = normalize_person(name)
        if not fresh:
            self.logger.warning("Skipping person result with unresolvable name", name=name)
            return

        with self.unit_of_work() as work:
            persons, companies = work.persons, work.companies
            key = self._resolve(persons.keys(), fresh, PERSON).key or fresh
            existing = persons.get(key)
            status = _upsert_status(existing)

            record = existing if existing is not None else new_person(name, key)
            record["name"] = name
            record["key"] = key
            if result.get("summary"):
                record["summary"] = result["summary"]
            if result.get("photo_ref"):
                record["photo_ref"] = result["photo_ref"]
            record["expanded"] = True
            edges = record.setdefault(PERSON_EDGE_LIST, [])

            linked = {e.get("company_key") for e in edges}
            added = 0
            for ref in result.get("companies") or []:
                company_fresh = normalize_company(ref.get("company_name") or "")
                if not company_fresh:
                    self.logger.warning("Skipping company reference with unresolvable name", person=key, company=ref.get("company_name"))
                    continue
                known = list(companies.keys()) + [k for k in linked if k not in companies]
                company_key = self._resolve(known, company_fresh, COMPANY).key or company_fresh
                if company_key in linked:
                    continue
                edges.append(company_edge(ref, company_key))
                linked.add(company_key)
                added += 1

            persons[key] = record

            for edge in edges:
                company_key = edge["company_key"]
                company = companies.get(company_key)
                if company is None:
                    companies[company_key] = new_company(edge["company_name"], company_key, logo_ref=edge.get("logo_ref"))
                    self.logger.record_stub(COMPANY)
                elif edge.get("logo_ref") and not company.get("logo_ref"):
                    company["logo_ref"] = edge["logo_ref"]

        self.logger.record_upsert(PERSON)
        self.logger.info("Upserted person", key=key, status=status, edges_added=added)

    def upsert_company(self, result: Dict[str, Any]) -> None:
        """
        Fold a company lookup result into the store.

        Mirror image of upsert_person: notable people are appended only when
        the company has no edge to that person key yet, missing people become
        stubs, and existing people without a photo get one.
        """
        name = result.get("name") or ""
        fresh = normalize_company(name)
        if not fresh:
            self.logger.warning("Skipping company result with unresolvable name", name=name)
            return

        with self.unit_of_work() as work:
            persons, companies = work.persons, work.companies
            key = self._resolve(companies.keys(), fresh, COMPANY).key or fresh
            existing = companies.get(key)
            status = _upsert_status(existing)

            record = existing if existing is not None else new_company(name, key)
            record["name"] = name
            record["key"] = key
            for field in ("description", "products", "history", "logo_ref"):
                if result.get(field):
                    record[field] = result[field]
            record["expanded"] = True
            record.setdefault("aliases", [])
            edges = record.setdefault(COMPANY_EDGE_LIST, [])

            linked = {e.get("person_key") for e in edges}
            added = 0
            for ref in result.get("notable_people") or []:
                person_fresh = normalize_person(ref.get("person_name") or "")
                if not person_fresh:
                    self.logger.warning("Skipping person reference with unresolvable name", company=key, person=ref.get("person_name"))
                    continue
                known = list(persons.keys()) + [k for k in linked if k not in persons]
                person_key = self._resolve(known, person_fresh, PERSON).key or person_fresh
                if person_key in linked:
                    continue
                edges.append(person_edge(ref, person_key))
                linked.add(person_key)
                added += 1

            companies[key] = record

            for edge in edges:
                person_key = edge["person_key"]
                person = persons.get(person_key)
                if person is None:
                    persons[person_key] = new_person(edge["person_name"], person_key, photo_ref=edge.get("photo_ref"))
                    self.logger.record_stub(PERSON)
                elif edge.get("photo_ref") and not person.get("photo_ref"):
                    person["photo_ref"] = edge["photo_ref"]

        self.logger.record_upsert(COMPANY)
        self.logger.info("Upserted company", key=key, status=status, edges_added=added)

    # --- query helpers ---

    def has_person(self, key: str) -> bool:
        """True if the person has been the direct subject of a lookup."""
        persons = self.persons()
        found = self._find(persons, key, PERSON)
        return bool(found and persons[found].get("expanded"))

    def has_company(self, key: str) -> bool:
        """True if the company has been the direct subject of a lookup."""
        companies = self.companies()
        found = self._find(companies, key, COMPANY)
        return bool(found and companies[found].get("expanded"))

    def get_person_company_names(self, key: str) -> List[str]:
        """Display names of companies already known for a person."""
        persons = self.persons()
        found = self._find(persons, key, PERSON)
        if not found:
            return []
        return [e.get("company_name", "") for e in persons[found].get(PERSON_EDGE_LIST, [])]

    def get_company_people_names(self, key: str) -> List[str]:
        """Display names of people already known for a company."""
        companies = self.companies()
        found = self._find(companies, key, COMPANY)
        if not found:
            return []
        return [e.get("person_name", "") for e in companies[found].get(COMPANY_EDGE_LIST, [])]

    def company_names(self) -> List[Tuple[str, str]]:
        """(display name, key) for every stored company."""
        return [(c.get("name", ""), c.get("key", k)) for k, c in self.companies().items()]

    def update_person_photo(self, key: str, photo_ref: Optional[str]) -> None:
        persons = self.persons()
        found = self._find(persons, key, PERSON)
        if not found:
            return
        persons[found]["photo_ref"] = photo_ref
        self.blobs.set(PERSONS, encode_blob(persons))

    def clear(self) -> None:
        """Drop every person and company; settings are kept."""
        self.blobs.set_many({PERSONS: encode_blob({}), COMPANIES: encode_blob({})})
        self.logger.info("Cleared graph")

    # --- export / import ---

    def export_blobs(self) -> Dict[str, Any]:
        return {"persons": self.persons(), "companies": self.companies()}

    def import_blobs(self, persons: Any, companies: Any) -> None:
        """Replace both maps verbatim."""
        self.blobs.set_many({PERSONS: encode_blob(persons), COMPANIES: encode_blob(companies)})
        self.corrupt_blobs -= {PERSONS, COMPANIES}
        self.logger.info("Imported graph", persons=len(persons or {}), companies=len(companies or {}))

    # --- settings ---

    def get_active_provider(self) -> str:
        return self._load(SETTINGS).get("active_provider") or self.default_provider

    def set_active_provider(self, provider: str) -> None:
        settings = self._load(SETTINGS)
        settings["active_provider"] = provider
        self.blobs.set(SETTINGS, encode_blob(settings))

    def reset_active_provider(self) -> None:
        """Forget the stored provider; get_active_provider falls back to the default."""
        self.blobs.delete(SETTINGS)
        self.logger.info("Reset active provider", default=self.default_provider)


def _upsert_status(existing: Optional[Record]) -> str:
    if existing is None:
        return "new"
    if not existing.get("expanded"):
        return "promoted"
    return "updated"
