"""
User-initiated company merge.

Collapses two company records that automatic key resolution failed to unify
(for example "Blue Titan Software" stored under an older normalization policy
next to "Blue Titan"). The source record is absorbed into the target and
deleted; every person edge that pointed at the source is repointed.
"""

from dataclasses import dataclass
from typing import Optional

from .schema import PERSON_EDGE_LIST, COMPANY_EDGE_LIST
from .store import EntityStore

MERGED_FIELDS = ["description", "products", "history", "logo_ref"]


@dataclass
class MergeOutcome:
    merged: bool
    source_key: Optional[str] = None
    target_key: Optional[str] = None
    reason: str = ""
    people_added: int = 0
    edges_repointed: int = 0


class MergeCoordinator:
    def __init__(self, store: EntityStore):
        self.store = store
        self.logger = store.logger

    def merge_companies(self, source: str, target: str) -> MergeOutcome:
        """
        Merge the source company into the target company.

        - Target keeps its non-empty fields; gaps are filled from source
        - Target display name becomes "Target (Source)"; both former names
          are kept in the target's aliases
        - Source notable people are appended, deduplicated by person key
        - Person edges pointing at source are repointed to target
        - Source is deleted

        Both maps are written in one unit of work. Unknown keys, or two keys
        resolving to the same record, leave the store untouched.

        Args:
            source: Key (or name) of the company to absorb
            target: Key (or name) of the surviving company

        Returns:
            MergeOutcome describing what happened
        """
        companies = self.store.companies()
        source_key = self.store.find_company_key(source, companies)
        target_key = self.store.find_company_key(target, companies)
        if not source_key or not target_key:
            return self._skip(source_key, target_key, "unresolved", source=source, target=target)
        if source_key == target_key:
            return self._skip(source_key, target_key, "same-record", source=source, target=target)

        outcome = MergeOutcome(merged=True, source_key=source_key, target_key=target_key)
        with self.store.unit_of_work() as work:
            src = work.companies[source_key]
            dst = work.companies[target_key]

            for field in MERGED_FIELDS:
                dst[field] = dst.get(field) or src.get(field)

            aliases = dst.setdefault("aliases", [])
            for former in [dst.get("name", ""), src.get("name", "")] + list(src.get("aliases") or []):
                if former and former not in aliases:
                    aliases.append(former)
            dst["name"] = f"{dst.get('name', '')} ({src.get('name', '')})"

            people = dst.setdefault(COMPANY_EDGE_LIST, [])
            seen = {p.get("person_key") for p in people}
            for p in src.get(COMPANY_EDGE_LIST) or []:
                if p.get("person_key") not in seen:
                    people.append(p)
                    seen.add(p.get("person_key"))
                    outcome.people_added += 1

            for person in work.persons.values():
                for edge in person.get(PERSON_EDGE_LIST) or []:
                    if edge.get("company_key") == source_key:
                        edge["company_key"] = target_key
                        edge["company_name"] = dst["name"]
                        outcome.edges_repointed += 1

            del work.companies[source_key]

        self.logger.record_merge()
        self.logger.info(
            "Merged companies",
            source=source_key,
            target=target_key,
            people_added=outcome.people_added,
            edges_repointed=outcome.edges_repointed,
        )
        return outcome

    def _skip(self, source_key, target_key, reason: str, **context) -> MergeOutcome:
        self.logger.info("Company merge skipped", reason=reason, **context)
        return MergeOutcome(merged=False, source_key=source_key, target_key=target_key, reason=reason)


def merge_companies(store: EntityStore, source: str, target: str) -> MergeOutcome:
    return MergeCoordinator(store).merge_companies(source, target)
