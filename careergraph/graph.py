"""
Read-time graph assembly.

Every build re-normalizes each stored display name with the current policy,
so records written under an older policy, or under a spelling the write-time
resolver missed, collapse into one node. Nothing is written back.
"""

from typing import Any, Dict, List, Optional, Tuple

from .logger import StructuredLogger
from .normalize import PERSON, COMPANY, node_id, normalize_person, normalize_company
from .schema import PERSON_EDGE_LIST, COMPANY_EDGE_LIST, RELATIONSHIP_FIELDS
from .store import EntityStore

PERSON_TEXT = {"summary": "summary", "image_ref": "photo_ref"}
COMPANY_TEXT = {
    "description": "description",
    "products": "products",
    "history": "history",
    "image_ref": "logo_ref",
}

Node = Dict[str, Any]
Edge = Dict[str, Any]


def _collapse(nodes: Dict[str, Node], node: Node, fields) -> None:
    prev = nodes.get(node["id"])
    if prev is None:
        nodes[node["id"]] = node
    elif node["expanded"] and not prev["expanded"]:
        for f in fields:
            node[f] = node[f] or prev[f]
        nodes[node["id"]] = node
    else:
        for f in fields:
            prev[f] = prev[f] or node[f]


def _public(node: Node) -> Node:
    return {k: v for k, v in node.items() if v not in (None, "")}


class GraphBuilder:
    """Builds the deduplicated {nodes, edges} view of an EntityStore."""

    def __init__(self, store: EntityStore, logger: Optional[StructuredLogger] = None):
        self.store = store
        self.logger = logger or store.logger

    def _nodes(self, records, kind: str, normalize, text_fields) -> Tuple[Dict[str, Node], Dict[str, str]]:
        nodes: Dict[str, Node] = {}
        ids: Dict[str, str] = {}
        for stored_key, record in records.items():
            fresh = normalize(record.get("name") or "") or stored_key
            if not fresh:
                continue
            nid = node_id(kind, fresh)
            ids[stored_key] = nid
            if record.get("key"):
                ids.setdefault(record["key"], nid)
            node = {
                "id": nid,
                "kind": kind,
                "name": record.get("name") or stored_key,
                "expanded": bool(record.get("expanded")),
            }
            for out_field, stored_field in text_fields.items():
                node[out_field] = record.get(stored_field) or None
            _collapse(nodes, node, text_fields)
        return nodes, ids

    def build(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Returns:
            {"nodes": [...], "edges": [...]}; person nodes first, then
            companies, each in first-seen order
        """
        persons = self.store.persons()
        companies = self.store.companies()

        person_nodes, person_ids = self._nodes(persons, PERSON, normalize_person, PERSON_TEXT)
        company_nodes, company_ids = self._nodes(companies, COMPANY, normalize_company, COMPANY_TEXT)

        def person_id(key: str) -> str:
            return person_ids.get(key) or node_id(PERSON, normalize_person(key or ""))

        def company_id(key: str) -> str:
            return company_ids.get(key) or node_id(COMPANY, normalize_company(key or ""))

        edges: Dict[Tuple[str, str, str], Edge] = {}

        def add(source: str, target: str, data: Dict[str, Any], extra=()) -> None:
            if source not in person_nodes or target not in company_nodes:
                self.logger.record_dropped_edge()
                self.logger.warning("Dropping edge with no endpoint node", source=source, target=target)
                return
            # Read-time dedup includes the position, unlike the write-time dedup
            dedup = (source, target, data.get("position") or "")
            if dedup in edges:
                return
            edge = {"source_id": source, "target_id": target}
            for f in list(RELATIONSHIP_FIELDS) + list(extra):
                if data.get(f) is not None:
                    edge[f] = data[f]
            edges[dedup] = edge

        for stored_key, record in persons.items():
            source = person_id(stored_key)
            for e in record.get(PERSON_EDGE_LIST) or []:
                add(source, company_id(e.get("company_key") or ""), e, extra=("notes",))

        for stored_key, record in companies.items():
            target = company_id(stored_key)
            for e in record.get(COMPANY_EDGE_LIST) or []:
                add(person_id(e.get("person_key") or ""), target, e)

        self.logger.debug(
            "Built graph",
            nodes=len(person_nodes) + len(company_nodes),
            edges=len(edges),
            stored_persons=len(persons),
            stored_companies=len(companies),
        )
        return {
            "nodes": [_public(n) for n in person_nodes.values()] + [_public(n) for n in company_nodes.values()],
            "edges": list(edges.values()),
        }


def build_graph(store: EntityStore) -> Dict[str, List[Dict[str, Any]]]:
    return GraphBuilder(store).build()
