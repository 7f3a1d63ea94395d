#!/usr/bin/env python3
"""
Validate that the SQLite blob store renders the same graph as the JSON files.

Usage:
    python scripts/validate_migration.py --json-dir data --db data/careergraph.db
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from careergraph.graph import build_graph
from careergraph.logger import get_logger
from careergraph.storage import JsonFileBlobStore, SqlBlobStore
from careergraph.store import EntityStore


def _as_sets(graph):
    nodes = {json.dumps(n, sort_keys=True) for n in graph["nodes"]}
    edges = {json.dumps(e, sort_keys=True) for e in graph["edges"]}
    return nodes, edges


def validate(json_dir: Path, db_path: Path) -> bool:
    """
    Build the graph from both backends and compare them.

    Returns True if they match, False otherwise.
    """
    logger = get_logger(enable_file=False)
    json_graph = build_graph(EntityStore(JsonFileBlobStore(json_dir), logger=logger, strict=True))
    db_graph = build_graph(EntityStore(SqlBlobStore(db_path), logger=logger, strict=True))

    json_nodes, json_edges = _as_sets(json_graph)
    db_nodes, db_edges = _as_sets(db_graph)
    print(f"  JSON: {len(json_nodes)} nodes, {len(json_edges)} edges")
    print(f"  DB:   {len(db_nodes)} nodes, {len(db_edges)} edges")

    ok = True
    for label, left, right in (("nodes", json_nodes, db_nodes), ("edges", json_edges, db_edges)):
        missing = left - right
        extra = right - left
        if missing or extra:
            ok = False
            print(f"\n❌ {label.upper()} MISMATCH: {len(missing)} missing from DB, {len(extra)} only in DB")
            for item in list(missing)[:5]:
                print(f"   - {item}")

    if ok:
        print("\n✅ Graphs match")
    return ok


def main():
    parser = argparse.ArgumentParser(description="Validate JSON -> SQLite blob migration")
    parser.add_argument("--json-dir", type=Path, default=Path("data"),
                        help="Directory with the JSON blob files")
    parser.add_argument("--db", type=Path, default=Path("data/careergraph.db"),
                        help="Path to SQLite database file")
    args = parser.parse_args()

    if not validate(args.json_dir, args.db):
        sys.exit(1)


if __name__ == "__main__":
    main()
