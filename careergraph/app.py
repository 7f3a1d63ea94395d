import argparse
import json
import sys
from pathlib import Path

from .env import load_env

from . import __version__
from .config import Settings, BACKENDS
from .database import save_graph, load_graph
from .graph import build_graph
from .logger import get_logger
from .merge import merge_companies
from .schema import (
    LookupResultError,
    parse_person_result,
    parse_company_result,
    validate_person_result,
    validate_company_result,
)
from .store import EntityStore


def _read_json(path_str: str):
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")


def _write_json(data, output: str = None) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {out_path}")
    else:
        print(text)


def open_store(args: argparse.Namespace) -> EntityStore:
    settings = args.settings
    logger = get_logger(level=settings.log_level, enable_file=False)
    return EntityStore(
        settings.open_blob_store(),
        logger=logger,
        strict=settings.strict_blobs,
        default_provider=settings.default_provider,
    )


def cmd_add_person(args: argparse.Namespace) -> None:
    data = _read_json(args.input)
    errors = validate_person_result(data) if isinstance(data, dict) else ["Person result must be a JSON object"]
    if errors and args.strict:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    try:
        result = parse_person_result(data)
    except LookupResultError as e:
        raise SystemExit(str(e))
    store = open_store(args)
    store.upsert_person(result)
    print(f"Person: {result['name']}")
    print(f"Companies referenced: {len(result['companies'])}")


def cmd_add_company(args: argparse.Namespace) -> None:
    data = _read_json(args.input)
    errors = validate_company_result(data) if isinstance(data, dict) else ["Company result must be a JSON object"]
    if errors and args.strict:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    try:
        result = parse_company_result(data)
    except LookupResultError as e:
        raise SystemExit(str(e))
    store = open_store(args)
    store.upsert_company(result)
    print(f"Company: {result['name']}")
    print(f"Notable people referenced: {len(result['notable_people'])}")


def cmd_validate(args: argparse.Namespace) -> None:
    data = _read_json(args.input)
    if not isinstance(data, dict):
        raise SystemExit("Invalid: lookup result must be a JSON object")
    errors = validate_person_result(data) if args.kind == "person" else validate_company_result(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_graph(args: argparse.Namespace) -> None:
    store = open_store(args)
    _write_json(build_graph(store), args.output)


def cmd_list(args: argparse.Namespace) -> None:
    store = open_store(args)
    persons = store.persons()
    companies = store.companies()
    if not persons and not companies:
        print("Graph is empty.")
        return
    print(f"Persons ({len(persons)}):")
    for key, p in persons.items():
        flag = "expanded" if p.get("expanded") else "stub"
        print(f"  {key}: {p.get('name')} [{flag}] companies={len(p.get('companies') or [])}")
    print(f"\nCompanies ({len(companies)}):")
    for key, c in companies.items():
        flag = "expanded" if c.get("expanded") else "stub"
        print(f"  {key}: {c.get('name')} [{flag}] people={len(c.get('notable_people') or [])}")


def cmd_merge(args: argparse.Namespace) -> None:
    store = open_store(args)
    outcome = merge_companies(store, args.source, args.target)
    if not outcome.merged:
        print(f"Nothing merged ({outcome.reason}).")
        raise SystemExit(1)
    print(f"Merged {outcome.source_key} -> {outcome.target_key}")
    print(f"  people added: {outcome.people_added}")
    print(f"  edges repointed: {outcome.edges_repointed}")


def cmd_export(args: argparse.Namespace) -> None:
    store = open_store(args)
    _write_json(store.export_blobs(), args.output)


def cmd_import(args: argparse.Namespace) -> None:
    data = _read_json(args.input)
    if not isinstance(data, dict) or "persons" not in data or "companies" not in data:
        raise SystemExit("Import file must be an object with 'persons' and 'companies'")
    store = open_store(args)
    store.import_blobs(data["persons"], data["companies"])
    print(f"Imported {len(data['persons'])} persons, {len(data['companies'])} companies")


def cmd_save(args: argparse.Namespace) -> None:
    store = open_store(args)
    blobs = store.export_blobs()
    graph_id = save_graph(Path(args.db), blobs["persons"], blobs["companies"], name=args.name)
    print(f"Saved graph id: {graph_id}")


def cmd_load(args: argparse.Namespace) -> None:
    saved = load_graph(Path(args.db), args.id)
    if saved is None:
        raise SystemExit(f"Graph not found: {args.id}")
    store = open_store(args)
    store.import_blobs(saved["persons"], saved["companies"])
    print(f"Loaded '{saved['name']}'")


def cmd_provider(args: argparse.Namespace) -> None:
    store = open_store(args)
    if args.reset:
        store.reset_active_provider()
    elif args.name:
        store.set_active_provider(args.name)
    print(store.get_active_provider())


def cmd_clear(args: argparse.Namespace) -> None:
    if not args.yes:
        raise SystemExit("Refusing to clear without --yes")
    store = open_store(args)
    store.clear()
    print("Cleared persons and companies.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="careergraph", description="Career graph: people/company reconciliation store")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--backend", choices=BACKENDS, help="Blob backend (default: CAREERGRAPH_BACKEND or json)")
    parser.add_argument("--data-dir", help="Directory holding the blobs (default: CAREERGRAPH_DATA_DIR or data/)")

    subparsers = parser.add_subparsers(dest="command")

    ap = subparsers.add_parser("add-person", help="Fold a person lookup result JSON into the graph")
    ap.add_argument("--input", required=True, help="Path to person result JSON")
    ap.add_argument("--strict", action="store_true", help="Reject results that fail validation")
    ap.set_defaults(func=cmd_add_person)

    ac = subparsers.add_parser("add-company", help="Fold a company lookup result JSON into the graph")
    ac.add_argument("--input", required=True, help="Path to company result JSON")
    ac.add_argument("--strict", action="store_true", help="Reject results that fail validation")
    ac.set_defaults(func=cmd_add_company)

    val = subparsers.add_parser("validate", help="Validate a lookup result JSON")
    val.add_argument("--kind", required=True, choices=["person", "company"], help="Result type")
    val.add_argument("--input", required=True, help="Path to result JSON")
    val.set_defaults(func=cmd_validate)

    gr = subparsers.add_parser("graph", help="Print the deduplicated node/edge graph as JSON")
    gr.add_argument("--output", help="Write to file instead of stdout")
    gr.set_defaults(func=cmd_graph)

    lst = subparsers.add_parser("list", help="List stored persons and companies")
    lst.set_defaults(func=cmd_list)

    mrg = subparsers.add_parser("merge", help="Merge one company record into another")
    mrg.add_argument("--source", required=True, help="Key of the company to absorb")
    mrg.add_argument("--target", required=True, help="Key of the surviving company")
    mrg.set_defaults(func=cmd_merge)

    exp = subparsers.add_parser("export", help="Export the raw persons/companies blobs")
    exp.add_argument("--output", help="Write to file instead of stdout")
    exp.set_defaults(func=cmd_export)

    imp = subparsers.add_parser("import", help="Replace the graph with an exported file")
    imp.add_argument("--input", required=True, help="Path to exported JSON")
    imp.set_defaults(func=cmd_import)

    sav = subparsers.add_parser("save", help="Save a shareable snapshot to a SQLite database")
    sav.add_argument("--db", default="data/saved_graphs.db", help="Snapshot database (default: data/saved_graphs.db)")
    sav.add_argument("--name", help="Snapshot label")
    sav.set_defaults(func=cmd_save)

    lod = subparsers.add_parser("load", help="Restore a saved snapshot, replacing the current graph")
    lod.add_argument("--db", default="data/saved_graphs.db", help="Snapshot database (default: data/saved_graphs.db)")
    lod.add_argument("--id", required=True, type=int, help="Snapshot id")
    lod.set_defaults(func=cmd_load)

    prv = subparsers.add_parser("provider", help="Show or set the active lookup provider")
    prv.add_argument("name", nargs="?", help="Provider to activate")
    prv.add_argument("--reset", action="store_true", help="Drop the stored provider and use the default")
    prv.set_defaults(func=cmd_provider)

    clr = subparsers.add_parser("clear", help="Delete all persons and companies (settings are kept)")
    clr.add_argument("--yes", action="store_true", help="Confirm")
    clr.set_defaults(func=cmd_clear)

    return parser


def main(argv=None):
    # Load .env if present (CAREERGRAPH_BACKEND, CAREERGRAPH_DATA_DIR, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise SystemExit(str(e))
    if args.backend:
        settings.backend = args.backend
    if args.data_dir:
        settings.data_dir = Path(args.data_dir)
    args.settings = settings

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help(sys.stderr)


if __name__ == "__main__":
    main()
