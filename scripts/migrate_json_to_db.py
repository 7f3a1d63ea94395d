#!/usr/bin/env python3
"""
Migrate persons/companies/settings blobs from JSON files to SQLite.

Usage:
    python scripts/migrate_json_to_db.py --json-dir data --db data/careergraph.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from careergraph.storage import (
    BLOB_NAMES,
    CorruptBlobError,
    JsonFileBlobStore,
    SqlBlobStore,
    decode_blob,
)


def migrate(json_dir: Path, db_path: Path, dry_run: bool = False) -> bool:
    """
    Copy every blob from the JSON directory into the SQLite blob table.

    Args:
        json_dir: Directory holding persons.json / companies.json / settings.json
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database

    Returns:
        True if every present blob was copied
    """
    source = JsonFileBlobStore(json_dir)
    blobs = {}
    for name in BLOB_NAMES:
        text = source.get(name)
        if text is None:
            print(f"  {name}: not present, skipping")
            continue
        try:
            entries = decode_blob(text, name)
        except CorruptBlobError as e:
            print(f"❌ {e}")
            return False
        print(f"  {name}: {len(entries)} entries")
        blobs[name] = text

    if dry_run:
        print(f"\n[DRY RUN] Would write {len(blobs)} blobs to {db_path}")
        return True

    print(f"\nWriting to {db_path}...")
    try:
        SqlBlobStore(db_path).set_many(blobs)
    except Exception as e:
        print(f"❌ Failed to commit: {e}")
        return False

    print("\n✅ Migration complete!")
    print(f"   Blobs migrated: {len(blobs)}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Migrate blobs from JSON files to SQLite")
    parser.add_argument("--json-dir", type=Path, default=Path("data"),
                        help="Directory with the JSON blob files")
    parser.add_argument("--db", type=Path, default=Path("data/careergraph.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be migrated without writing")

    args = parser.parse_args()

    if not args.json_dir.is_dir():
        print(f"❌ JSON directory not found: {args.json_dir}")
        sys.exit(1)

    if not migrate(args.json_dir, args.db, dry_run=args.dry_run):
        sys.exit(1)


if __name__ == "__main__":
    main()
