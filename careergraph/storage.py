"""
Blob persistence port.

The entity store never touches files or databases directly; it reads and
writes whole serialized maps by name through one of these backends.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .database import Blob, init_database, get_session

PERSONS = "persons"
COMPANIES = "companies"
SETTINGS = "settings"

BLOB_NAMES = (PERSONS, COMPANIES, SETTINGS)


class CorruptBlobError(Exception):
    """Raised when a persisted blob cannot be decoded into a map."""

    def __init__(self, blob_name: str, reason: str):
        super().__init__(f"Blob '{blob_name}' is corrupt: {reason}")
        self.blob_name = blob_name
        self.reason = reason


def encode_blob(data: Mapping[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False)


def decode_blob(text: Optional[str], blob_name: str) -> Dict[str, Any]:
    if text is None:
        return {}
    text = text.strip()
    if not text:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptBlobError(blob_name, str(e)) from e
    if not isinstance(data, dict):
        raise CorruptBlobError(blob_name, f"expected an object, got {type(data).__name__}")
    return data


class BlobStore:
    """Get/set serialized maps by blob name."""

    def get(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, name: str, text: str) -> None:
        raise NotImplementedError

    def delete(self, name: str) -> None:
        raise NotImplementedError

    def set_many(self, blobs: Mapping[str, str]) -> None:
        """Write several blobs; backends override this to make it all-or-nothing."""
        for name, text in blobs.items():
            self.set(name, text)


class MemoryBlobStore(BlobStore):
    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self.blobs: Dict[str, str] = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self.blobs.get(name)

    def set(self, name: str, text: str) -> None:
        self.blobs[name] = text

    def delete(self, name: str) -> None:
        self.blobs.pop(name, None)

    def set_many(self, blobs: Mapping[str, str]) -> None:
        self.blobs.update(blobs)


class JsonFileBlobStore(BlobStore):
    """One ``<name>.json`` file per blob inside a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def get(self, name: str) -> Optional[str]:
        path = self.path_for(name)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as f:
            return f.read()

    def set(self, name: str, text: str) -> None:
        self.set_many({name: text})

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        if path.exists():
            path.unlink()

    def set_many(self, blobs: Mapping[str, str]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        staged = []
        try:
            for name, text in blobs.items():
                tmp = self.path_for(name).with_suffix(".json.tmp")
                with tmp.open("w", encoding="utf-8") as f:
                    f.write(text)
                staged.append((tmp, self.path_for(name)))
        except OSError:
            for tmp, _ in staged:
                tmp.unlink(missing_ok=True)
            raise
        # Only rename once every blob is safely on disk
        for tmp, final in staged:
            os.replace(tmp, final)


class SqlBlobStore(BlobStore):
    """Blobs as rows of a SQLite table, written in a single transaction."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_database(self.db_path)

    def get(self, name: str) -> Optional[str]:
        session = get_session(self.db_path)
        try:
            row = session.get(Blob, name)
            return row.data if row is not None else None
        finally:
            session.close()

    def set(self, name: str, text: str) -> None:
        self.set_many({name: text})

    def delete(self, name: str) -> None:
        session = get_session(self.db_path)
        try:
            row = session.get(Blob, name)
            if row is not None:
                session.delete(row)
                session.commit()
        finally:
            session.close()

    def set_many(self, blobs: Mapping[str, str]) -> None:
        session = get_session(self.db_path)
        try:
            for name, text in blobs.items():
                row = session.get(Blob, name)
                if row is None:
                    session.add(Blob(name=name, data=text))
                else:
                    row.data = text
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
