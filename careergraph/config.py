"""
Runtime settings, read from CAREERGRAPH_* environment variables.

Call env.load_env() first to pick up a .env file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .storage import BlobStore, JsonFileBlobStore, SqlBlobStore

BACKENDS = ("json", "sqlite")

TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    backend: str = "json"
    data_dir: Path = Path("data")
    log_level: str = "INFO"
    strict_blobs: bool = False
    default_provider: str = "anthropic"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        backend = env.get("CAREERGRAPH_BACKEND", "json").strip().lower()
        if backend not in BACKENDS:
            raise ValueError(f"CAREERGRAPH_BACKEND must be one of {', '.join(BACKENDS)}, got '{backend}'")
        return cls(
            backend=backend,
            data_dir=Path(env.get("CAREERGRAPH_DATA_DIR", "data")),
            log_level=env.get("CAREERGRAPH_LOG_LEVEL", "INFO").upper(),
            strict_blobs=env.get("CAREERGRAPH_STRICT_BLOBS", "").strip().lower() in TRUTHY,
            default_provider=env.get("CAREERGRAPH_DEFAULT_PROVIDER", "anthropic"),
        )

    @property
    def db_path(self) -> Path:
        return self.data_dir / "careergraph.db"

    def open_blob_store(self) -> BlobStore:
        if self.backend == "sqlite":
            return SqlBlobStore(self.db_path)
        return JsonFileBlobStore(self.data_dir)
