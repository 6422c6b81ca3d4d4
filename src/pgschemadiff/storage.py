"""
Snapshot storage - read and write Schema snapshots as JSON files
"""

from pathlib import Path

from pydantic import ValidationError

from .errors import SnapshotFileError
from .models import Schema


def save_snapshot(path: Path, schema: Schema) -> None:
    """Write *schema* to *path* as indented JSON, creating parent directories"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(schema.model_dump_json(indent=2) + "\n", encoding="utf-8")


def load_snapshot(path: Path) -> Schema:
    """Load and validate a snapshot file

    Raises:
        SnapshotFileError: If the file is missing, is not JSON, or violates
            snapshot invariants
    """
    if not path.exists():
        raise SnapshotFileError(f"Snapshot file not found: {path}")
    try:
        return Schema.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise SnapshotFileError(f"Invalid snapshot {path}: {e}") from e


def is_snapshot_path(value: str) -> bool:
    """Treat an argument as a snapshot file when it names an existing .json file"""
    path = Path(value)
    return path.suffix == ".json" and path.is_file()
