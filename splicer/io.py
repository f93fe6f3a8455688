"""
splicer.io - Atomic document read/write helpers.

Timeline documents, version snapshots and exported project files are all
written through a temp file and renamed into place so an interrupted save
never leaves a truncated document behind.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


def write_text(path: Path, content: str) -> None:
    """Write a text file atomically.

    Args:
        path: Destination path
        content: Text content to write
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(content)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def read_json(path: Path) -> Any:
    """Read a UTF-8 JSON file."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data: Any, indent: int = 2) -> None:
    """Write plain JSON data atomically."""
    write_text(path, json.dumps(data, indent=indent, ensure_ascii=False) + "\n")


def read_model(path: Path, model_cls: type[ModelT]) -> ModelT:
    """Load and validate a pydantic document from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        pydantic.ValidationError: If the document breaks a model invariant
    """
    with open(path, encoding="utf-8") as f:
        return model_cls.model_validate_json(f.read())


def write_model(path: Path, model: BaseModel, indent: int = 2) -> None:
    """Serialize a pydantic document and write it atomically."""
    write_text(path, model.model_dump_json(indent=indent) + "\n")
