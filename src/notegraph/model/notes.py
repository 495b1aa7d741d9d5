"""
Note Records & Sources
======================
The read-only note records consumed by the graph engine, and the contract of
the storage collaborator that delivers them.

Why is this file needed?
------------------------
1. Decoupling: persistence and auth live outside this package. The graph only
   sees ``Note`` objects returned by a ``NoteSource``.
2. Normalization: storage records come in a few shapes (``content`` vs
   ``body``, ``is_favorite`` vs ``favorite``). ``Note.from_dict`` accepts all
   of them so the rest of the code deals with one type.

Classes:
    Note: Immutable note record.
    NoteSource: Protocol for anything that can fetch the current note set.
    JsonNoteSource: Reads a JSON export of notes from disk.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Protocol

from notegraph.model.errors import NoteFetchError

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    # fromisoformat() only learned the "Z" suffix in 3.11
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Ignoring unparsable timestamp: {value!r}")
        return None


def _parse_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, (list, tuple)):
        raise NoteFetchError(f"Expected tags to be a list or a string, got {type(value).__name__}.")
    tags: list[str] = []
    for raw in value:
        tag = str(raw).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


@dataclass(frozen=True)
class Note:
    """
    A single note as delivered by the storage collaborator.
    """
    id: str
    title: str = ""
    body: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    favorite: bool = False
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> Note:
        """
        Build a Note from a storage record.

        Accepts both the camelCase contract (``updatedAt``) and the database
        column names (``content``, ``is_favorite``, ``updated_at``).

        Raises:
            NoteFetchError: If the record has no id.
        """
        note_id = record.get("id")
        if note_id is None or str(note_id).strip() == "":
            raise NoteFetchError(f"Note record without id: {dict(record)!r}")

        body = record.get("body")
        if body is None:
            body = record.get("content")

        favorite = record.get("favorite")
        if favorite is None:
            favorite = record.get("is_favorite", False)

        updated = record.get("updatedAt", record.get("updated_at"))

        return cls(
            id=str(note_id),
            title=str(record.get("title") or ""),
            body=str(body or ""),
            tags=_parse_tags(record.get("tags")),
            favorite=bool(favorite),
            updated_at=_parse_timestamp(updated),
        )


class NoteSource(Protocol):
    """Anything that returns all non-deleted notes of the current principal."""

    def fetch_notes(self) -> list[Note]: ...


class JsonNoteSource:
    """
    Reads notes from a JSON export.

    The file holds either a list of note records or an object with a
    ``"notes"`` list. Records flagged ``is_deleted`` / ``deleted`` are skipped.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.path!r})"

    def fetch_notes(self) -> list[Note]:
        logger.info(f"Loading notes from: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError as e:
            raise NoteFetchError(f"Notes file not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise NoteFetchError(f"Invalid JSON in {os.path.basename(self.path)}: {e}") from e
        except UnicodeDecodeError as e:
            raise NoteFetchError(f"{os.path.basename(self.path)} is not UTF-8 encoded: {e}") from e
        except OSError as e:
            raise NoteFetchError(f"Could not read {self.path}: {e}") from e

        if isinstance(payload, dict):
            payload = payload.get("notes")
        if not isinstance(payload, list):
            raise NoteFetchError("Expected a list of notes or an object with a 'notes' list.")

        notes: list[Note] = []
        for record in payload:
            if not isinstance(record, dict):
                raise NoteFetchError(f"Expected a note object, got {type(record).__name__}.")
            if record.get("is_deleted") or record.get("deleted"):
                continue
            notes.append(Note.from_dict(record))

        logger.info(f"Loaded {len(notes)} notes.")
        return notes


class StaticNoteSource:
    """In-memory source, used when the host already holds the note list."""

    def __init__(self, notes: list[Note]) -> None:
        self._notes = list(notes)

    def fetch_notes(self) -> list[Note]:
        return list(self._notes)
