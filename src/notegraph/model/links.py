"""
Link Extraction
===============
Derives edge candidates from note text and tags.

Two kinds of relationships are recognised:

1. Explicit links: ``[[Title]]`` markers in a note body. The marker may carry
   a display alias (``[[Title|shown text]]``) and/or a section anchor
   (``[[Title#Heading]]``); both are stripped before the title is resolved
   case-insensitively against the note set.
2. Shared tags: any two notes carrying the same tag.

Extraction is fail-silent per marker: an unterminated, empty or unknown
marker is not a link, and never an error.
"""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from itertools import combinations
from typing import Iterable, Iterator, Sequence

from notegraph.model.graph import EdgeKey, EdgeKind, GraphEdge, canonical_key
from notegraph.model.notes import Note

logger = logging.getLogger(__name__)

# Inner text may not contain brackets: "[[a [[b]]" only matches "[[b]]"
LINK_PATTERN = re.compile(r"\[\[([^\[\]]+)\]\]")

BACKLINK_CONTEXT_BEFORE = 50
BACKLINK_CONTEXT_AFTER = 100


def normalize_title(text: str) -> str:
    return text.strip().casefold()


def parse_link_target(raw: str) -> str | None:
    """
    Reduce the inner text of a link marker to a lookup key.

    ``"Beta|see beta"`` -> ``"beta"``, ``"Beta#Intro"`` -> ``"beta"``.
    Returns None if nothing is left.
    """
    target = raw.split("|", 1)[0]
    target = target.split("#", 1)[0]
    target = normalize_title(target)
    return target or None


def iter_link_targets(body: str | None) -> Iterator[str]:
    """Yield the normalized target of every well-formed marker, in order."""
    if not body:
        return
    for match in LINK_PATTERN.finditer(body):
        target = parse_link_target(match.group(1))
        if target is not None:
            yield target


def build_title_index(notes: Iterable[Note]) -> dict[str, str]:
    """
    Map normalized title -> note id.

    On a title collision the first note in input order wins.
    """
    index: dict[str, str] = {}
    for note in notes:
        key = normalize_title(note.title)
        if not key:
            continue
        if key in index:
            if index[key] != note.id:
                logger.debug(f"Title collision on {note.title!r}: keeping {index[key]}, ignoring {note.id}")
            continue
        index[key] = note.id
    return index


def directed_links(notes: Sequence[Note]) -> list[tuple[str, str]]:
    """
    Every distinct ``(source id, target id)`` link, in note order.

    Unlike ``LinkExtractor.extract_explicit`` the direction is kept, so
    A->B and B->A are two entries. Unknown targets and self-links are dropped.
    """
    index = build_title_index(notes)
    seen: set[tuple[str, str]] = set()
    links: list[tuple[str, str]] = []
    for note in notes:
        for target in iter_link_targets(note.body):
            target_id = index.get(target)
            if target_id is None or target_id == note.id:
                continue
            pair = (note.id, target_id)
            if pair in seen:
                continue
            seen.add(pair)
            links.append(pair)
    return links


@dataclass
class EdgeCandidates:
    """Output of the extractor, before validation against a node set."""
    explicit: list[GraphEdge] = field(default_factory=list)
    shared_tag: list[GraphEdge] = field(default_factory=list)


class LinkExtractor:
    """
    Turns an ordered note list into explicit-link and shared-tag candidates.

    Explicit links are collapsed per unordered pair: A->B followed by B->A
    yields one edge, directed as first seen. Shared-tag edges are deduplicated
    across tags and suppressed for pairs that already have an explicit link.
    """

    def extract(self, notes: Sequence[Note]) -> EdgeCandidates:
        explicit = self.extract_explicit(notes)
        linked_pairs = {edge.pair for edge in explicit}
        shared = self.extract_shared_tags(notes, exclude_pairs=linked_pairs)
        logger.debug(
            f"Extracted {len(explicit)} explicit and {len(shared)} shared-tag candidates "
            f"from {len(notes)} notes."
        )
        return EdgeCandidates(explicit=explicit, shared_tag=shared)

    def extract_explicit(self, notes: Sequence[Note]) -> list[GraphEdge]:
        index = build_title_index(notes)
        seen: set[EdgeKey] = set()
        edges: list[GraphEdge] = []

        for note in notes:
            for target in iter_link_targets(note.body):
                target_id = index.get(target)
                if target_id is None or target_id == note.id:
                    continue
                key = canonical_key(note.id, target_id, EdgeKind.EXPLICIT_LINK)
                if key in seen:
                    continue
                seen.add(key)
                edges.append(GraphEdge(note.id, target_id, EdgeKind.EXPLICIT_LINK))
        return edges

    def extract_shared_tags(
        self,
        notes: Sequence[Note],
        exclude_pairs: set[tuple[str, str]] | None = None,
    ) -> list[GraphEdge]:
        exclude_pairs = exclude_pairs or set()

        tag_to_ids: dict[str, list[str]] = defaultdict(list)
        for note in notes:
            for tag in note.tags:
                tag = tag.strip()
                if not tag:
                    continue
                ids = tag_to_ids[tag]
                if note.id not in ids:
                    ids.append(note.id)

        seen: set[EdgeKey] = set()
        edges: list[GraphEdge] = []
        for tag, ids in tag_to_ids.items():
            if len(ids) < 2:
                continue
            for a, b in combinations(ids, 2):
                if a == b:
                    continue
                key = canonical_key(a, b, EdgeKind.SHARED_TAG)
                if key in seen or key[:2] in exclude_pairs:
                    continue
                seen.add(key)
                edges.append(GraphEdge(a, b, EdgeKind.SHARED_TAG))
        return edges


@dataclass(frozen=True)
class Backlink:
    """A note that links to some target note."""
    id: str
    title: str
    link_count: int
    context: str


def _context_snippet(body: str, start: int) -> str:
    begin = max(0, start - BACKLINK_CONTEXT_BEFORE)
    end = min(len(body), start + BACKLINK_CONTEXT_AFTER)
    snippet = body[begin:end]
    if begin > 0:
        snippet = "..." + snippet
    if end < len(body):
        snippet = snippet + "..."
    return snippet


def find_backlinks(notes: Sequence[Note], target_id: str) -> list[Backlink]:
    """
    Notes whose body links to ``target_id``, in input order.

    A marker counts as a backlink when it resolves to the target through the
    title index, or names the target id directly.
    """
    index = build_title_index(notes)
    target = next((n for n in notes if n.id == target_id), None)
    if target is None:
        return []

    result: list[Backlink] = []
    for note in notes:
        if note.id == target_id:
            continue
        count = 0
        first_start: int | None = None
        for match in LINK_PATTERN.finditer(note.body or ""):
            key = parse_link_target(match.group(1))
            if key is None:
                continue
            if index.get(key) == target_id or key == normalize_title(target_id):
                count += 1
                if first_start is None:
                    first_start = match.start()
        if count:
            result.append(Backlink(
                id=note.id,
                title=note.title,
                link_count=count,
                context=_context_snippet(note.body, first_start or 0),
            ))
    return result
