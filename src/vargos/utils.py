"""Shared utility functions for vargos.

Small, dependency-free helpers used by more than one provider:
vector math, point id derivation, function id slugs and the JSON
extraction used to read function subprocess output.
"""

import json
import math
import re
import uuid
from typing import Any

from .errors import ParseError

# Characters of subprocess output quoted in a ParseError
PARSE_PREVIEW_CHARS = 120

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def normalize_embedding(embedding: list[float]) -> list[float]:
    """Normalize embedding to unit length for consistent similarity math.

    Args:
        embedding: Vector of floats representing an embedding.

    Returns:
        Normalized embedding with unit length (L2 norm = 1).
        Returns the original embedding if it has zero magnitude.
    """
    norm = math.sqrt(sum(x * x for x in embedding))
    if norm == 0:
        return embedding
    return [x / norm for x in embedding]


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity between two vectors, 0.0 if either is zero."""
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def derive_point_id(logical_id: str) -> str:
    """Map a caller-supplied id to its stable vector point id.

    The same logical id always yields the same UUID (v5, URL namespace),
    so re-indexing overwrites the existing point instead of adding one.
    """
    return str(uuid.uuid5(uuid.NAMESPACE_URL, logical_id))


def slugify(name: str) -> str:
    """Kebab-case id for a function name.

    Lowercases, collapses every run of non-alphanumerics to a single
    hyphen and trims leading/trailing hyphens:
    ``"Get Weather (v2)!"`` -> ``"get-weather-v2"``.
    """
    return _SLUG_INVALID.sub("-", name.lower()).strip("-")


def _next_opener(text: str, start: int) -> int:
    positions = [p for p in (text.find("{", start), text.find("[", start)) if p != -1]
    return min(positions) if positions else -1


def _balanced_end(text: str, start: int) -> int:
    """Index just past the bracketed region opened at ``start``, or -1.

    Braces and brackets share one depth counter. Characters inside JSON
    strings (including escaped quotes) are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def extract_json(text: str) -> Any:
    """Extract the JSON value a function printed to stdout.

    The whole (trimmed) buffer is parsed first. If that fails, the buffer
    is scanned from the first ``{`` or ``[`` for a balanced region, which
    tolerates log lines printed before or after the result. Candidates
    that are balanced but not valid JSON (``[INFO]`` prefixes, say) are
    skipped and the scan moves on to the next opener.

    Args:
        text: Raw stdout of a function subprocess.

    Returns:
        The first JSON value found.

    Raises:
        ParseError: No balanced region parses. The message carries the
            buffer length and a bounded preview, never the full output.
    """
    stripped = text.strip()
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass

    pos = _next_opener(stripped, 0)
    while pos != -1:
        end = _balanced_end(stripped, pos)
        if end != -1:
            try:
                return json.loads(stripped[pos:end])
            except json.JSONDecodeError:
                pass
        pos = _next_opener(stripped, pos + 1)

    preview = stripped[:PARSE_PREVIEW_CHARS]
    raise ParseError(
        f"Failed to parse function output (length={len(text)}, starts with {preview!r})"
    )
