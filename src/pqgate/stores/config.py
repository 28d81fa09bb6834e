"""Loading prepared query manifests."""

from pathlib import Path
from typing import Any

import yaml

from ..hashing import compute_hash, normalize_hash
from ..logging import get_logger

logger = get_logger(__name__)


def load_prepared_queries(path: Path) -> dict[str, str]:
    """Load a prepared query manifest from a YAML or JSON file.

    Two shapes are accepted under a top-level ``queries`` key::

        queries:
          <key>: <query text>

        queries:
          - query: <query text>
            hash: <optional key, defaults to the SHA-256 of the text>

    Args:
        path: Path to the manifest

    Returns:
        Mapping of store key to query text

    Raises:
        ValueError: If the file cannot be read or has the wrong shape
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load prepared queries from {path}: {e}") from e

    if not isinstance(data, dict) or "queries" not in data:
        raise ValueError(f"Prepared query manifest {path} must have a top-level 'queries' key")

    queries = _parse_entries(data["queries"], path)
    logger.info("Loaded prepared queries", path=str(path), count=len(queries))
    return queries


def _parse_entries(entries: Any, path: Path) -> dict[str, str]:
    if isinstance(entries, dict):
        parsed: dict[str, str] = {}
        for key, query in entries.items():
            if not isinstance(query, str):
                raise ValueError(f"Query for key {key!r} in {path} must be a string")
            parsed[_store_key(key)] = query
        return parsed

    if isinstance(entries, list):
        parsed = {}
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict) or not isinstance(entry.get("query"), str):
                raise ValueError(f"Entry {index} in {path} must be a mapping with a 'query' string")
            key = entry.get("hash") or compute_hash(entry["query"])
            parsed[_store_key(key)] = entry["query"]
        return parsed

    raise ValueError(f"'queries' in {path} must be a mapping or a list")


def _store_key(key: Any) -> str:
    """Lowercase SHA-256 keys so they match normalized request hashes; keep other keys as-is."""
    key = str(key)
    return normalize_hash(key) or key


def dump_prepared_queries(queries: dict[str, str]) -> str:
    """Render a mapping of key to query text as a YAML manifest."""
    return yaml.safe_dump({"queries": queries}, sort_keys=True, allow_unicode=True)
