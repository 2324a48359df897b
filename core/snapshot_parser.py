"""
Snapshot parsing utilities for Parity.

A snapshot document is the JSON written by the metadata collector for
one environment. Keys are accepted either as the collector's wire names
("LayoutTab", "ValuesLists") or in snake_case ("layout_tab",
"values_lists"). Unknown keys are ignored.
"""
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from core.models import ENTITY_TYPES, MetadataSnapshot, ValuesList, ValuesListValue

logger = logging.getLogger(__name__)

# Entity class -> class of the nodes in its children attribute
CHILD_TYPES: dict[type, type] = {
    ValuesList: ValuesListValue,
    ValuesListValue: ValuesListValue,
}

_TRUE_STRINGS = {"true", "1", "yes", "y"}
_FALSE_STRINGS = {"false", "0", "no", "n", ""}

# Fractional seconds beyond microseconds (.NET writes seven digits)
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


class SnapshotParseError(ValueError):
    """Raised when a snapshot document cannot be turned into a MetadataSnapshot."""


def _normalize(key: str) -> str:
    return key.replace("_", "").lower()


def _lookup(data: dict, *names: str) -> Any:
    """Find the first present key among names, ignoring case and underscores."""
    normalized = {_normalize(k): v for k, v in data.items() if isinstance(k, str)}
    for name in names:
        value = normalized.get(_normalize(name))
        if value is not None:
            return value
    return None


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse various timestamp formats into datetime.

    Supports:
    - ISO format: 2024-01-15T10:30:00, with or without offset
    - Date only: 2024-01-15
    - US format: 01/15/2024, 01/15/2024 10:30:00
    - Unix timestamp (int or float), interpreted as UTC
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    value = value.strip()
    if not value:
        return None

    value = _EXTRA_FRACTION.sub(r"\1", value)

    # Collectors frequently emit a trailing Z for UTC
    iso_value = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(iso_value)
    except ValueError:
        pass

    formats = [
        "%Y-%m-%dT%H:%M:%S.%f",
        "%Y-%m-%d %H:%M:%S",
        "%m/%d/%Y %H:%M:%S",
        "%m/%d/%Y",
        "%Y%m%d%H%M%S",
        "%Y%m%d",
    ]

    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    return None


def _coerce(value: Any, kind: str, where: str) -> Any:
    if kind == "str":
        if isinstance(value, (dict, list)):
            raise SnapshotParseError(f"{where}: expected a scalar, got {type(value).__name__}")
        return value if isinstance(value, str) else str(value)

    if kind == "int":
        if isinstance(value, bool):
            raise SnapshotParseError(f"{where}: expected an integer, got {value!r}")
        if isinstance(value, float):
            if not value.is_integer():
                raise SnapshotParseError(f"{where}: expected an integer, got {value!r}")
            return int(value)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise SnapshotParseError(f"{where}: expected an integer, got {value!r}")

    if kind == "bool":
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
            return value.strip().lower() in _TRUE_STRINGS
        raise SnapshotParseError(f"{where}: expected a boolean, got {value!r}")

    if kind == "datetime":
        parsed = parse_timestamp(value)
        if parsed is None:
            raise SnapshotParseError(f"{where}: unrecognized timestamp {value!r}")
        return parsed

    raise SnapshotParseError(f"{where}: unsupported attribute kind {kind!r}")


def parse_entity(entity_type: type, data: Any, where: str):
    """
    Build one entity from its JSON object.

    Missing or null attributes take the dataclass default.
    """
    if not isinstance(data, dict):
        raise SnapshotParseError(f"{where}: expected an object, got {type(data).__name__}")

    normalized = {_normalize(k): v for k, v in data.items() if isinstance(k, str)}
    values = {}

    for attribute in entity_type.ATTRIBUTES:
        raw = normalized.get(_normalize(attribute.name))
        if raw is None:
            continue

        attribute_where = f"{where}.{attribute.name}"
        if attribute.is_collection:
            if not isinstance(raw, list):
                raise SnapshotParseError(f"{attribute_where}: expected a list")
            child_type = CHILD_TYPES[entity_type]
            values[attribute.field] = tuple(
                parse_entity(child_type, child, f"{attribute_where}[{i}]")
                for i, child in enumerate(raw)
            )
        else:
            values[attribute.field] = _coerce(raw, attribute.kind, attribute_where)

    return entity_type(**values)


def parse_snapshot_dict(data: dict, source_name: str = "snapshot") -> MetadataSnapshot:
    """
    Create a MetadataSnapshot from an already-parsed dict.

    Args:
        data: Parsed snapshot document
        source_name: Used in error messages (usually the filename)

    Raises:
        SnapshotParseError: if the document or any entity is malformed
    """
    if not isinstance(data, dict):
        raise SnapshotParseError(f"{source_name}: snapshot must be a JSON object")

    entities = {}
    for category, entity_type in ENTITY_TYPES.items():
        rows = _lookup(data, category)
        if rows is None:
            continue
        if not isinstance(rows, list):
            raise SnapshotParseError(f"{source_name}: {category} must be a list")
        entities[category] = tuple(
            parse_entity(entity_type, row, f"{source_name}:{category}[{i}]")
            for i, row in enumerate(rows)
        )

    collection_date = _lookup(data, "CollectionDate", "CollectedAt")
    environment_name = _lookup(data, "EnvironmentName", "Environment")
    platform_version = _lookup(data, "PlatformVersion", "ArcherVersion", "Version")

    snapshot = MetadataSnapshot(
        environment_name=str(environment_name) if environment_name is not None else Path(source_name).stem,
        platform_version=str(platform_version) if platform_version is not None else "",
        collection_date=parse_timestamp(collection_date),
        entities=entities
    )

    logger.debug(f"Parsed snapshot {snapshot.environment_name}: {snapshot.count()}")
    return snapshot


def parse_snapshot_content(content: Union[str, bytes], filename: str) -> MetadataSnapshot:
    """
    Parse snapshot JSON content directly (for API uploads).

    Raises:
        SnapshotParseError: if the content is not valid JSON or not a snapshot
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise SnapshotParseError(f"{filename}: not UTF-8 encoded: {e}")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise SnapshotParseError(f"{filename}: invalid JSON: {e}")

    return parse_snapshot_dict(data, filename)


def parse_snapshot_file(file_path: Union[str, Path]) -> MetadataSnapshot:
    """
    Parse a snapshot JSON file from disk.

    Raises:
        SnapshotParseError: if the file is missing, unreadable or malformed
    """
    path = Path(file_path)

    if not path.exists():
        raise SnapshotParseError(f"Snapshot file not found: {path}")

    try:
        content = path.read_bytes()
    except OSError as e:
        raise SnapshotParseError(f"Cannot read {path}: {e}")

    return parse_snapshot_content(content, path.name)


def entity_to_dict(entity: Any) -> dict:
    """Serialize an entity with the collector's wire names."""
    result = {}
    for attribute in entity.ATTRIBUTES:
        value = attribute.read(entity)
        if attribute.is_collection:
            result[attribute.name] = [entity_to_dict(child) for child in value]
        elif isinstance(value, datetime):
            result[attribute.name] = value.isoformat()
        else:
            result[attribute.name] = value
    return result


def snapshot_to_dict(snapshot: MetadataSnapshot) -> dict:
    """Serialize a snapshot into the document format parse_snapshot_dict reads."""
    data = {
        "EnvironmentName": snapshot.environment_name,
        "PlatformVersion": snapshot.platform_version,
        "CollectionDate": snapshot.collection_date.isoformat() if snapshot.collection_date else None,
    }
    for category in ENTITY_TYPES:
        data[category] = [entity_to_dict(e) for e in snapshot.get(category)]
    return data
