"""
Decompression of the gist snapshot blobs.

Each of the five named gist files holds a JSON array of records compressed
with LZ-String's UTF-16 variant. A blob either decodes completely or is
rejected as a whole.
"""
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from lzstring import LZString

from taby.constants import SNAPSHOT_FILES
from taby.models import Card, Collection, Favicon, Label, Space, SyncData

logger = logging.getLogger(__name__)

GistFile = Union[str, Mapping[str, Any], None]

_RECORD_TYPES = {
    "spaces": Space,
    "collections": Collection,
    "labels": Label,
    "cards": Card,
    "favicons": Favicon,
}


class MalformedSnapshotError(Exception):
    """A present blob could not be decompressed or parsed."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Malformed snapshot blob '{name}': {reason}")


def _file_content(file: GistFile) -> Optional[str]:
    """Pull the text payload out of a gist file object (or a bare string)."""
    if file is None:
        return None
    if isinstance(file, str):
        return file
    return file.get("content")


def decompress_payload(name: str, content: str) -> List[Dict[str, Any]]:
    """
    Decompress and parse one blob into a list of raw records.

    Args:
        name: Logical blob name, used in error messages
        content: UTF-16 LZ-String compressed JSON

    Returns:
        List of record dictionaries

    Raises:
        MalformedSnapshotError: if any step fails
    """
    try:
        text = LZString().decompressFromUTF16(content)
    except Exception as e:
        raise MalformedSnapshotError(name, f"decompression failed ({e})") from e

    if not text:
        raise MalformedSnapshotError(name, "decompression produced no data")

    try:
        records = json.loads(text)
    except ValueError as e:
        raise MalformedSnapshotError(name, f"invalid JSON ({e})") from e

    if not isinstance(records, list):
        raise MalformedSnapshotError(name, f"expected an array, got {type(records).__name__}")

    for index, record in enumerate(records):
        if not isinstance(record, dict) or "id" not in record:
            raise MalformedSnapshotError(name, f"record {index} is not an object with an id")

    return records


def parse_gist_files(files: Mapping[str, GistFile]) -> SyncData:
    """
    Turn the gist's named files into a flat snapshot.

    Missing files yield empty sequences.

    Raises:
        MalformedSnapshotError: if a present file is malformed
    """
    parsed = {}
    for name in SNAPSHOT_FILES:
        content = _file_content(files.get(name))
        if content is None:
            logger.debug(f"Snapshot has no '{name}' blob")
            parsed[name] = []
            continue

        record_type = _RECORD_TYPES[name]
        records = decompress_payload(name, content)
        try:
            parsed[name] = [record_type.from_dict(record) for record in records]
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedSnapshotError(name, f"bad record ({e})") from e
        logger.debug(f"Decoded {len(parsed[name])} {name}")

    return SyncData(**parsed)
