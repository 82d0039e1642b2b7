"""
On-disk schema of the acceptance store.

The canonical form is a versioned JSON document (see models.StoreDocument).
Earlier builds wrote three other layouts, which are still readable so that
existing acceptances survive an upgrade:

* v1 JSON:  {"AcceptedEulas": {"<key>": "<code>"}}
* XML attribute dictionary:  <EulaConfig><Entry Key=".." Value=".."/></EulaConfig>
* XML entry list with settings:
      <EulaConfig>
        <AcceptedEulas><EulaEntry><Key>..</Key><Code>..</Code></EulaEntry></AcceptedEulas>
        <Validated>true</Validated>
      </EulaConfig>

Legacy documents are converted on read; the next save writes the canonical form.
"""

import json
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from models import StoreDocument, StoreSettings

SCHEMA_VERSION = 2

_KEY_NAMES = ("key",)
_CODE_NAMES = ("value", "code")
_LEGACY_SETTINGS = {"validated": "validated", "eulaagreed": "eula_agreed"}


class StoreParseError(ValueError):
    """Raised when a store file cannot be read as any known schema."""


def parse_document(text: str) -> Tuple[StoreDocument, bool]:
    """
    Parse store file contents.

    Returns the document and whether it came from a legacy layout.
    """
    # Files written by the .NET builds start with a UTF-8 byte-order mark
    stripped = text.lstrip("\ufeff").strip()
    if not stripped:
        raise StoreParseError("store file is empty")

    if stripped.startswith("<"):
        return _parse_xml(stripped), True

    try:
        data = json.loads(stripped)
    except ValueError as e:
        raise StoreParseError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise StoreParseError("store root must be an object")

    if "AcceptedEulas" in data:
        return _from_legacy_json(data), True

    if data and "accepted_eulas" not in data and "schema_version" not in data:
        raise StoreParseError("no accepted_eulas section")

    try:
        return StoreDocument.model_validate(data), False
    except ValidationError as e:
        raise StoreParseError(f"schema mismatch: {e}") from e


def dump_document(document: StoreDocument) -> str:
    payload = document.model_dump(mode="json")
    # Files from newer builds keep their version tag
    payload["schema_version"] = max(document.schema_version, SCHEMA_VERSION)
    return json.dumps(payload, indent=2)


def _from_legacy_json(data: Dict[str, Any]) -> StoreDocument:
    settings = {}
    for name, value in data.items():
        field = _LEGACY_SETTINGS.get(name.lower())
        if field:
            settings[field] = bool(value)

    try:
        return StoreDocument(
            accepted_eulas=data.get("AcceptedEulas") or {},
            settings=StoreSettings(**settings),
        )
    except ValidationError as e:
        raise StoreParseError(f"legacy JSON mismatch: {e}") from e


def _lookup(mapping: Dict[str, str], names: Tuple[str, ...]) -> Optional[str]:
    lowered = {k.lower(): v for k, v in mapping.items()}
    for name in names:
        if name in lowered:
            return lowered[name]
    return None


def _child_text(element: ET.Element, names: Tuple[str, ...]) -> Optional[str]:
    for child in element:
        if child.tag.lower() in names:
            return (child.text or "").strip()
    return None


def _parse_xml(text: str) -> StoreDocument:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise StoreParseError(f"invalid XML: {e}") from e

    accepted: Dict[str, str] = {}
    settings: Dict[str, bool] = {}

    for element in root.iter():
        if element is root:
            continue

        tag = element.tag.lower()
        if tag in _LEGACY_SETTINGS and len(element) == 0:
            settings[_LEGACY_SETTINGS[tag]] = (element.text or "").strip().lower() == "true"
            continue

        # Attribute dictionary entries
        key = _lookup(element.attrib, _KEY_NAMES)
        code = _lookup(element.attrib, _CODE_NAMES)
        if key is None or code is None:
            # List entries with child elements
            key = _child_text(element, _KEY_NAMES)
            code = _child_text(element, _CODE_NAMES)

        if key and code is not None:
            accepted[key] = code

    return StoreDocument(accepted_eulas=accepted, settings=StoreSettings(**settings))
