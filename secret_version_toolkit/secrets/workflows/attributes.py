"""Typed attribute slots for a resolved secret version.

This is the boundary between the resolver and callers that keep results as
named attributes (for example an infrastructure-as-code data source). Each
slot has a fixed type; sensitive slots are masked by ``redacted()``.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..domains.errors import AttributeAssignmentError
from ..domains.models import CURRENT_STAGE, SecretVersionQuery, SecretVersionResult

REDACTED = "(sensitive value)"


@dataclass(frozen=True)
class AttributeSchema:
    kind: type
    sensitive: bool = False
    default: Any = None


SECRET_VERSION_SCHEMA: Dict[str, AttributeSchema] = {
    "arn": AttributeSchema(str),
    "secret_id": AttributeSchema(str),
    "secret_string": AttributeSchema(str, sensitive=True),
    "secret_binary": AttributeSchema(str, sensitive=True),
    "version_id": AttributeSchema(str),
    "version_stage": AttributeSchema(str, default=CURRENT_STAGE),
    "version_stages": AttributeSchema(frozenset, default=frozenset()),
}


def composite_id(query: SecretVersionQuery) -> str:
    """Identity of a lookup: ``{secret_id}|{version}``."""
    return f"{query.secret_id}|{query.version}"


class AttributeStore:
    """Holds one value per schema slot plus the composite identity."""

    def __init__(self, schema: Optional[Dict[str, AttributeSchema]] = None):
        self.schema = schema if schema is not None else SECRET_VERSION_SCHEMA
        self.id: Optional[str] = None
        self._values: Dict[str, Any] = {name: slot.default for name, slot in self.schema.items()}

    def get(self, name: str) -> Any:
        if name not in self.schema:
            raise KeyError(name)
        return self._values[name]

    def set(self, name: str, value: Any) -> None:
        """
        Store ``value`` in slot ``name``.

        Set slots accept any iterable of strings and keep it as a frozenset.

        Raises:
            AttributeAssignmentError: If the slot is unknown or the value has the wrong type
        """
        slot = self.schema.get(name)
        if slot is None:
            raise AttributeAssignmentError(name, "unknown attribute")

        if slot.kind is str:
            if not isinstance(value, str):
                raise AttributeAssignmentError(name, f"expected a string, got {type(value).__name__}")
            self._values[name] = value
            return

        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            raise AttributeAssignmentError(name, f"expected a set of strings, got {type(value).__name__}")
        items = frozenset(value)
        bad = [item for item in items if not isinstance(item, str)]
        if bad:
            raise AttributeAssignmentError(name, f"expected a set of strings, got element {bad[0]!r}")
        self._values[name] = items

    def as_dict(self) -> Dict[str, Any]:
        """Plain values, with sets as sorted lists."""
        return {
            name: sorted(value) if isinstance(value, frozenset) else value
            for name, value in self._values.items()
        }

    def redacted(self) -> Dict[str, Any]:
        """Like as_dict() but with non-empty sensitive slots masked."""
        values = self.as_dict()
        for name, slot in self.schema.items():
            if slot.sensitive and values[name]:
                values[name] = REDACTED
        return values


def binary_to_text(data: Optional[bytes]) -> str:
    """Carry raw bytes in a text slot without losing any byte."""
    if data is None:
        return ""
    return data.decode("utf-8", errors="surrogateescape")


def apply_result(store: AttributeStore, query: SecretVersionQuery, result: SecretVersionResult) -> AttributeStore:
    """
    Copy a resolved version into ``store`` and assign its composite id.

    Missing payloads are stored as empty strings.

    Raises:
        AttributeAssignmentError: If a value does not fit its slot
    """
    store.id = composite_id(query)
    store.set("secret_id", query.secret_id)
    store.set("version_stage", query.version_stage or CURRENT_STAGE)
    store.set("secret_string", result.string_value if result.string_value is not None else "")
    store.set("version_id", result.version_id)
    store.set("secret_binary", binary_to_text(result.binary_value))
    store.set("arn", result.arn)
    store.set("version_stages", result.version_stages)
    return store
