"""Domain models for secret version lookups."""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

# Stage label attached to the currently active version of a secret
CURRENT_STAGE = "AWSCURRENT"


@dataclass(frozen=True)
class SecretVersionQuery:
    """Identifies one version of a secret.

    ``version_id`` wins over ``version_stage`` when both are given. When
    neither is given the lookup targets the current version.
    """
    secret_id: str
    version_id: Optional[str] = None
    version_stage: Optional[str] = None

    @property
    def uses_version_id(self) -> bool:
        return bool(self.version_id)

    @property
    def effective_stage(self) -> Optional[str]:
        """Stage label sent to the store, or None for id lookups."""
        if self.uses_version_id:
            return None
        return self.version_stage or CURRENT_STAGE

    @property
    def version(self) -> str:
        """The selector that is actually in effect for this query."""
        if self.uses_version_id:
            return self.version_id
        return self.effective_stage


@dataclass(frozen=True)
class SecretValueResponse:
    """Normalized response of a store client lookup."""
    arn: str
    version_id: str
    secret_string: Optional[str] = None
    secret_binary: Optional[bytes] = None
    version_stages: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class SecretVersionResult:
    """One resolved secret version with its metadata and payload."""
    arn: str
    secret_id: str
    version_id: str
    string_value: Optional[str] = None
    binary_value: Optional[bytes] = None
    version_stages: FrozenSet[str] = field(default_factory=frozenset)
