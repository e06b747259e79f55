"""Interface shared by the secret store clients."""
from typing import Optional, Protocol

from .models import SecretValueResponse

ERR_CODE_RESOURCE_NOT_FOUND = "ResourceNotFoundException"
ERR_CODE_INVALID_REQUEST = "InvalidRequestException"

# Message fragments that mark an invalid-request error as "secret deleted".
# These depend on the store's exact wording and break if it is reworded.
DELETED_SECRET_MARKERS = (
    "You can't perform this operation on the secret because it was deleted",
    "is in DESTROYED state",
)


class SecretStoreError(Exception):
    """Error reported by a secret store, with a machine-readable code."""

    def __init__(self, code: Optional[str], message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class SecretStoreClient(Protocol):
    """Read access to one version of a secret."""

    def get_secret_value(
        self,
        secret_id: str,
        version_id: Optional[str] = None,
        version_stage: Optional[str] = None,
    ) -> SecretValueResponse:
        """
        Fetch one secret version.

        Exactly one of ``version_id`` and ``version_stage`` is passed.

        Raises:
            SecretStoreError: If the store rejects the lookup
        """
        ...
