"""Resolve one version of a secret against a secret store."""
import asyncio
import enum
import logging

from ..domains.errors import SecretVersionNotFoundError, UpstreamLookupError
from ..domains.models import SecretVersionQuery, SecretVersionResult
from ..domains.store_client import (
    DELETED_SECRET_MARKERS,
    ERR_CODE_INVALID_REQUEST,
    ERR_CODE_RESOURCE_NOT_FOUND,
    SecretStoreClient,
    SecretStoreError,
)

logger = logging.getLogger(__name__)


class LookupOutcome(enum.Enum):
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"


def classify_store_error(error: SecretStoreError) -> LookupOutcome:
    """
    Map a store error onto the lookup outcome the caller sees.

    A missing secret and a deleted secret are both NOT_FOUND. Deletion is
    only detectable from the message text of an invalid-request error, so a
    reworded store message turns it into UPSTREAM.
    """
    if error.code == ERR_CODE_RESOURCE_NOT_FOUND:
        return LookupOutcome.NOT_FOUND

    if error.code == ERR_CODE_INVALID_REQUEST:
        if any(marker in error.message for marker in DELETED_SECRET_MARKERS):
            return LookupOutcome.NOT_FOUND

    return LookupOutcome.UPSTREAM


def resolve(query: SecretVersionQuery, client: SecretStoreClient) -> SecretVersionResult:
    """
    Fetch exactly one version of a secret.

    Args:
        query: Secret id plus an optional version id or stage label
        client: Store to issue the single lookup against

    Returns:
        SecretVersionResult echoing query.secret_id

    Raises:
        SecretVersionNotFoundError: If the secret or version does not exist, or the secret was deleted
        UpstreamLookupError: For any other store failure
    """
    if query.uses_version_id:
        selector = {"version_id": query.version_id}
    else:
        selector = {"version_stage": query.effective_stage}

    logger.debug(f"Reading secret version: secret_id={query.secret_id} {selector}")
    try:
        response = client.get_secret_value(query.secret_id, **selector)
    except SecretStoreError as e:
        if classify_store_error(e) is LookupOutcome.NOT_FOUND:
            raise SecretVersionNotFoundError(query.secret_id, query.version) from e
        raise UpstreamLookupError(e.message) from e

    return SecretVersionResult(
        arn=response.arn,
        secret_id=query.secret_id,
        version_id=response.version_id,
        string_value=response.secret_string,
        binary_value=response.secret_binary,
        version_stages=frozenset(response.version_stages),
    )


async def resolve_async(query: SecretVersionQuery, client: SecretStoreClient) -> SecretVersionResult:
    """Awaitable resolve(); runs the blocking lookup in a worker thread.

    Cancelling the awaiting task raises asyncio.CancelledError in the caller.
    The worker thread itself finishes its request in the background.
    """
    return await asyncio.to_thread(resolve, query, client)
