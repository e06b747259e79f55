"""Workflow for looking up secret versions with the configured store."""
import os
import logging
from typing import Optional

from ..domains.aws_client import AWSSecretStoreClient
from ..domains.config_loader import SUPPORTED_BACKENDS, ConfigError, ConfigNotFoundError, load_config
from ..domains.gcp_client import GCPSecretStoreClient
from ..domains.models import SecretVersionQuery
from ..domains.store_client import SecretStoreClient
from .attributes import AttributeStore, apply_result
from .version_resolver import resolve

logger = logging.getLogger(__name__)


def _optional_config() -> dict:
    """The config file contents, or an empty dict when no config file exists.

    An existing but invalid config file still raises ConfigError.
    """
    try:
        return load_config()
    except ConfigNotFoundError as e:
        logger.debug(f"No config file: {e}")
        return {}


def _resolve_backend(backend: Optional[str]) -> str:
    """
    Pick the store backend.

    Priority order:
    1. Explicit argument
    2. SECRET_STORE_BACKEND environment variable
    3. ``backend`` in the config file
    4. "aws" when no config file exists
    """
    if not backend:
        backend = os.getenv("SECRET_STORE_BACKEND")
    if not backend:
        backend = _optional_config().get('backend', "aws")

    backend = backend.strip().lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ConfigError(
            f"Unsupported backend: {backend}\n"
            f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
        )
    return backend


def _aws_client() -> AWSSecretStoreClient:
    region = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
    profile = os.getenv("AWS_PROFILE")
    if not region or not profile:
        aws_config = _optional_config().get('aws') or {}
        region = region or aws_config.get('region')
        profile = profile or aws_config.get('profile')
    if not region:
        raise ConfigError("AWS region not found. Set AWS_REGION or configure aws.region in the config file")
    logger.debug(f"Using AWS Secrets Manager in {region}")
    return AWSSecretStoreClient(region_name=region, profile_name=profile)


def build_store_client(backend: Optional[str] = None) -> SecretStoreClient:
    """
    Create the store client for ``backend``.

    Raises:
        ConfigError: If the backend is unknown or required settings are missing
    """
    backend = _resolve_backend(backend)
    if backend == "gcp":
        # Project id is resolved lazily on the first lookup
        return GCPSecretStoreClient()
    return _aws_client()


def get_secret_version(
    secret_id: str,
    version_id: Optional[str] = None,
    version_stage: Optional[str] = None,
    backend: Optional[str] = None,
    client: Optional[SecretStoreClient] = None,
) -> AttributeStore:
    """
    Resolve one secret version and return it as populated attribute slots.

    Args:
        secret_id: Secret name or ARN / resource name
        version_id: Concrete version to fetch (takes precedence over version_stage)
        version_stage: Stage label to fetch, defaults to the current version
        backend: "aws" or "gcp"; see _resolve_backend for the fallback order
        client: Store client to use instead of building one from config

    Returns:
        AttributeStore with id ``{secret_id}|{version}``

    Raises:
        SecretVersionNotFoundError: If the secret or version does not exist
        UpstreamLookupError: For other store failures
        AttributeAssignmentError: If the store returned a value of the wrong shape
        ConfigError: If no store client can be configured
    """
    query = SecretVersionQuery(secret_id=secret_id, version_id=version_id, version_stage=version_stage)
    if client is None:
        client = build_store_client(backend)

    result = resolve(query, client)
    store = apply_result(AttributeStore(), query, result)
    logger.info(f"Resolved secret {secret_id} version {result.version_id}")
    return store
