"""GCP Secret Manager client wrapper."""
import os
import logging
from typing import Optional, Dict, Any
from google.api_core import exceptions as google_exceptions
from google.cloud import secretmanager

from .config_loader import load_config, ConfigError
from .models import CURRENT_STAGE, SecretValueResponse
from .store_client import (
    ERR_CODE_INVALID_REQUEST,
    ERR_CODE_RESOURCE_NOT_FOUND,
    SecretStoreError,
)

logger = logging.getLogger(__name__)

# GCP's alias for the newest enabled version
LATEST_ALIAS = "latest"

# Lazy loading: the config file is only read when no override is available
_CONFIG: Optional[Dict[str, Any]] = None
_CONFIG_LOADED = False


def _get_config() -> Dict[str, Any]:
    """
    Load configuration on first use.

    Also exports GOOGLE_APPLICATION_CREDENTIALS when the config names a
    service account file.

    Raises:
        ConfigError: If config file is missing or invalid
    """
    global _CONFIG, _CONFIG_LOADED

    if not _CONFIG_LOADED:
        _CONFIG = load_config()
        _CONFIG_LOADED = True

        auth = _CONFIG.get('authentication') or {}
        if 'service_account_path' in auth:
            os.environ['GOOGLE_APPLICATION_CREDENTIALS'] = auth['service_account_path']
            logger.info(f"Set GOOGLE_APPLICATION_CREDENTIALS from config: {auth['service_account_path']}")

    return _CONFIG


def _error_code(exc: google_exceptions.GoogleAPICallError) -> str:
    if isinstance(exc, google_exceptions.NotFound):
        return ERR_CODE_RESOURCE_NOT_FOUND
    # Destroyed and disabled versions are reported as failed preconditions
    if isinstance(exc, (google_exceptions.FailedPrecondition, google_exceptions.InvalidArgument)):
        return ERR_CODE_INVALID_REQUEST
    return type(exc).__name__


class GCPSecretStoreClient:
    """Secret store backed by GCP Secret Manager.

    Stage labels are looked up as version aliases. The ``AWSCURRENT`` stage
    maps to GCP's ``latest`` version.
    """

    def __init__(self, project_id: Optional[str] = None, client=None):
        self._project_id = project_id
        self._client = client

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_project_id(self) -> str:
        """
        Get GCP project ID.

        Priority order:
        1. project_id passed to the constructor
        2. GCP_PROJECT environment variable
        3. Config file

        Raises:
            ConfigError: If no project ID is configured anywhere
        """
        if self._project_id:
            return self._project_id

        gcp_project_env = os.getenv("GCP_PROJECT")
        if gcp_project_env:
            logger.debug(f"Using GCP_PROJECT from environment: {gcp_project_env}")
            return gcp_project_env

        config = _get_config()
        project_id = (config.get('gcp') or {}).get('project_id')
        if not project_id:
            raise ConfigError(
                "Project ID not found. Set GCP_PROJECT or configure gcp.project_id in the config file"
            )
        logger.debug(f"Using project_id from config: {project_id}")
        return project_id

    def _version_name(self, secret_id: str, version_id: Optional[str], version_stage: Optional[str]) -> str:
        if secret_id.startswith("projects/"):
            secret_path = secret_id.rstrip("/")
        else:
            secret_path = f"projects/{self.get_project_id()}/secrets/{secret_id}"

        if version_id:
            selector = version_id
        elif not version_stage or version_stage == CURRENT_STAGE:
            selector = LATEST_ALIAS
        else:
            selector = version_stage
        return f"{secret_path}/versions/{selector}"

    def get_secret_value(
        self,
        secret_id: str,
        version_id: Optional[str] = None,
        version_stage: Optional[str] = None,
    ) -> SecretValueResponse:
        """
        Access one secret version.

        Args:
            secret_id: Secret name, or a full ``projects/.../secrets/...`` resource name
            version_id: Version number to access
            version_stage: Version alias to access, used when version_id is not given

        Returns:
            SecretValueResponse whose arn is the version's resource name

        Raises:
            SecretStoreError: If GCP rejects the request
        """
        name = self._version_name(secret_id, version_id, version_stage)
        try:
            response = self.client.access_secret_version(request={"name": name})
        except google_exceptions.GoogleAPICallError as e:
            raise SecretStoreError(_error_code(e), str(e)) from e

        data = bytes(response.payload.data)
        try:
            secret_string = data.decode("utf-8")
            secret_binary = None
        except UnicodeDecodeError:
            secret_string = None
            secret_binary = data

        if version_id:
            stages = frozenset()
        else:
            stages = frozenset([version_stage or CURRENT_STAGE])

        return SecretValueResponse(
            arn=response.name,
            version_id=response.name.rsplit("/", 1)[-1],
            secret_string=secret_string,
            secret_binary=secret_binary,
            version_stages=stages,
        )
