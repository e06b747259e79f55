"""AWS Secrets Manager client wrapper."""
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .models import SecretValueResponse
from .store_client import SecretStoreError

logger = logging.getLogger(__name__)


class AWSSecretStoreClient:
    """Secret store backed by AWS Secrets Manager."""

    def __init__(self, region_name: str, profile_name: Optional[str] = None, client=None):
        self.region_name = region_name
        self.profile_name = profile_name
        self._client = client

    @property
    def client(self):
        """Lazy-initialize the boto3 secretsmanager client."""
        if self._client is None:
            session = boto3.Session(profile_name=self.profile_name) if self.profile_name else boto3.Session()
            self._client = session.client("secretsmanager", region_name=self.region_name)
            logger.debug(f"Initialized Secrets Manager client for region: {self.region_name}")
        return self._client

    def get_secret_value(
        self,
        secret_id: str,
        version_id: Optional[str] = None,
        version_stage: Optional[str] = None,
    ) -> SecretValueResponse:
        """
        Call GetSecretValue for one secret version.

        Args:
            secret_id: Secret name or ARN
            version_id: Version id to fetch
            version_stage: Staging label to fetch, used when version_id is not given

        Returns:
            SecretValueResponse with the binary payload left as raw bytes

        Raises:
            SecretStoreError: If the request fails, carrying the AWS error code
        """
        params = {"SecretId": secret_id}
        if version_id:
            params["VersionId"] = version_id
        elif version_stage:
            params["VersionStage"] = version_stage

        try:
            response = self.client.get_secret_value(**params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            raise SecretStoreError(code, str(e)) from e
        except BotoCoreError as e:
            raise SecretStoreError(type(e).__name__, str(e)) from e

        return SecretValueResponse(
            arn=response.get("ARN", ""),
            version_id=response.get("VersionId", ""),
            secret_string=response.get("SecretString"),
            secret_binary=response.get("SecretBinary"),
            version_stages=frozenset(response.get("VersionStages", [])),
        )
