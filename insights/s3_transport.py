"""boto3-backed object-store transport."""

from typing import Callable, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from common.logging_config import get_logger
from common.types import BucketDescriptor, Credential, ObjectPage, RemoteObjectRecord
from insights.exceptions import InvalidCredentialError, RemoteTransportError

logger = get_logger(__name__)

ClientFactory = Callable[[Credential], object]


class S3Transport:
    """
    Thin wrapper over the S3 API used by the lister and the connect flow.

    A client is built per call from the supplied credential, so no
    credential outlives the vault entry it came from.
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        client_factory: Optional[ClientFactory] = None,
        connect_timeout: float = 10,
        read_timeout: float = 30,
    ):
        self.endpoint_url = endpoint_url
        self._client_factory = client_factory or self._default_client
        self._config = Config(
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={"max_attempts": 3, "mode": "standard"},
        )

    def _default_client(self, credential: Credential):
        session = boto3.session.Session(
            aws_access_key_id=credential.access_key_id,
            aws_secret_access_key=credential.secret_access_key,
            aws_session_token=credential.session_token,
            region_name=credential.region,
        )
        return session.client("s3", endpoint_url=self.endpoint_url, config=self._config)

    def _client(self, credential: Credential):
        return self._client_factory(credential)

    def _list_buckets(self, credential: Credential) -> List[BucketDescriptor]:
        response = self._client(credential).list_buckets()
        return [
            BucketDescriptor(name=bucket.get("Name", ""), creation_date=bucket.get("CreationDate"))
            for bucket in response.get("Buckets", [])
        ]

    def validate_credential(self, credential: Credential) -> List[BucketDescriptor]:
        """
        Check credential by listing buckets.

        Returns:
            Buckets visible to the credential

        Raises:
            InvalidCredentialError: If the object store rejects the credential
        """
        try:
            return self._list_buckets(credential)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Credential validation failed for {credential.access_key_id}: {e}")
            raise InvalidCredentialError(f"Invalid object-store credentials: {e}") from e

    def list_buckets(self, credential: Credential) -> List[BucketDescriptor]:
        try:
            return self._list_buckets(credential)
        except (ClientError, BotoCoreError) as e:
            raise RemoteTransportError(f"Failed to list buckets: {e}") from e

    def list_objects_page(
        self,
        bucket: str,
        prefix: str,
        credential: Credential,
        continuation_token: Optional[str] = None,
        page_size: int = 1000,
    ) -> ObjectPage:
        """
        Fetch one page of a ListObjectsV2 listing.

        Args:
            bucket: Bucket name
            prefix: Key prefix ('' for the whole bucket)
            credential: Credential to sign the request with
            continuation_token: Token from the previous page, if any
            page_size: Maximum keys per page

        Returns:
            ObjectPage with the page's objects and continuation state
        """
        params = {"Bucket": bucket, "Prefix": prefix, "MaxKeys": page_size}
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        try:
            response = self._client(credential).list_objects_v2(**params)
        except (ClientError, BotoCoreError) as e:
            raise RemoteTransportError(f"Failed to list objects in {bucket}: {e}", bucket=bucket) from e

        objects = tuple(
            RemoteObjectRecord(
                key=obj.get("Key", ""),
                size=obj.get("Size", 0) or 0,
                last_modified=obj.get("LastModified"),
            )
            for obj in response.get("Contents", [])
        )

        return ObjectPage(
            objects=objects,
            next_token=response.get("NextContinuationToken"),
            truncated=bool(response.get("IsTruncated", False)),
        )
