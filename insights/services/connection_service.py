"""Connect / disconnect flow for a principal's object-store account."""

import asyncio
from typing import List, Optional

from common.constants import DEFAULT_REGION
from common.logging_config import get_logger
from common.types import BucketDescriptor, Credential
from insights.credential_vault import CredentialVault
from insights.exceptions import InvalidCredentialError, NotConnectedError
from insights.remote_lister import RemoteLister, RemoteStoreTransport
from insights.services.usage_aggregator import UsageAggregator

logger = get_logger(__name__)


class ConnectionService:
    def __init__(
        self,
        vault: CredentialVault,
        transport: RemoteStoreTransport,
        lister: RemoteLister,
        aggregator: Optional[UsageAggregator] = None,
    ):
        self.vault = vault
        self.transport = transport
        self.lister = lister
        self.aggregator = aggregator

    async def connect(
        self,
        principal: str,
        access_key_id: str,
        secret_access_key: str,
        region: Optional[str] = None,
        session_token: Optional[str] = None,
    ) -> List[BucketDescriptor]:
        """
        Validate a credential against the object store and store it.

        The credential is stored only if validation succeeds.

        Returns:
            Buckets visible to the credential

        Raises:
            InvalidCredentialError: If the key pair is empty or rejected
        """
        if not access_key_id or not secret_access_key:
            raise InvalidCredentialError("Access key id and secret access key are required")

        credential = Credential(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            region=region or DEFAULT_REGION,
            session_token=session_token or None,
        )

        buckets = await asyncio.to_thread(self.transport.validate_credential, credential)

        self.vault.set(principal, credential)
        self._invalidate_report(principal)
        logger.info(f"Principal {principal} connected to object store ({len(buckets)} bucket(s) visible)")
        return buckets

    def disconnect(self, principal: str) -> bool:
        existed = self.vault.delete(principal)
        self._invalidate_report(principal)
        return existed

    def status(self, principal: str) -> Optional[Credential]:
        """
        Return the stored credential if connected, else None.
        """
        credential = self.vault.get(principal)
        if credential is None or not credential.is_well_formed():
            return None
        return credential

    async def list_buckets(self, principal: str) -> List[BucketDescriptor]:
        credential = self.status(principal)
        if credential is None:
            raise NotConnectedError("No object-store credentials found. Please connect first.")
        return await self.lister.list_buckets(credential)

    def _invalidate_report(self, principal: str) -> None:
        if self.aggregator is not None:
            self.aggregator.invalidate(principal)
