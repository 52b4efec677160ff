"""
In-memory store of per-principal object-store credentials.

Credentials live only in process memory and expire after a TTL. Expiry is
enforced on every read; a background sweeper additionally purges entries
that are never read again. Nothing is ever written to disk.
"""

import signal
import threading
import time
from typing import Callable, Dict, Optional

from common.constants import CACHE_SHARD_COUNT, CREDENTIAL_SWEEP_INTERVAL_SECONDS, CREDENTIAL_TTL_SECONDS
from common.logging_config import get_logger
from common.ttl_cache import PeriodicSweeper, TTLCache
from common.types import Credential

logger = get_logger(__name__)


class CredentialVault:
    """
    Keyed, TTL-expiring credential store.

    Lifecycle: construct, optionally start_sweeper(), and shutdown() when the
    process terminates. Absent and expired credentials are indistinguishable
    to callers.
    """

    def __init__(
        self,
        default_ttl: float = CREDENTIAL_TTL_SECONDS,
        sweep_interval: float = CREDENTIAL_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
        shard_count: int = CACHE_SHARD_COUNT,
    ):
        self._cache: TTLCache[str, Credential] = TTLCache(
            default_ttl=default_ttl,
            shard_count=shard_count,
            clock=clock,
            name="credential",
        )
        self._sweeper = PeriodicSweeper(self._cache, sweep_interval, name="CredentialVaultSweeper")
        self._previous_handlers: Dict[int, object] = {}
        self._closed = False

    @property
    def default_ttl(self) -> float:
        return self._cache.default_ttl

    def set(self, principal: str, credential: Credential, ttl: Optional[float] = None) -> None:
        """
        Store credential for principal, replacing any previous one.

        No validation happens here; callers validate against the object
        store before storing.

        Args:
            principal: Account the credential belongs to
            credential: Credential to store
            ttl: Optional TTL in seconds (defaults to the vault TTL)
        """
        entry = self._cache.set(principal, credential, ttl)
        logger.info(
            f"Stored object-store credential for {principal} "
            f"(expires in {entry.expires_at - entry.stored_at:.0f}s)"
        )

    def get(self, principal: str) -> Optional[Credential]:
        """
        Return the principal's credential if present and unexpired.

        An expired entry is removed as part of the read.
        """
        return self._cache.get(principal)

    def has(self, principal: str) -> bool:
        credential = self.get(principal)
        return credential is not None and credential.is_well_formed()

    def delete(self, principal: str) -> bool:
        existed = self._cache.delete(principal)
        if existed:
            logger.info(f"Removed object-store credential for {principal}")
        return existed

    def sweep(self) -> int:
        """
        Remove all expired credentials now.

        Returns:
            Number of credentials removed
        """
        return self._sweeper.sweep_once()

    def start_sweeper(self) -> None:
        self._sweeper.start()

    def stats(self) -> Dict[str, float]:
        return {
            "total_entries": len(self._cache),
            "default_ttl_hours": self.default_ttl / 3600,
        }

    def shutdown(self) -> None:
        """
        Stop the sweeper and drop every stored credential.

        Safe to call more than once.
        """
        self._sweeper.stop()
        dropped = self._cache.clear()
        if not self._closed:
            logger.info(f"Credential vault shut down ({dropped} credential(s) cleared)")
        self._closed = True

    def install_signal_handlers(self, signals=(signal.SIGTERM, signal.SIGINT)) -> None:
        """
        Clear the vault when the process receives a termination signal.

        Previously installed handlers are chained after the vault is cleared.
        Only effective from the main thread.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.warning("Signal handlers can only be installed from the main thread")
            return

        for signum in signals:
            self._previous_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle_signal)

    def _handle_signal(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, clearing credential vault")
        self.shutdown()

        previous = self._previous_handlers.get(signum)
        if callable(previous):
            previous(signum, frame)
        elif previous == signal.SIG_DFL:
            signal.signal(signum, signal.SIG_DFL)
            signal.raise_signal(signum)
