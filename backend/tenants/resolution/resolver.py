"""
Active-tenant resolution.

TenantContextResolver decides, once per request, which tenant is active. It
never raises: an unreachable database, a registry table that has not been
migrated yet, or a failing strategy all resolve to None, so request handling
keeps working during initial setup.
"""

import logging
from typing import Any, Callable, Iterable, Optional

from tenants.errors import (
    RegistryMissing,
    StoreUnavailable,
    StrategyFailure,
    TenantResolutionError,
)

logger = logging.getLogger(__name__)


def normalize_host(host: Optional[str]) -> str:
    """
    Lower-case a host and strip its port.

    Examples:
        "Acme.Example.com:8080" -> "acme.example.com"
        "[::1]:5000" -> "[::1]"
    """
    host = (host or '').strip().lower()
    if host.startswith('['):
        end = host.find(']')
        return host[:end + 1] if end != -1 else host
    return host.split(':', 1)[0]


class TenantContextResolver:
    """
    Resolves the active tenant for a request host.

    Args:
        strategy_factory: Zero-argument callable returning an object with a
                          ``resolve()`` method (the configured strategy)
        store_probe: Zero-argument callable raising if the database is unreachable
        table_exists: Callable taking a table name and returning a bool
        registry_table: Name of the tenant registry table
        domains: Hosts that belong to the application itself (list or comma-separated string)
        on_strategy_failure: Optional zero-argument callable run after the
                             strategy raised, e.g. a session rollback

    Example:
        >>> resolver = TenantContextResolver(
        ...     strategy_factory=lambda: SubdomainTenantResolver(db.session, Tenant),
        ...     store_probe=inspector.ping,
        ...     table_exists=inspector.has_table,
        ...     domains=['example.com'],
        ... )
        >>> resolver.resolve('acme.example.com')
        <Tenant id=... slug=acme>
    """

    def __init__(
        self,
        strategy_factory: Callable[[], Any],
        store_probe: Callable[[], None],
        table_exists: Callable[[str], bool],
        registry_table: str = 'tenants',
        domains: Iterable[str] = (),
        on_strategy_failure: Optional[Callable[[], None]] = None,
    ):
        self.strategy_factory = strategy_factory
        self.store_probe = store_probe
        self.table_exists = table_exists
        self.registry_table = registry_table
        if isinstance(domains, str):
            domains = domains.split(',')
        self.domains = frozenset(normalize_host(domain) for domain in domains if domain.strip())
        self.on_strategy_failure = on_strategy_failure

    def resolve(self, host: Optional[str]):
        """
        Resolve the tenant for a request host.

        Steps:
        1. Probe the database; unreachable -> None
        2. Host in the domain allowlist -> None
        3. Registry table missing -> None
        4. Otherwise the strategy's result, verbatim

        Args:
            host: Request host, with or without port

        Returns:
            The tenant returned by the strategy, or None
        """
        try:
            self._ensure_store()

            if self.is_application_domain(host):
                logger.debug(f"Host {host} is an application domain, no tenant")
                return None

            self._ensure_registry()
            return self._run_strategy()

        except TenantResolutionError as e:
            logger.debug(f"Tenant resolution skipped ({e.__class__.__name__}): {e}")
            return None

    def is_application_domain(self, host: Optional[str]) -> bool:
        return normalize_host(host) in self.domains

    def _ensure_store(self) -> None:
        try:
            self.store_probe()
        except Exception as e:
            raise StoreUnavailable(str(e)) from e

    def _ensure_registry(self) -> None:
        try:
            exists = self.table_exists(self.registry_table)
        except Exception as e:
            raise RegistryMissing(f"Could not inspect table {self.registry_table}: {e}") from e
        if not exists:
            raise RegistryMissing(f"Table {self.registry_table} does not exist")

    def _run_strategy(self):
        try:
            return self.strategy_factory().resolve()
        except Exception as e:
            self._recover()
            raise StrategyFailure(str(e)) from e

    def _recover(self) -> None:
        if self.on_strategy_failure is None:
            return
        try:
            self.on_strategy_failure()
        except Exception as e:
            logger.warning(f"Recovery after failed tenant strategy raised: {e}")
