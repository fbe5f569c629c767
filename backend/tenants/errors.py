"""
Exceptions raised while resolving the active tenant.

Resolution errors never leave TenantContextResolver: they are caught there,
logged, and turned into a ``None`` tenant. They exist so each failure keeps
its category in the logs.
"""


class TenantsError(Exception):
    """Base exception for the tenants add-on."""
    pass


class TenantResolutionError(TenantsError):
    """A step of active-tenant resolution failed."""
    pass


class StoreUnavailable(TenantResolutionError):
    """The backing database could not be reached."""
    pass


class RegistryMissing(TenantResolutionError):
    """The tenant registry table does not exist (not migrated yet)."""
    pass


class StrategyFailure(TenantResolutionError):
    """The configured resolution strategy raised an error."""
    pass


class TenantAlreadyResolved(TenantsError):
    """A request's tenant context was bound a second time."""
    pass
