"""
Request-scoped tenant context.

A fresh TenantContext is stored on ``flask.g`` for every request. It is a
write-once cell: the tenant is resolved on first read and the same value
(None included) is returned for the rest of the request.
"""

from typing import Optional

from flask import g, has_app_context
from werkzeug.local import LocalProxy

from tenants.errors import TenantAlreadyResolved

_UNRESOLVED = object()

G_ATTRIBUTE = 'tenant_context'


class TenantContext:
    """
    Holds the tenant bound to one request.

    Args:
        resolver: TenantContextResolver used on first read
        host: The request host
    """

    def __init__(self, resolver, host: Optional[str]):
        self.resolver = resolver
        self.host = host
        self._tenant = _UNRESOLVED

    @property
    def is_resolved(self) -> bool:
        return self._tenant is not _UNRESOLVED

    @property
    def tenant(self):
        """The active tenant, or None. Resolved at most once."""
        if not self.is_resolved:
            self.bind(self.resolver.resolve(self.host))
        return self._tenant

    def bind(self, tenant) -> None:
        """
        Bind the tenant for this request.

        Raises:
            TenantAlreadyResolved: If a tenant (or None) was already bound
        """
        if self.is_resolved:
            raise TenantAlreadyResolved(f"Tenant for host {self.host} is already resolved")
        self._tenant = tenant

    def __repr__(self) -> str:
        state = repr(self._tenant) if self.is_resolved else 'unresolved'
        return f"<TenantContext host={self.host} tenant={state}>"


def get_tenant_context() -> Optional[TenantContext]:
    """Return the current request's TenantContext, or None outside a request."""
    if not has_app_context():
        return None
    return g.get(G_ATTRIBUTE)


def get_current_tenant():
    """
    Return the active tenant of the current request.

    Returns None when no tenant is resolvable, and outside of requests
    (CLI commands, background jobs). Callers treat None as a normal state.
    """
    context = get_tenant_context()
    return context.tenant if context is not None else None


current_tenant = LocalProxy(get_current_tenant)
