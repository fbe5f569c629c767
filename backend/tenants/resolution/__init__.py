"""
Active-tenant resolution: request-scoped context, resolver and strategies.
"""

from tenants.resolution.context import (
    TenantContext,
    current_tenant,
    get_current_tenant,
    get_tenant_context,
)
from tenants.resolution.resolver import TenantContextResolver, normalize_host
from tenants.resolution.strategies import (
    RESOLVER_REGISTRY,
    BaseTenantResolver,
    DomainTenantResolver,
    HeaderTenantResolver,
    SubdomainOrDomainTenantResolver,
    SubdomainTenantResolver,
    get_resolver_class,
    register_resolver,
)

__all__ = [
    'TenantContext',
    'current_tenant',
    'get_current_tenant',
    'get_tenant_context',
    'TenantContextResolver',
    'normalize_host',
    'RESOLVER_REGISTRY',
    'BaseTenantResolver',
    'DomainTenantResolver',
    'HeaderTenantResolver',
    'SubdomainOrDomainTenantResolver',
    'SubdomainTenantResolver',
    'get_resolver_class',
    'register_resolver',
]
