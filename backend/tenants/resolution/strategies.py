"""
Pluggable tenant resolution strategies.

A strategy answers one question, "which tenant does the current request
belong to?", through a zero-argument ``resolve()`` that returns a tenant or
None. Strategies read the current Flask ``request`` and query the configured
tenant model through the host's SQLAlchemy session.

Built-in strategies (registry name -> class):
    domain              -> DomainTenantResolver
    subdomain           -> SubdomainTenantResolver
    subdomain_or_domain -> SubdomainOrDomainTenantResolver
    header              -> HeaderTenantResolver

Custom strategies subclass BaseTenantResolver and are selected either by
registering them under a name or by their dotted path::

    app.config['TENANTS_RESOLVER'] = 'myapp.tenancy.CookieTenantResolver'
"""

import ipaddress
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Type, Union

from flask import request
from werkzeug.utils import import_string

from tenants.resolution.resolver import normalize_host

logger = logging.getLogger(__name__)


class BaseTenantResolver(ABC):
    """
    Base class for resolution strategies.

    Args:
        session: SQLAlchemy session used for registry lookups
        tenant_model: Model class exposing ``find_active_by_slug`` and
                      ``find_active_by_domain``
        config: The application config mapping
    """

    def __init__(self, session, tenant_model, config: Optional[Mapping[str, Any]] = None):
        self.session = session
        self.tenant_model = tenant_model
        self.config = config or {}

    @property
    def host(self) -> str:
        return normalize_host(request.host)

    @abstractmethod
    def resolve(self):
        """Return the tenant for the current request, or None."""


class DomainTenantResolver(BaseTenantResolver):
    """Match the request host against the tenants' dedicated domains."""

    def resolve(self):
        return self.tenant_model.find_active_by_domain(self.session, self.host)


class SubdomainTenantResolver(BaseTenantResolver):
    """Match the leftmost label of the request host against tenant slugs."""

    def resolve(self):
        slug = subdomain_of(self.host)
        if slug is None:
            return None
        return self.tenant_model.find_active_by_slug(self.session, slug)


class SubdomainOrDomainTenantResolver(BaseTenantResolver):
    """Try the subdomain first, then fall back to the dedicated domain."""

    def resolve(self):
        slug = subdomain_of(self.host)
        tenant = self.tenant_model.find_active_by_slug(self.session, slug) if slug else None
        return tenant or self.tenant_model.find_active_by_domain(self.session, self.host)


class HeaderTenantResolver(BaseTenantResolver):
    """Read the tenant slug from a request header (``TENANTS_HEADER``)."""

    def resolve(self):
        header_name = self.config.get('TENANTS_HEADER', 'X-Tenant')
        slug = (request.headers.get(header_name) or '').strip()
        if not slug:
            return None
        return self.tenant_model.find_active_by_slug(self.session, slug)


def subdomain_of(host: str) -> Optional[str]:
    """
    Extract the leftmost label of a host name.

    Returns None for single-label hosts ("localhost") and IP addresses.

    Examples:
        "acme.example.com" -> "acme"
        "acme.localhost" -> "acme"
        "127.0.0.1" -> None
    """
    if not host:
        return None
    try:
        ipaddress.ip_address(host.strip('[]'))
        return None
    except ValueError:
        pass

    labels = host.split('.')
    if len(labels) < 2 or not labels[0]:
        return None
    return labels[0]


RESOLVER_REGISTRY: Dict[str, Type[BaseTenantResolver]] = {
    'domain': DomainTenantResolver,
    'subdomain': SubdomainTenantResolver,
    'subdomain_or_domain': SubdomainOrDomainTenantResolver,
    'header': HeaderTenantResolver,
}


def register_resolver(name: str, resolver_class: Type[BaseTenantResolver]) -> None:
    """
    Register a strategy under a short name usable in ``TENANTS_RESOLVER``.

    Raises:
        TypeError: If resolver_class does not subclass BaseTenantResolver
    """
    if not (isinstance(resolver_class, type) and issubclass(resolver_class, BaseTenantResolver)):
        raise TypeError(f"{resolver_class!r} is not a BaseTenantResolver subclass")
    RESOLVER_REGISTRY[name] = resolver_class
    logger.debug(f"Registered tenant resolver '{name}': {resolver_class.__name__}")


def get_resolver_class(identifier: Union[str, Type[BaseTenantResolver]]) -> Type[BaseTenantResolver]:
    """
    Select the strategy class named by configuration.

    Args:
        identifier: Registry name, dotted import path, or the class itself

    Returns:
        The resolver class

    Raises:
        ValueError: If the identifier names no usable resolver class
    """
    if isinstance(identifier, type):
        resolver_class = identifier
    elif identifier in RESOLVER_REGISTRY:
        return RESOLVER_REGISTRY[identifier]
    else:
        try:
            resolver_class = import_string(identifier)
        except ImportError as e:
            raise ValueError(f"Unknown tenant resolver: {identifier!r}") from e

    if not (isinstance(resolver_class, type) and issubclass(resolver_class, BaseTenantResolver)):
        raise ValueError(f"Tenant resolver {identifier!r} does not subclass BaseTenantResolver")
    return resolver_class
