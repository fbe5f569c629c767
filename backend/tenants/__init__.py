"""
Tenants add-on for Flask applications.

Resolves the active tenant of every request (by subdomain, domain, header, or
a custom strategy) and publishes the tenant registry migrations into the host
application's Flask-Migrate directory without duplicating them.

Usage:
    from tenants import Tenants, current_tenant

    tenants = Tenants()
    tenants.init_app(app, db)

    @app.route('/')
    def index():
        return current_tenant.name if current_tenant else 'main site'
"""

from tenants.extensions import Tenants
from tenants.resolution.context import current_tenant, get_current_tenant

__all__ = [
    'Tenants',
    'current_tenant',
    'get_current_tenant',
]

__version__ = '1.0.0'
