"""
Flask extension wiring for the tenants add-on.

Usage:
    db = SQLAlchemy()
    migrate = Migrate()
    tenants = Tenants()

    def create_app():
        app = Flask(__name__)
        db.init_app(app)
        migrate.init_app(app, db)
        tenants.init_app(app, db)
        return app

``init_app`` reads ``tenants.cfg`` from the instance folder, merges the default
``TENANTS_*`` settings, registers a ``before_request`` hook that binds a fresh
TenantContext to ``flask.g`` and resolves the active tenant, and adds the
``flask tenants`` command group.

Call it after ``migrate.init_app`` so the registry tables are hidden from the
host's autogenerate and the tenants revisions are found by ``flask db``.
"""

import logging
import os
from typing import Optional

from flask import current_app, g, request
from werkzeug.utils import import_string

from tenants.config import load_instance_config, merge_defaults
from tenants.publishing.planner import MigrationPublishPlanner
from tenants.publishing.publisher import STUB_DIRECTORY
from tenants.resolution.context import G_ATTRIBUTE, TenantContext
from tenants.resolution.resolver import TenantContextResolver
from tenants.resolution.strategies import get_resolver_class
from tenants.utils.database import RegistryInspector
from tenants.utils.migrations import install_migrate_hooks

logger = logging.getLogger(__name__)


class TenantsState:
    """
    Per-application state, stored as ``app.extensions['tenants']``.

    Attributes:
        db: The host's Flask-SQLAlchemy instance
        tenant_model: Tenant model class used by the strategies
        resolver_class: Configured BaseTenantResolver subclass
        resolver: TenantContextResolver shared by all requests of the app
    """

    def __init__(self, app, db):
        self.app = app
        self.db = db
        self.config = app.config

        model = app.config['TENANTS_MODEL']
        self.tenant_model = import_string(model) if isinstance(model, str) else model
        self.resolver_class = get_resolver_class(app.config['TENANTS_RESOLVER'])

        inspector = RegistryInspector.from_flask_sqlalchemy(db)
        self.resolver = TenantContextResolver(
            strategy_factory=self.make_strategy,
            store_probe=inspector.ping,
            table_exists=inspector.has_table,
            registry_table=app.config['TENANTS_TABLE'],
            domains=app.config['TENANTS_DOMAINS'],
            on_strategy_failure=self.rollback_session,
        )

    def make_strategy(self):
        return self.resolver_class(self.db.session, self.tenant_model, self.config)

    def rollback_session(self) -> None:
        """Discard the transaction a failed strategy may have left aborted."""
        self.db.session.rollback()

    def make_context(self, host: Optional[str]) -> TenantContext:
        return TenantContext(self.resolver, host)

    @property
    def migrations_directory(self) -> str:
        """
        The host's migrations directory.

        TENANTS_MIGRATIONS_DIRECTORY if set, else the directory Flask-Migrate
        was configured with, else ``migrations``.
        """
        directory = self.config.get('TENANTS_MIGRATIONS_DIRECTORY')
        if directory:
            return str(directory)

        migrate_state = self.app.extensions.get('migrate')
        if migrate_state is not None:
            return str(migrate_state.directory)
        return 'migrations'

    @property
    def migrations_destination(self) -> str:
        """Namespace directory the stubs are published into."""
        return os.path.join(
            self.migrations_directory,
            'versions',
            self.config['TENANTS_MIGRATIONS_NAMESPACE'],
        )

    def make_planner(self) -> MigrationPublishPlanner:
        return MigrationPublishPlanner(STUB_DIRECTORY, self.migrations_destination)


class Tenants:
    """Flask extension resolving the active tenant of every request."""

    def __init__(self, app=None, db=None):
        """
        Args:
            app: Flask application instance (optional, can be set later with init_app)
            db: The host's Flask-SQLAlchemy instance
        """
        self.db = db

        if app is not None:
            self.init_app(app, db)

    def init_app(self, app, db=None):
        """
        Initialize the add-on for an application.

        Args:
            app: Flask application instance
            db: Flask-SQLAlchemy instance; defaults to the one registered on the app

        Raises:
            RuntimeError: If no Flask-SQLAlchemy instance is available
            ValueError: If TENANTS_RESOLVER names no resolver class
        """
        db = db or self.db or app.extensions.get('sqlalchemy')
        if db is None:
            raise RuntimeError("Tenants requires Flask-SQLAlchemy: call db.init_app(app) first")

        load_instance_config(app.config, app.instance_path)
        merge_defaults(app.config)

        state = TenantsState(app, db)
        app.extensions['tenants'] = state

        migrate_state = app.extensions.get('migrate')
        if migrate_state is not None:
            install_migrate_hooks(migrate_state)
        elif app.config['TENANTS_AUTOLOAD_MIGRATIONS']:
            logger.warning("TENANTS_AUTOLOAD_MIGRATIONS is set but Flask-Migrate is not initialized on this app")

        app.before_request(bind_tenant_context)

        from tenants.cli import tenants_cli
        app.cli.add_command(tenants_cli)

        app.logger.info(
            f"Tenants initialized: resolver={state.resolver_class.__name__}, "
            f"table={app.config['TENANTS_TABLE']}, domains={sorted(state.resolver.domains)}"
        )


def get_state() -> TenantsState:
    """Return the add-on state of the current application."""
    return current_app.extensions['tenants']


def bind_tenant_context() -> None:
    """
    Create this request's TenantContext and resolve the active tenant.

    Registered as a ``before_request`` hook; never raises and never
    short-circuits the request.
    """
    context = get_state().make_context(request.host)
    setattr(g, G_ATTRIBUTE, context)

    tenant = context.tenant
    logger.debug(f"Request host {context.host} resolved to tenant {tenant!r}")
