"""
Test Configuration and Fixtures

This module provides pytest fixtures and configuration for the test suite.

Key fixtures:
- db: Flask-SQLAlchemy instance of the host application
- app: Flask application with the tenants add-on and a migrated registry
- client: Flask test client for making HTTP requests
- acme, globex: Sample tenants
- migrations_dir: Temporary Flask-Migrate directory
- app_factory: create_app, for tests building their own application
"""

import pytest
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

from tenants import Tenants, current_tenant
from tenants.models import Base, Tenant


def create_app(db, config_overrides=None):
    """
    Create a host Flask application for testing.

    Args:
        db: Flask-SQLAlchemy instance
        config_overrides: Extra config values applied before init_app

    Returns:
        Flask application with the tenants add-on initialized
    """
    app = Flask(__name__)
    app.config.update(
        TESTING=True,
        SQLALCHEMY_DATABASE_URI='sqlite:///:memory:',
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        TENANTS_DOMAINS=['example.com', 'www.example.com', 'localhost'],
    )
    app.config.update(config_overrides or {})

    db.init_app(app)
    Tenants(app, db)

    @app.route('/whoami')
    def whoami():
        return jsonify({'tenant': current_tenant.slug if current_tenant else None})

    return app


@pytest.fixture(scope='function')
def db():
    """Fresh Flask-SQLAlchemy instance for each test."""
    return SQLAlchemy()


@pytest.fixture(scope='function')
def app_factory():
    """The create_app factory, for tests that build their own application."""
    return create_app


@pytest.fixture(scope='function')
def app_config():
    """Config overrides for the app fixture; override in a test module to change them."""
    return {}


@pytest.fixture(scope='function')
def app(db, app_config):
    """
    Create Flask application with the tenant registry table in place.

    Scope: function - each test gets an empty in-memory database
    """
    app = create_app(db, app_config)

    with app.app_context():
        Base.metadata.create_all(db.engine)
        yield app
        db.session.remove()
        Base.metadata.drop_all(db.engine)


@pytest.fixture(scope='function')
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def acme(app, db):
    """Active tenant reachable as acme.example.com or acme.io."""
    tenant = Tenant(name='Acme', domain='acme.io')
    db.session.add(tenant)
    db.session.commit()
    return tenant


@pytest.fixture(scope='function')
def globex(app, db):
    """Inactive tenant; must never be resolved."""
    tenant = Tenant(name='Globex', domain='globex.io', is_active=False)
    db.session.add(tenant)
    db.session.commit()
    return tenant


@pytest.fixture(scope='function')
def migrations_dir(tmp_path):
    """Empty Flask-Migrate directory."""
    directory = tmp_path / 'migrations'
    directory.mkdir()
    return directory
