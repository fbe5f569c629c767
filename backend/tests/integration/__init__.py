"""
Integration Tests Package

This package contains tests that run the extension inside a Flask application:
- Request flow: tenant resolution through before_request and current_tenant
- CLI: flask tenants publish / migrate / rollback

Integration tests use an in-memory SQLite database and temporary directories.
"""
