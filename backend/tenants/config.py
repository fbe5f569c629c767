"""
Default configuration for the tenants add-on.

Values are read from environment variables with sensible defaults and merged
into the host application's ``app.config`` by ``Tenants.init_app``.

Precedence, highest first:
1. Keys the host already set on ``app.config``
2. ``tenants.cfg`` in the instance folder (written by ``flask tenants publish``)
3. DefaultConfig
"""

import logging
import os
from typing import Dict, Any

from flask import Config

logger = logging.getLogger(__name__)

CONFIG_FILENAME = 'tenants.cfg'


def _split_list(value: str) -> list:
    return [item.strip().lower() for item in value.split(',') if item.strip()]


class DefaultConfig:
    """Defaults for every ``TENANTS_*`` setting."""

    # Hosts that belong to the application itself and are never tenant-scoped
    TENANTS_DOMAINS = _split_list(os.environ.get('TENANTS_DOMAINS', ''))

    # Tenant registry
    TENANTS_TABLE = os.environ.get('TENANTS_TABLE', 'tenants')
    TENANTS_MODEL = os.environ.get('TENANTS_MODEL', 'tenants.models.tenant.Tenant')

    # Resolution strategy: a registered name or a dotted path to a resolver class
    TENANTS_RESOLVER = os.environ.get('TENANTS_RESOLVER', 'subdomain')
    TENANTS_HEADER = os.environ.get('TENANTS_HEADER', 'X-Tenant')

    # Migration publishing; None means the Flask-Migrate directory
    TENANTS_MIGRATIONS_DIRECTORY = os.environ.get('TENANTS_MIGRATIONS_DIRECTORY')
    TENANTS_MIGRATIONS_NAMESPACE = os.environ.get('TENANTS_MIGRATIONS_NAMESPACE', 'tenants')

    # Run the bundled migrations from the package instead of publishing them
    TENANTS_AUTOLOAD_MIGRATIONS = os.environ.get('TENANTS_AUTOLOAD_MIGRATIONS', 'False').lower() == 'true'


def get_defaults() -> Dict[str, Any]:
    """
    Collect the default settings as a flat dictionary.

    Returns:
        Mapping of every upper-case attribute of DefaultConfig to its value
    """
    return {
        key: getattr(DefaultConfig, key)
        for key in dir(DefaultConfig)
        if key.isupper()
    }


def load_instance_config(config, instance_path: str) -> bool:
    """
    Fill ``TENANTS_*`` keys from ``tenants.cfg`` in the instance folder.

    Keys already present in config are left untouched.

    Args:
        config: Flask ``app.config``
        instance_path: The application's instance folder

    Returns:
        True if the file was found and read
    """
    published = Config(instance_path)
    if not published.from_pyfile(CONFIG_FILENAME, silent=True):
        return False

    for key, value in published.items():
        if key.startswith('TENANTS_'):
            config.setdefault(key, value)

    logger.debug(f"Loaded {os.path.join(instance_path, CONFIG_FILENAME)}")
    return True


def merge_defaults(config) -> None:
    """
    Copy default settings into a Flask config without overriding host values.

    A comma-separated ``TENANTS_DOMAINS`` string is split into a list.

    Args:
        config: Flask ``app.config`` (any mutable mapping)
    """
    for key, value in get_defaults().items():
        if isinstance(value, list):
            value = list(value)
        config.setdefault(key, value)

    if isinstance(config['TENANTS_DOMAINS'], str):
        config['TENANTS_DOMAINS'] = _split_list(config['TENANTS_DOMAINS'])
