"""
Integration with the host application's Flask-Migrate setup.

The registry tables live in the host database but not in the host's
metadata, and their revisions form a separate ``tenants`` branch with its own
base. To keep the host's ``flask db`` commands working with both:

- include_object hides the registry tables from autogenerate, so it never
  renders ``drop_table('tenants')``
- process_revision_directives bases new host revisions on the host's own
  head instead of failing on the second head
- configure_alembic lets Alembic find the published revisions under
  ``versions/<namespace>/``, or the bundled ones in the package when
  ``TENANTS_AUTOLOAD_MIGRATIONS`` is set

The first two are installed into ``app.extensions['migrate'].configure_args``,
which Flask-Migrate's ``env.py`` passes to ``context.configure``; the last is
registered with ``Migrate.configure``.
"""

import logging
import os

from flask import current_app

from tenants.models import Base
from tenants.publishing.publisher import STUB_DIRECTORY

logger = logging.getLogger(__name__)

BRANCH = 'tenants'

# Alembic's path_separator values
PATH_SEPARATORS = {
    'space': ' ',
    'newline': '\n',
    'os': os.pathsep,
    ':': ':',
    ';': ';',
}


def is_registry_table(name: str) -> bool:
    return name in Base.metadata.tables


def make_include_object(host_include_object=None):
    """
    Build an Alembic ``include_object`` hook skipping the registry tables.

    Args:
        host_include_object: The host's own hook, consulted for everything else
    """
    def include_object(object_, name, type_, reflected, compare_to):
        if type_ == 'table' and is_registry_table(name):
            return False
        if host_include_object is not None:
            return host_include_object(object_, name, type_, reflected, compare_to)
        return True

    include_object.tenants_hook = True
    return include_object


def make_process_revision_directives(host_hook=None):
    """
    Build an Alembic ``process_revision_directives`` hook.

    New revisions requested on ``head`` are based on the host's head. Without
    a host hook, empty autogenerated revisions are dropped the way
    Flask-Migrate's ``env.py`` does.

    Args:
        host_hook: The host's own hook, run afterwards
    """
    def process_revision_directives(context, revision, directives):
        if host_hook is None and _is_empty_autogenerate(context, directives):
            directives[:] = []
            logger.info('No changes in schema detected.')
            return

        for script in directives:
            if script.head == 'head':
                base_on_host_head(context, script)

        if host_hook is not None:
            host_hook(context, revision, directives)

    process_revision_directives.tenants_hook = True
    return process_revision_directives


def _is_empty_autogenerate(context, directives) -> bool:
    if not directives:
        return False
    cmd_opts = getattr(context.config, 'cmd_opts', None)
    return getattr(cmd_opts, 'autogenerate', False) and directives[0].upgrade_ops.is_empty()


def host_heads(script_directory) -> list:
    """Return the heads that are not on the tenants branch."""
    return [
        head for head in script_directory.get_heads()
        if BRANCH not in script_directory.get_revision(head).branch_labels
    ]


def base_on_host_head(context, script) -> None:
    """
    Point a new revision at the host's head.

    With one host head, that head is used. With none (only the tenants
    branch exists yet) the revision starts a new base in the host's own
    versions directory. Several host heads are left for Alembic to report.
    """
    script_directory = context.script
    heads = script_directory.get_heads()
    hosts = host_heads(script_directory)
    if len(hosts) == len(heads):
        return

    if len(hosts) == 1:
        script.head = hosts[0]
    elif not hosts:
        script.head = 'base'
        if script.version_path is None and script_directory.version_locations:
            script.version_path = host_version_location(script_directory)
    else:
        return

    logger.info(f"Basing new revision on {script.head} instead of the {BRANCH} branch")


def host_version_location(script_directory) -> str:
    stubs = os.path.abspath(STUB_DIRECTORY)
    for location in script_directory.version_locations:
        if os.path.abspath(location) != stubs:
            return location
    return os.path.join(script_directory.dir, 'versions')


def add_version_location(config, path: str) -> None:
    """
    Append a directory to the ``version_locations`` of an Alembic config.

    When the host has no explicit locations, its default ``versions``
    directory is kept first and ``path_separator`` is set to ``os``.
    """
    locations = config.get_main_option('version_locations')
    separator = config.get_main_option('path_separator') or config.get_main_option('version_path_separator')

    if not locations:
        locations = os.path.join(config.get_main_option('script_location'), 'versions')
        if separator is None:
            separator = 'os'
            config.set_main_option('path_separator', separator)

    joiner = PATH_SEPARATORS.get(separator, ' ')
    if path in locations.split(joiner):
        return
    config.set_main_option('version_locations', joiner.join([locations, path]).replace('%', '%%'))


def configure_alembic(config):
    """
    ``Migrate.configure`` callback adding the tenants revisions to the search path.

    Args:
        config: Alembic Config built by Flask-Migrate

    Returns:
        The same config
    """
    state = current_app.extensions.get('tenants')
    if state is None:
        return config

    if state.config['TENANTS_AUTOLOAD_MIGRATIONS']:
        add_version_location(config, STUB_DIRECTORY)
        return config

    script_location = config.get_main_option('script_location')
    if script_location:
        namespace_dir = os.path.join(script_location, 'versions', state.config['TENANTS_MIGRATIONS_NAMESPACE'])
        if os.path.isdir(namespace_dir):
            config.set_main_option('recursive_version_locations', 'true')
    return config


def install_migrate_hooks(migrate_state) -> None:
    """
    Install the hooks into a Flask-Migrate ``app.extensions['migrate']`` entry.

    Hooks the host configured itself are wrapped, not replaced. Installing
    twice is a no-op.

    Args:
        migrate_state: ``app.extensions['migrate']``
    """
    args = migrate_state.configure_args

    include_object = args.get('include_object')
    if not getattr(include_object, 'tenants_hook', False):
        args['include_object'] = make_include_object(include_object)

    directives_hook = args.get('process_revision_directives')
    if not getattr(directives_hook, 'tenants_hook', False):
        args['process_revision_directives'] = make_process_revision_directives(directives_hook)

    migrate = migrate_state.migrate
    if configure_alembic not in migrate.configure_callbacks:
        migrate.configure(configure_alembic)
