"""
``flask tenants`` command group.

Commands:
    publish   Copy migration stubs and the config template into the application
    migrate   Upgrade the database to the head of the tenants migration branch
    rollback  Downgrade the tenants migration branch to its base
"""

import logging

import click
from flask import current_app
from flask.cli import AppGroup

from tenants.extensions import get_state
from tenants.publishing.publisher import MigrationPublisher
from tenants.utils.migrations import BRANCH

logger = logging.getLogger(__name__)

tenants_cli = AppGroup('tenants', help='Tenant add-on commands.')


@tenants_cli.command('publish')
@click.option(
    '--tag',
    type=click.Choice(['all', 'migrations', 'config']),
    default='all',
    show_default=True,
    help='What to publish',
)
@click.option('--force', is_flag=True, help='Overwrite files that already exist')
def publish_command(tag: str, force: bool) -> None:
    """Publish migration stubs and the configuration template."""
    state = get_state()
    publisher = MigrationPublisher()
    written = []

    if tag in ('all', 'config'):
        written.extend(publisher.publish_config(current_app.instance_path, force=force))

    if tag in ('all', 'migrations'):
        if state.config['TENANTS_AUTOLOAD_MIGRATIONS']:
            click.echo('Migrations are loaded from the package (TENANTS_AUTOLOAD_MIGRATIONS), not published.')
        else:
            plan = state.make_planner().plan()
            written.extend(publisher.publish(plan, force=force))

    if not written:
        click.echo('Nothing to publish.')
        return

    for path in written:
        click.echo(f'Published: {path}')


@tenants_cli.command('migrate')
def migrate_command() -> None:
    """Run the tenants migrations (published or autoloaded)."""
    from flask_migrate import upgrade

    directory = get_state().migrations_directory
    logger.info(f"Upgrading {BRANCH} migrations in {directory}")
    upgrade(directory=directory, revision=f'{BRANCH}@head')


@tenants_cli.command('rollback')
def rollback_command() -> None:
    """Roll back every tenants migration."""
    from flask_migrate import downgrade

    directory = get_state().migrations_directory
    logger.info(f"Rolling back {BRANCH} migrations in {directory}")
    downgrade(directory=directory, revision=f'{BRANCH}@base')
