"""
Publishing of bundled migration stubs and configuration into the host application.
"""

from tenants.publishing.planner import (
    MigrationPublishPlanner,
    MigrationStub,
    PublishedMigrationRecord,
    PublishPlan,
    PublishPlanEntry,
    build_publish_plan,
)
from tenants.publishing.publisher import CONFIG_TEMPLATE, STUB_DIRECTORY, MigrationPublisher

__all__ = [
    'MigrationPublishPlanner',
    'MigrationStub',
    'PublishedMigrationRecord',
    'PublishPlan',
    'PublishPlanEntry',
    'build_publish_plan',
    'CONFIG_TEMPLATE',
    'STUB_DIRECTORY',
    'MigrationPublisher',
]
