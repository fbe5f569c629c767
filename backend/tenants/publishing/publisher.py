"""
Copies bundled files into the host application.

MigrationPublisher executes a PublishPlan (one file copy per new entry) and
publishes the configuration template. Files already present at their
destination are kept unless ``force`` is set.
"""

import logging
import os
import shutil
from typing import List

from tenants.publishing.planner import PublishPlan

logger = logging.getLogger(__name__)

PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Bundled migration stubs (Alembic revision scripts on the "tenants" branch)
STUB_DIRECTORY = os.path.join(PACKAGE_DIR, 'database', 'migrations')

# Bundled configuration template
CONFIG_TEMPLATE = os.path.join(PACKAGE_DIR, 'resources', 'tenants.cfg')


class MigrationPublisher:
    """Performs the file copies described by publish plans."""

    def publish(self, plan: PublishPlan, force: bool = False) -> List[str]:
        """
        Copy every stub of the plan to its destination.

        Args:
            plan: The plan to execute
            force: Overwrite destinations that already exist

        Returns:
            List of destination paths written
        """
        written = []
        for entry in plan:
            if self._copy(entry.stub.path, entry.destination, force):
                written.append(entry.destination)

        logger.info(f"Published {len(written)} of {len(plan)} migration(s)")
        return written

    def publish_config(self, destination_directory: str, force: bool = False) -> List[str]:
        """
        Copy the configuration template into a directory (usually the instance folder).

        Args:
            destination_directory: Target directory, created if needed
            force: Overwrite an existing file

        Returns:
            List with the written path, or empty if nothing was written
        """
        destination = os.path.join(destination_directory, os.path.basename(CONFIG_TEMPLATE))
        if self._copy(CONFIG_TEMPLATE, destination, force):
            return [destination]
        return []

    def _copy(self, source: str, destination: str, force: bool) -> bool:
        if os.path.exists(destination) and not force:
            logger.debug(f"Skipping {destination}: already exists")
            return False

        destination_dir = os.path.dirname(destination)
        if destination_dir:
            os.makedirs(destination_dir, exist_ok=True)

        shutil.copyfile(source, destination)
        logger.info(f"Published {os.path.basename(source)} -> {destination}")
        return True
