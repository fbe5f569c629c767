"""
Migration publish planning.

Bundled migration stubs are published into the host's migrations directory
under a namespace (``migrations/versions/tenants/``). Every filename starts
with a 17-character sequence token (``2020_01_01_000001``) followed by a
descriptor (``_create_tenants_table.py``).

Re-publishing must never duplicate a migration, so stubs are matched against
the already-published files by descriptor, ignoring both sequence tokens. A
matched stub keeps the published filename; an unmatched stub gets a new
token built from the current time, offset by the last six characters of its
own token so a batch keeps its original order.
"""

import glob
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

SEQUENCE_LENGTH = 17
SEQUENCE_FORMAT = '%Y_%m_%d_%H%M%S'
OFFSET_LENGTH = 6


@dataclass(frozen=True)
class MigrationFile:
    """A migration filename split into sequence token and descriptor."""

    path: str

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def sequence(self) -> str:
        return self.filename[:SEQUENCE_LENGTH]

    @property
    def descriptor(self) -> str:
        return self.filename[SEQUENCE_LENGTH:]


class MigrationStub(MigrationFile):
    """A bundled, not-yet-installed migration template."""

    @property
    def offset(self) -> timedelta:
        """
        Seconds encoded by the last six characters of the sequence token.

        "2020_01_01_000002" -> 2 seconds. A non-numeric tail counts as zero.
        """
        tail = self.sequence[-OFFSET_LENGTH:]
        try:
            return timedelta(seconds=int(tail))
        except ValueError:
            logger.warning(f"Stub {self.filename} has a non-numeric sequence tail '{tail}', using no offset")
            return timedelta(0)


class PublishedMigrationRecord(MigrationFile):
    """A migration already present in the destination namespace directory."""


@dataclass(frozen=True)
class PublishPlanEntry:
    """
    Where one stub goes.

    Attributes:
        stub: The bundled stub
        destination: Full destination path
        matched: True if destination is an already-published file
    """

    stub: MigrationStub
    destination: str
    matched: bool


class PublishPlan:
    """Ordered list of PublishPlanEntry, one per stub."""

    def __init__(self, entries: Optional[Iterable[PublishPlanEntry]] = None):
        self.entries: List[PublishPlanEntry] = list(entries or [])

    def __iter__(self) -> Iterator[PublishPlanEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    @property
    def matched(self) -> List[PublishPlanEntry]:
        return [entry for entry in self.entries if entry.matched]

    @property
    def new(self) -> List[PublishPlanEntry]:
        return [entry for entry in self.entries if not entry.matched]

    def as_mapping(self) -> Dict[str, str]:
        """Return ``{stub path: destination path}`` in plan order."""
        return {entry.stub.path: entry.destination for entry in self.entries}

    def __repr__(self) -> str:
        return f"<PublishPlan entries={len(self.entries)} new={len(self.new)}>"


def build_publish_plan(
    stubs: Iterable[MigrationStub],
    published: Iterable[PublishedMigrationRecord],
    destination_directory: str,
    now: Optional[datetime] = None,
) -> PublishPlan:
    """
    Map every stub to its destination filename.

    Stubs are handled in the given order. For each one, the first published
    record whose filename contains the stub's descriptor wins. Unmatched stubs
    get ``now + offset`` as sequence token; within one plan those tokens are
    strictly increasing and never reuse a token already present in the
    destination directory.

    Args:
        stubs: Bundled stubs, in publishing order
        published: Records already in the destination directory, in match priority order
        destination_directory: Directory the stubs are published into
        now: Reference time for new tokens (defaults to the current local time)

    Returns:
        PublishPlan with one entry per stub
    """
    published = list(published)
    now = now or datetime.now()

    used_sequences = {record.sequence for record in published}
    last_synthesized: Optional[datetime] = None
    entries = []

    for stub in stubs:
        match = next(
            (record for record in published
             if stub.descriptor and stub.descriptor in record.filename),
            None,
        )

        if match is not None:
            entries.append(PublishPlanEntry(stub=stub, destination=match.path, matched=True))
            continue

        moment = (now + stub.offset).replace(microsecond=0)
        if last_synthesized is not None and moment <= last_synthesized:
            moment = last_synthesized + timedelta(seconds=1)
        while moment.strftime(SEQUENCE_FORMAT) in used_sequences:
            moment += timedelta(seconds=1)

        sequence = moment.strftime(SEQUENCE_FORMAT)
        used_sequences.add(sequence)
        last_synthesized = moment

        destination = os.path.join(destination_directory, sequence + stub.descriptor)
        entries.append(PublishPlanEntry(stub=stub, destination=destination, matched=False))

    return PublishPlan(entries)


class MigrationPublishPlanner:
    """
    Builds publish plans from a stub directory and a destination directory.

    Reading the two directory listings is the only I/O performed here; the
    copy itself is left to MigrationPublisher.

    Args:
        stub_directory: Directory holding the bundled stubs
        destination_directory: Namespace directory inside the host's migrations
        pattern: Glob pattern selecting migration files
    """

    def __init__(self, stub_directory: str, destination_directory: str, pattern: str = '*.py'):
        self.stub_directory = stub_directory
        self.destination_directory = destination_directory
        self.pattern = pattern

    def collect_stubs(self) -> List[MigrationStub]:
        """List bundled stubs sorted by filename; empty if the directory is missing."""
        return [MigrationStub(path) for path in self._glob(self.stub_directory)]

    def collect_published(self) -> List[PublishedMigrationRecord]:
        """List published migrations sorted by filename; empty if none yet."""
        return [PublishedMigrationRecord(path) for path in self._glob(self.destination_directory)]

    def plan(self, now: Optional[datetime] = None) -> PublishPlan:
        """
        Build the publish plan for the current state of both directories.

        Args:
            now: Reference time for new sequence tokens

        Returns:
            PublishPlan (empty when there are no stubs)
        """
        stubs = self.collect_stubs()
        if not stubs:
            logger.info(f"No migration stubs found in {self.stub_directory}, nothing to publish")
            return PublishPlan()

        plan = build_publish_plan(
            stubs,
            self.collect_published(),
            self.destination_directory,
            now=now,
        )
        logger.info(
            f"Publish plan for {self.destination_directory}: "
            f"{len(plan.new)} new, {len(plan.matched)} already published"
        )
        return plan

    def _glob(self, directory: str) -> List[str]:
        if not os.path.isdir(directory):
            return []
        return sorted(
            path for path in glob.glob(os.path.join(directory, self.pattern))
            if os.path.isfile(path)
        )
