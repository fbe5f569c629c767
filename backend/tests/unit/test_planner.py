"""
Unit Tests for Migration Publish Planning

Tests for tenants.publishing.planner:
- Filename splitting (sequence token / descriptor / offset)
- Descriptor matching against already-published migrations
- New sequence tokens for unmatched stubs
- MigrationPublishPlanner directory handling
"""

import os
from datetime import datetime, timedelta

import pytest

from tenants.publishing.planner import (
    MigrationPublishPlanner,
    MigrationStub,
    PublishedMigrationRecord,
    PublishPlan,
    build_publish_plan,
)
from tenants.publishing.publisher import STUB_DIRECTORY

NOW = datetime(2024, 3, 15, 10, 30, 0)
DEST = '/app/migrations/versions/tenants'


def stubs(*names):
    return [MigrationStub(os.path.join('/stubs', name)) for name in names]


def records(*names):
    return [PublishedMigrationRecord(os.path.join(DEST, name)) for name in names]


class TestMigrationFile:
    """Tests for filename splitting"""

    def test_sequence_and_descriptor(self):
        stub = MigrationStub('/stubs/2021_01_01_000000_create_widgets_table.py')

        assert stub.filename == '2021_01_01_000000_create_widgets_table.py'
        assert stub.sequence == '2021_01_01_000000'
        assert stub.descriptor == '_create_widgets_table.py'

    def test_offset_from_sequence_tail(self):
        assert MigrationStub('/s/2020_01_01_000002_x.py').offset == timedelta(seconds=2)
        assert MigrationStub('/s/2020_01_01_000130_x.py').offset == timedelta(seconds=130)

    def test_non_numeric_tail_has_no_offset(self):
        stub = MigrationStub('/s/XXXX_XX_XX_abcdef_create_x.py')
        assert stub.offset == timedelta(0)


class TestBuildPublishPlan:
    """Tests for the reconciliation algorithm"""

    def test_matches_by_descriptor_ignoring_sequence(self):
        """A stub maps to the published file with the same descriptor, unchanged"""
        plan = build_publish_plan(
            stubs('2021_01_01_000000_create_widgets_table.php'),
            records('2019_05_02_101112_create_widgets_table.php'),
            DEST,
            now=NOW,
        )

        entry = plan.entries[0]
        assert entry.matched is True
        assert entry.destination == os.path.join(DEST, '2019_05_02_101112_create_widgets_table.php')

    def test_unmatched_stubs_get_new_distinct_tokens(self):
        """Two never-published stubs get two new tokens and keep their descriptors"""
        plan = build_publish_plan(
            stubs('2020_01_01_000001_create_x.php', '2020_01_01_000002_create_y.php'),
            [],
            DEST,
            now=NOW,
        )

        first, second = [os.path.basename(entry.destination) for entry in plan]
        assert first == '2024_03_15_103001_create_x.php'
        assert second == '2024_03_15_103002_create_y.php'
        assert all(not entry.matched for entry in plan)

    def test_scenario_existing_match_exact(self):
        plan = build_publish_plan(
            stubs('2020_01_01_000001_create_x.php'),
            records('1999_12_31_235959_create_x.php'),
            DEST,
            now=NOW,
        )

        assert plan.as_mapping() == {
            '/stubs/2020_01_01_000001_create_x.php': os.path.join(DEST, '1999_12_31_235959_create_x.php'),
        }

    def test_new_tokens_strictly_increase_in_input_order(self):
        """Equal or decreasing offsets are bumped so the batch order is kept"""
        plan = build_publish_plan(
            stubs(
                '2020_01_01_000005_a.py',
                '2020_01_02_000005_b.py',
                '2020_01_03_000001_c.py',
            ),
            [],
            DEST,
            now=NOW,
        )

        tokens = [os.path.basename(entry.destination)[:17] for entry in plan]
        assert tokens == sorted(tokens)
        assert len(set(tokens)) == 3
        assert tokens[0] == '2024_03_15_103005'

    def test_new_token_avoids_existing_sequence(self):
        plan = build_publish_plan(
            stubs('2020_01_01_000001_create_y.py'),
            records('2024_03_15_103001_create_x.py'),
            DEST,
            now=NOW,
        )

        assert os.path.basename(plan.entries[0].destination) == '2024_03_15_103002_create_y.py'

    def test_first_match_wins(self):
        """Several published files share the descriptor: the first listed wins"""
        plan = build_publish_plan(
            stubs('2020_01_01_000001_create_x.py'),
            records('2021_01_01_000000_create_x.py', '2022_01_01_000000_create_x.py'),
            DEST,
            now=NOW,
        )

        assert plan.entries[0].destination.endswith('2021_01_01_000000_create_x.py')

    def test_mixed_matched_and_new(self):
        plan = build_publish_plan(
            stubs('2020_01_01_000001_create_x.py', '2020_01_01_000002_create_y.py'),
            records('2023_06_01_120000_create_x.py'),
            DEST,
            now=NOW,
        )

        assert [entry.matched for entry in plan] == [True, False]
        assert len(plan.matched) == 1
        assert len(plan.new) == 1
        assert plan.new[0].destination.endswith('_create_y.py')

    def test_replanning_published_output_is_idempotent(self):
        """Planning again against the first plan's output introduces no new tokens"""
        stub_list = stubs('2020_01_01_000001_create_x.py', '2020_01_01_000002_create_y.py')
        first = build_publish_plan(stub_list, [], DEST, now=NOW)

        published = [PublishedMigrationRecord(path) for path in first.as_mapping().values()]
        second = build_publish_plan(stub_list, published, DEST, now=NOW + timedelta(days=30))

        assert second.as_mapping() == first.as_mapping()
        assert all(entry.matched for entry in second)

    def test_empty_stub_list_gives_empty_plan(self):
        plan = build_publish_plan([], records('2020_01_01_000001_create_x.py'), DEST, now=NOW)

        assert isinstance(plan, PublishPlan)
        assert len(plan) == 0
        assert not plan


class TestMigrationPublishPlanner:
    """Tests for directory-backed planning"""

    def test_missing_stub_directory_is_a_no_op(self, tmp_path):
        planner = MigrationPublishPlanner(str(tmp_path / 'missing'), str(tmp_path / 'dest'))

        plan = planner.plan(now=NOW)

        assert len(plan) == 0
        assert plan.as_mapping() == {}

    def test_plans_from_directories(self, tmp_path):
        stub_dir = tmp_path / 'stubs'
        dest_dir = tmp_path / 'dest'
        stub_dir.mkdir()
        dest_dir.mkdir()
        (stub_dir / '2020_01_01_000002_create_y.py').write_text('# y')
        (stub_dir / '2020_01_01_000001_create_x.py').write_text('# x')
        (stub_dir / 'README.md').write_text('ignored')
        (dest_dir / '2022_02_02_020202_create_x.py').write_text('# published x')

        plan = MigrationPublishPlanner(str(stub_dir), str(dest_dir)).plan(now=NOW)

        assert [entry.stub.filename for entry in plan] == [
            '2020_01_01_000001_create_x.py',
            '2020_01_01_000002_create_y.py',
        ]
        assert plan.entries[0].destination == str(dest_dir / '2022_02_02_020202_create_x.py')
        assert plan.entries[1].destination == str(dest_dir / '2024_03_15_103002_create_y.py')

    def test_missing_destination_means_nothing_published(self, tmp_path):
        stub_dir = tmp_path / 'stubs'
        stub_dir.mkdir()
        (stub_dir / '2020_01_01_000001_create_x.py').write_text('# x')

        planner = MigrationPublishPlanner(str(stub_dir), str(tmp_path / 'dest'))

        assert planner.collect_published() == []
        assert len(planner.plan(now=NOW).new) == 1

    def test_published_records_are_sorted(self, tmp_path):
        dest_dir = tmp_path / 'dest'
        dest_dir.mkdir()
        for name in ('2022_01_01_000000_b.py', '2021_01_01_000000_a.py'):
            (dest_dir / name).write_text('')

        planner = MigrationPublishPlanner(str(tmp_path / 'stubs'), str(dest_dir))

        assert [record.filename for record in planner.collect_published()] == [
            '2021_01_01_000000_a.py',
            '2022_01_01_000000_b.py',
        ]


class TestBundledStubs:
    """The stubs shipped with the package follow the filename contract"""

    @pytest.fixture
    def bundled(self):
        return MigrationPublishPlanner(STUB_DIRECTORY, '/nowhere').collect_stubs()

    def test_stubs_are_bundled(self, bundled):
        assert [stub.descriptor for stub in bundled] == [
            '_create_tenants_table.py',
            '_create_tenantables_table.py',
        ]

    def test_sequence_tokens_parse_as_timestamps(self, bundled):
        for stub in bundled:
            datetime.strptime(stub.sequence, '%Y_%m_%d_%H%M%S')
