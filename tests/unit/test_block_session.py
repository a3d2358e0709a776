"""
Unit tests for BlockSession.

Exercises optimistic toggling, wholesale snapshot replacement, the
non-persisting mode, write-failure handling and subscription teardown
against in-memory stores.
"""

import logging

import pytest

from habittracker.exceptions import BlockNotLoadedError, DocumentStoreError, NotAuthenticatedError
from habittracker.models.block import Block
from habittracker.models.cell import CellStatus
from habittracker.models.mood import Mood
from habittracker.services.block_session import BlockSession

from tests.conftest import TEST_COLLECTION, TEST_USER_ID


@pytest.fixture
def session(one_row_spec, memory_store):
    with BlockSession(one_row_spec, memory_store, TEST_COLLECTION, TEST_USER_ID) as session:
        yield session


class TestBlockSession:
    """Test cases for a synced block session."""

    def test_starts_all_blank(self, session):
        assert session.is_open
        assert session.block == Block.blank(session.label, 1)

    def test_toggle_cycle_scenario(self, session):
        for _ in range(3):
            session.toggle(0)
        assert session.block.cells[0] == CellStatus.BLANK

        session.toggle(0)
        summary = session.block.row_summary(0)
        assert (summary.tick_count, summary.cross_count) == (1, 0)
        assert summary.mood == Mood.PLEASED

        for index in range(1, 7):
            session.toggle(index)
        summary = session.block.row_summary(0)
        assert (summary.tick_count, summary.cross_count) == (7, 0)
        assert summary.mood == Mood.HAPPY

    def test_toggle_persists_whole_block(self, session, memory_store):
        session.toggle(3)

        document = memory_store.get_document(TEST_COLLECTION, TEST_USER_ID)
        assert document[session.label] == [c.value for c in session.block.cells]
        assert document[session.label][3] == "tick"

    def test_toggle_returns_new_block(self, session):
        before = session.block
        after = session.toggle(0)

        assert after is session.block
        assert before.cells[0] == CellStatus.BLANK

    def test_toggle_out_of_range(self, session, memory_store):
        with pytest.raises(IndexError):
            session.toggle(28)

        assert memory_store.get_document(TEST_COLLECTION, TEST_USER_ID) is None

    def test_loads_existing_document(self, one_row_spec, memory_store):
        codes = ["cross"] * 9 + ["blank"] * 19
        memory_store.merge_write(TEST_COLLECTION, TEST_USER_ID, {one_row_spec.label: codes})

        with BlockSession(one_row_spec, memory_store, TEST_COLLECTION, TEST_USER_ID) as session:
            assert session.block.row_summary(0).mood == Mood.CONCERNED

    def test_remote_snapshot_replaces_block(self, session, memory_store):
        session.toggle(0)

        remote = ["cross"] * 14 + ["blank"] * 14
        memory_store.merge_write(TEST_COLLECTION, TEST_USER_ID, {session.label: remote})

        assert [c.value for c in session.block.cells] == remote
        assert session.block.row_summary(0).mood == Mood.DISCOURAGED

    def test_wrong_length_snapshot_resets_to_blank(self, session, memory_store):
        session.toggle(0)

        memory_store.merge_write(TEST_COLLECTION, TEST_USER_ID, {session.label: ["tick"] * 56})

        assert session.block.size == 28
        assert set(session.block.cells) == {CellStatus.BLANK}

    def test_snapshot_without_label_resets_to_blank(self, session, memory_store):
        session.toggle(0)

        memory_store.delete_document(TEST_COLLECTION, TEST_USER_ID)
        memory_store.merge_write(TEST_COLLECTION, TEST_USER_ID, {"Other": ["tick"] * 28})

        assert set(session.block.cells) == {CellStatus.BLANK}

    def test_two_sessions_stay_in_sync(self, one_row_spec, memory_store):
        with BlockSession(one_row_spec, memory_store, TEST_COLLECTION, TEST_USER_ID) as first:
            with BlockSession(one_row_spec, memory_store, TEST_COLLECTION, TEST_USER_ID) as second:
                first.toggle(2)
                assert second.block.cells[2] == CellStatus.TICK

                second.toggle(2)
                assert first.block.cells[2] == CellStatus.CROSS

    def test_closed_session_ignores_snapshots(self, one_row_spec, memory_store):
        session = BlockSession(one_row_spec, memory_store, TEST_COLLECTION, TEST_USER_ID).open()
        session.close()

        memory_store.merge_write(TEST_COLLECTION, TEST_USER_ID, {session.label: ["tick"] * 28})

        assert not session.is_open
        assert set(session.block.cells) == {CellStatus.BLANK}
        assert memory_store.subscriber_count(TEST_COLLECTION, TEST_USER_ID) == 0

    def test_open_is_idempotent(self, session, memory_store):
        session.open()
        assert memory_store.subscriber_count(TEST_COLLECTION, TEST_USER_ID) == 1


class TestUnauthenticatedSession:
    """Test cases for sessions without a user id."""

    def test_does_not_subscribe(self, one_row_spec, memory_store):
        with BlockSession(one_row_spec, memory_store, TEST_COLLECTION, None) as session:
            assert not session.is_open
            assert session.block == one_row_spec.blank_block()

    def test_toggle_rejected(self, one_row_spec, memory_store, caplog):
        caplog.set_level(logging.ERROR)

        with BlockSession(one_row_spec, memory_store, TEST_COLLECTION, None) as session:
            with pytest.raises(NotAuthenticatedError):
                session.toggle(0)

            assert session.block == one_row_spec.blank_block()

        assert "TOGGLE_REJECTED" in caplog.text


class TestWriteFailure:
    """Test cases for failed writes after an optimistic toggle."""

    def test_optimistic_state_kept(self, one_row_spec, failing_store, caplog):
        caplog.set_level(logging.ERROR)

        with BlockSession(one_row_spec, failing_store, TEST_COLLECTION, TEST_USER_ID) as session:
            block = session.toggle(0)

            assert block.cells[0] == CellStatus.TICK
            assert session.block.cells[0] == CellStatus.TICK

        assert failing_store.write_attempts == 1
        assert "WRITE_FAILED" in caplog.text

    def test_hook_receives_failure(self, one_row_spec, failing_store):
        failures = []

        with BlockSession(
            one_row_spec,
            failing_store,
            TEST_COLLECTION,
            TEST_USER_ID,
            on_write_failure=failures.append,
        ) as session:
            session.toggle(5)

        assert len(failures) == 1
        failure = failures[0]
        assert failure.label == one_row_spec.label
        assert failure.previous.cells[5] == CellStatus.BLANK
        assert failure.attempted.cells[5] == CellStatus.TICK
        assert "Simulated write failure" in str(failure.error)

    def test_hook_can_roll_back(self, one_row_spec, failing_store):
        session = BlockSession(one_row_spec, failing_store, TEST_COLLECTION, TEST_USER_ID)
        session.on_write_failure = lambda failure: session.restore(failure.previous)

        with session:
            session.toggle(0)

            assert session.block == one_row_spec.blank_block()

    def test_restore_rejects_other_block(self, session):
        with pytest.raises(ValueError):
            session.restore(Block.blank("Other", 1))

        with pytest.raises(ValueError):
            session.restore(Block.blank(session.label, 2))


class TestUnreadableDocument:
    """Test cases for sessions whose initial read fails."""

    def test_open_logs_and_stays_unloaded(self, one_row_spec, unreadable_store, caplog):
        caplog.set_level(logging.ERROR)

        with BlockSession(one_row_spec, unreadable_store, TEST_COLLECTION, TEST_USER_ID) as session:
            assert not session.is_open
            assert not session.is_loaded
            assert session.block == one_row_spec.blank_block()

        assert "SUBSCRIBE_FAILED" in caplog.text
        assert "Simulated read failure" in caplog.text

    def test_toggle_does_not_overwrite_stored_block(self, one_row_spec, unreadable_store, caplog):
        caplog.set_level(logging.ERROR)

        with BlockSession(one_row_spec, unreadable_store, TEST_COLLECTION, TEST_USER_ID) as session:
            with pytest.raises(BlockNotLoadedError):
                session.toggle(5)

            assert session.block == one_row_spec.blank_block()

        assert unreadable_store.write_attempts == 0
        assert "TOGGLE_REJECTED" in caplog.text

    def test_not_loaded_is_a_store_error(self, one_row_spec, unreadable_store):
        with BlockSession(one_row_spec, unreadable_store, TEST_COLLECTION, TEST_USER_ID) as session:
            with pytest.raises(DocumentStoreError):
                session.toggle(0)

    def test_loaded_after_first_snapshot(self, session):
        assert session.is_loaded
