"""
Tests for the history stack and editing session.
"""

import pytest

from darkroom.processing import EditSession
from darkroom.processing.history import HistoryStack
from darkroom.processing.local_adjustments import (
    EditSettings, MaskType, LinearMask, ColorMask, HslColor, CropRect
)


class TestHistoryStack:
    """Test undo/redo bookkeeping."""

    def test_initial_state(self):
        history = HistoryStack()
        history.initialize('a')
        assert history.current == 'a'
        assert not history.can_undo()
        assert not history.can_redo()

    def test_undo_redo(self):
        """Undo and redo walk the entries."""
        history = HistoryStack()
        history.initialize('a')
        history.push('b', 'second')
        history.push('c', 'third')

        assert history.undo() == 'b'
        assert history.undo() == 'a'
        assert history.undo() is None
        assert history.redo() == 'b'
        assert history.current == 'b'

    def test_push_after_undo_drops_redo(self):
        """A new commit discards the redo branch."""
        history = HistoryStack()
        history.initialize('a')
        history.push('b', 'b')
        history.undo()
        history.push('c', 'c')
        assert not history.can_redo()
        assert history.get_history_summary()['descriptions'] == ['Session Start', 'c']

    def test_trims_oldest_entries(self):
        """Entries past max_entries are dropped from the front."""
        history = HistoryStack(max_entries=3)
        history.initialize(0)
        for value in range(1, 6):
            history.push(value, str(value))
        assert len(history) == 3
        assert history.current == 5
        assert history.undo() == 4
        assert history.undo() == 3
        assert history.undo() is None

    def test_invalid_max_entries(self):
        with pytest.raises(ValueError):
            HistoryStack(max_entries=0)


class TestEditSession:
    """Test session operations."""

    @pytest.fixture
    def session(self):
        return EditSession(['p1', 'p2', 'p3'])

    def test_defaults_for_unedited_photo(self, session):
        assert session.get_settings('p1') == EditSettings()

    def test_update_setting_commits_history(self, session):
        """Each change is one undoable entry."""
        session.update_setting('p1', 'exposure', 25)
        session.update_setting('p1', 'contrast', -10)
        assert session.get_settings('p1').exposure == 25.0
        assert len(session.history) == 3

        assert session.undo()
        assert session.get_settings('p1').contrast == 0
        assert session.get_settings('p1').exposure == 25.0
        assert session.redo()
        assert session.get_settings('p1').contrast == -10

    def test_undo_at_start(self, session):
        assert not session.undo()
        assert not session.redo()

    def test_snapshots_are_not_mutated(self, session):
        """Earlier snapshots keep their values after later edits."""
        session.update_setting('p1', 'exposure', 10)
        before = session.snapshot()
        session.update_setting('p1', 'exposure', 40)
        assert before['p1'].exposure == 10
        with pytest.raises(TypeError):
            before['p1'] = EditSettings()

    def test_update_setting_rejects_unknown_and_structured(self, session):
        with pytest.raises(ValueError):
            session.update_setting('p1', 'brightness', 10)
        with pytest.raises(ValueError):
            session.update_setting('p1', 'masks', ())

    def test_crop_mirror_and_lut(self, session):
        session.set_crop('p1', {'x': 0.1, 'y': 0.2, 'width': 0.5, 'height': 0.5})
        session.toggle_mirror('p1')
        session.set_lut('p1', 'film', intensity=40)
        settings = session.get_settings('p1')
        assert settings.crop == CropRect(0.1, 0.2, 0.5, 0.5)
        assert settings.is_mirrored
        assert (settings.lut_id, settings.lut_intensity) == ('film', 40.0)

    def test_update_mixer_channel(self, session):
        session.update_mixer_channel('p1', 'aqua', saturation=-30)
        mixer = session.get_settings('p1').color_mixer
        assert mixer.aqua.saturation == -30
        assert mixer.red.is_neutral()

    def test_add_mask_sets_active(self, session):
        """New masks become active; color masks get a default target."""
        linear = session.add_mask('p1', MaskType.LINEAR)
        color = session.add_mask('p1', MaskType.COLOR)
        assert isinstance(linear, LinearMask)
        assert isinstance(color, ColorMask)
        assert color.target_color == HslColor(0.0, 0.0, 0.5)
        assert session.active_mask_id == color.id
        assert [m.id for m in session.get_settings('p1').masks] == [linear.id, color.id]

    def test_update_mask_and_settings(self, session):
        mask = session.add_mask('p1', MaskType.LINEAR)
        session.update_mask('p1', mask.id, rotation=45, invert=True)
        session.update_mask_setting('p1', mask.id, 'exposure', 30)
        stored = session.get_settings('p1').find_mask(mask.id)
        assert stored.rotation == 45
        assert stored.invert
        assert stored.settings.exposure == 30.0

    def test_update_missing_mask(self, session):
        with pytest.raises(KeyError):
            session.update_mask('p1', 'nope', rotation=10)
        with pytest.raises(KeyError):
            session.delete_mask('p1', 'nope')

    def test_delete_mask_clears_selection(self, session):
        mask = session.add_mask('p1', MaskType.LINEAR)
        session.delete_mask('p1', mask.id)
        assert session.active_mask_id is None
        assert session.get_settings('p1').masks == ()

    def test_undo_add_mask_clears_selection(self, session):
        """Selection is dropped when undo removes the active mask."""
        session.add_mask('p1', MaskType.LINEAR)
        session.undo()
        assert session.active_mask_id is None

    def test_sync_settings(self, session):
        """Sync copies settings to every other photo in one step."""
        session.update_setting('p1', 'exposure', 20)
        entries = len(session.history)
        targets = session.sync_settings('p1')
        assert targets == ['p2', 'p3']
        assert session.get_settings('p3').exposure == 20
        assert len(session.history) == entries + 1

        session.undo()
        assert session.get_settings('p3').exposure == 0

    def test_sync_to_selected_targets(self, session):
        session.update_setting('p1', 'saturation', -50)
        session.sync_settings('p1', ['p2'])
        assert session.get_settings('p2').saturation == -50
        assert session.get_settings('p3').saturation == 0

    def test_from_config(self):
        session = EditSession.from_config({'history': {'max_entries': 2}}, ['a'])
        for value in (1, 2, 3):
            session.update_setting('a', 'exposure', value)
        assert len(session.history) == 2
