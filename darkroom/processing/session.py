"""
Editing session: per-photo settings, mask selection and undo history.

Every public mutation is a typed operation that commits exactly one history
entry. Snapshots are shallow copies of the photo -> settings map; the
settings themselves are immutable and shared between snapshots.
"""

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .color.color_mixer import ColorMixerChannel
from .history import HistoryStack
from .local_adjustments.models import (
    EditSettings, CropRect, HslColor, LocalSettings, Mask, MaskType,
    LOCAL_SETTING_NAMES, create_mask
)

logger = logging.getLogger(__name__)

SettingsMap = Mapping[str, EditSettings]

# Fields edited through their dedicated operations
_STRUCTURED_FIELDS = {'masks', 'color_mixer', 'crop'}

_DEFAULT_TARGET_COLOR = HslColor(h=0.0, s=0.0, l=0.5)


class EditSession:
    """Holds the edit state of a set of photos."""

    def __init__(self, photo_ids: Iterable[str] = (), max_history: int = 100):
        self.photo_ids: List[str] = list(photo_ids)
        self.active_mask_id: Optional[str] = None
        self._settings: Dict[str, EditSettings] = {}
        self.history: HistoryStack[SettingsMap] = HistoryStack(max_entries=max_history)
        self.history.initialize(self._snapshot())

    @classmethod
    def from_config(cls, config: Dict[str, Any], photo_ids: Iterable[str] = ()) -> 'EditSession':
        """Create a session using the ``history`` section of the app config."""
        history = config.get('history', {}) or {}
        return cls(photo_ids, max_history=int(history.get('max_entries', 100)))

    def add_photo(self, photo_id: str) -> None:
        if photo_id not in self.photo_ids:
            self.photo_ids.append(photo_id)

    def get_settings(self, photo_id: str) -> EditSettings:
        """Settings of a photo; defaults when it has never been edited."""
        return self._settings.get(photo_id) or EditSettings()

    def snapshot(self) -> SettingsMap:
        """Read-only view of the current photo -> settings map."""
        return self._snapshot()

    # Generic setters

    def update_setting(self, photo_id: str, key: str, value: Any) -> EditSettings:
        """
        Set a scalar field of a photo's settings.

        Raises:
            ValueError: For unknown keys or fields with a dedicated operation
        """
        if key not in EditSettings.field_names():
            raise ValueError(f"Unknown setting '{key}'")
        if key in _STRUCTURED_FIELDS:
            raise ValueError(f"Setting '{key}' has a dedicated operation")

        if key in LOCAL_SETTING_NAMES or key == 'lut_intensity':
            value = float(value)
        elif key == 'is_mirrored':
            value = bool(value)

        settings = replace(self.get_settings(photo_id), **{key: value})
        return self._commit(photo_id, settings, f"Set {key}")

    def set_crop(self, photo_id: str, crop: Optional[CropRect]) -> EditSettings:
        if crop is not None and not isinstance(crop, CropRect):
            crop = CropRect.from_dict(crop)
        settings = replace(self.get_settings(photo_id), crop=crop)
        return self._commit(photo_id, settings, "Clear crop" if crop is None else "Crop")

    def toggle_mirror(self, photo_id: str) -> EditSettings:
        current = self.get_settings(photo_id)
        return self._commit(photo_id, replace(current, is_mirrored=not current.is_mirrored), "Mirror")

    def set_lut(self, photo_id: str, lut_id: Optional[str],
                intensity: Optional[float] = None) -> EditSettings:
        changes: Dict[str, Any] = {'lut_id': lut_id}
        if intensity is not None:
            changes['lut_intensity'] = float(intensity)
        settings = replace(self.get_settings(photo_id), **changes)
        return self._commit(photo_id, settings, f"LUT {lut_id or 'none'}")

    def update_mixer_channel(self, photo_id: str, band: str, **changes) -> EditSettings:
        """Change hue/saturation/luminance of one mixer band."""
        current = self.get_settings(photo_id)
        channel = replace(current.color_mixer.channel(band), **changes)
        mixer = replace(current.color_mixer, **{band: channel})
        return self._commit(photo_id, replace(current, color_mixer=mixer), f"Mixer {band}")

    # Masks

    def add_mask(self, photo_id: str, mask_type: MaskType) -> Mask:
        """Append a mask with default geometry and make it the active mask."""
        mask_type = MaskType(mask_type)
        if mask_type is MaskType.COLOR:
            mask = create_mask(mask_type, target_color=_DEFAULT_TARGET_COLOR)
        else:
            mask = create_mask(mask_type)

        current = self.get_settings(photo_id)
        self._commit(photo_id, replace(current, masks=current.masks + (mask,)),
                     f"Add {mask.name} mask")
        self.active_mask_id = mask.id
        return mask

    def update_mask(self, photo_id: str, mask_id: str, **changes) -> Mask:
        """
        Change geometry/identity fields of a mask.

        Raises:
            KeyError: If the mask does not exist
        """
        current = self.get_settings(photo_id)
        mask = self._require_mask(current, photo_id, mask_id)
        if 'settings' in changes and not isinstance(changes['settings'], LocalSettings):
            changes['settings'] = LocalSettings.from_dict(changes['settings'])
        if 'target_color' in changes and isinstance(changes['target_color'], dict):
            changes['target_color'] = HslColor.from_dict(changes['target_color'])

        updated = replace(mask, **changes)
        self._commit(photo_id, self._swap_mask(current, updated), f"Edit {mask.name} mask")
        return updated

    def update_mask_setting(self, photo_id: str, mask_id: str, key: str, value: float) -> Mask:
        """Change one of a mask's nine local tone sliders."""
        if key not in LOCAL_SETTING_NAMES:
            raise ValueError(f"Unknown local setting '{key}'")
        current = self.get_settings(photo_id)
        mask = self._require_mask(current, photo_id, mask_id)
        updated = replace(mask, settings=replace(mask.settings, **{key: float(value)}))
        self._commit(photo_id, self._swap_mask(current, updated), f"Mask {key}")
        return updated

    def delete_mask(self, photo_id: str, mask_id: str) -> None:
        """Remove a mask; clears the selection when it was the active one."""
        current = self.get_settings(photo_id)
        mask = self._require_mask(current, photo_id, mask_id)
        masks = tuple(m for m in current.masks if m.id != mask_id)
        self._commit(photo_id, replace(current, masks=masks), f"Delete {mask.name} mask")
        if self.active_mask_id == mask_id:
            self.active_mask_id = None

    def set_active_mask(self, photo_id: str, mask_id: Optional[str]) -> None:
        if mask_id is not None:
            self._require_mask(self.get_settings(photo_id), photo_id, mask_id)
        self.active_mask_id = mask_id

    # Sync and history

    def sync_settings(self, source_id: str,
                      target_ids: Optional[Iterable[str]] = None) -> List[str]:
        """
        Copy a photo's settings onto other photos.

        Args:
            source_id: Photo whose settings are copied
            target_ids: Photos to overwrite; all known photos when omitted

        Returns:
            The ids that received the settings
        """
        source = self.get_settings(source_id)
        targets = [pid for pid in (target_ids if target_ids is not None else self.photo_ids)
                   if pid != source_id]
        for photo_id in targets:
            self.add_photo(photo_id)
            self._settings[photo_id] = source
        self.history.push(self._snapshot(), f"Sync settings to {len(targets)} photos")
        logger.info(f"Synced settings from {source_id} to {len(targets)} photos")
        return targets

    def undo(self) -> bool:
        state = self.history.undo()
        if state is None:
            return False
        self._restore(state)
        return True

    def redo(self) -> bool:
        state = self.history.redo()
        if state is None:
            return False
        self._restore(state)
        return True

    # Internals

    def _snapshot(self) -> SettingsMap:
        return MappingProxyType(dict(self._settings))

    def _restore(self, state: SettingsMap) -> None:
        self._settings = dict(state)
        if self.active_mask_id is not None and not any(
                s.find_mask(self.active_mask_id) for s in self._settings.values()):
            self.active_mask_id = None

    def _commit(self, photo_id: str, settings: EditSettings, description: str) -> EditSettings:
        self.add_photo(photo_id)
        self._settings[photo_id] = settings
        self.history.push(self._snapshot(), description)
        return settings

    @staticmethod
    def _require_mask(settings: EditSettings, photo_id: str, mask_id: str) -> Mask:
        mask = settings.find_mask(mask_id)
        if mask is None:
            raise KeyError(f"Mask '{mask_id}' not found for photo '{photo_id}'")
        return mask

    @staticmethod
    def _swap_mask(settings: EditSettings, updated: Mask) -> EditSettings:
        masks = tuple(updated if m.id == updated.id else m for m in settings.masks)
        return replace(settings, masks=masks)
