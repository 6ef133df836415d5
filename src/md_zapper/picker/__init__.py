"""
Interactive element picking: eligibility, selection and the state machine.
"""

from .collaborators import (
    ClipboardError,
    ConfigSettingsStore,
    ConsoleHintOverlay,
    MemorySettingsStore,
    NullOverlay,
    PyperclipSink,
)
from .commands import CommandRouter, CommandType
from .eligibility import find_content_container, is_valid_target
from .selection import SelectionStore
from .state_machine import Click, KeyDown, Picker, PickerSession, PickerState, PointerMove

__all__ = [
    "ClipboardError",
    "ConfigSettingsStore",
    "ConsoleHintOverlay",
    "MemorySettingsStore",
    "NullOverlay",
    "PyperclipSink",
    "CommandRouter",
    "CommandType",
    "find_content_container",
    "is_valid_target",
    "SelectionStore",
    "Click",
    "KeyDown",
    "Picker",
    "PickerSession",
    "PickerState",
    "PointerMove",
]
