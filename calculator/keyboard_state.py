# keyboard_state.py
"""
Tracks whether a Shift key is physically held down.

A pynput keyboard Listener runs in its own daemon thread and flips the
state on every press / release of either Shift key. Used by the
"shift to copy" setting: Shift + '=' copies the result instead of
calculating.
"""

import logging

from pynput import keyboard

logger = logging.getLogger(__name__)

SHIFT_KEYS = {keyboard.Key.shift, keyboard.Key.shift_l, keyboard.Key.shift_r}


class ShiftTracker:
    def __init__(self):
        self.held = set()
        self.listener = None

    @property
    def pressed(self):
        return bool(self.held)

    def on_press(self, key):
        if key in SHIFT_KEYS:
            self.held.add(key)

    def on_release(self, key):
        self.held.discard(key)

    def start(self):
        if self.listener is not None:
            return
        try:
            self.listener = keyboard.Listener(on_press=self.on_press, on_release=self.on_release)
            self.listener.start()
        except Exception as e:
            # No usable input backend (e.g. Wayland without X access)
            logger.warning("Shift tracking unavailable: %s", e)
            self.listener = None

    def stop(self):
        if self.listener is not None:
            self.listener.stop()
            self.listener = None
        self.held.clear()


shift_tracker = ShiftTracker()


def is_shift_pressed():
    return shift_tracker.pressed
