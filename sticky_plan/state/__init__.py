"""
State containers for sticky_plan windows.
"""

from .note_window_state import NoteWindowSession, NoteWindowState, SessionHost

__all__ = [
    'NoteWindowSession',
    'NoteWindowState',
    'SessionHost',
]
