from __future__ import annotations

from PySide6.QtCore import Qt

from playmaker.core.session_controller import SessionController


class TimelineShortcutHandler:
    def __init__(self, controller: SessionController):
        self.controller = controller

    def keyPressEvent(self, event) -> bool:
        """Dispatch a timeline shortcut; return whether *event* was handled."""
        key = event.key()
        modifiers = event.modifiers()
        command = bool(modifiers & (Qt.ControlModifier | Qt.MetaModifier))
        shift = bool(modifiers & Qt.ShiftModifier)

        if command:
            if key == Qt.Key_Z:
                if shift:
                    self.controller.redo()
                else:
                    self.controller.undo()
                return True
            if key == Qt.Key_Y:
                self.controller.redo()
                return True
            return False

        if key == Qt.Key_Space:
            self.controller.toggle_playing()
        elif key == Qt.Key_Left:
            self.controller.step_tick(-1)
        elif key == Qt.Key_Right:
            self.controller.step_tick(1)
        elif key == Qt.Key_Home:
            self.controller.set_tick(0)
        elif key == Qt.Key_Escape:
            self.controller.clear_selection()
        elif key in (Qt.Key_Delete, Qt.Key_Backspace):
            self.controller.delete_selected_segment()
        else:
            return False
        return True
