# UI.py
""""PySide6 user interface for the calculator.

Structure
---------
- Calculator UI: main window with display, live preview, history and button grid
- Settings UI: modal dialog for user preferences

Responsibilities (Calculator)
-----------------------------
- Build window, display, layout and buttons
- Re-evaluate the expression on every keystroke (live preview) via MathEngine
- On '=', show the formatted result and store it in the history
- Show MathEngine failures (with their error code) as dialogs on '='
- Memory slots M1..M4, DEG/RAD toggle, clipboard copy

Responsibilities (Settings)
---------------------------
- Load Current Settings and Settings Descriptions via config_manager
- Validate user input (angle mode, volume range)
- Save and apply theme changes immediately

Threading Note
--------------
MathEngine is pure and finishes well under a millisecond for anything a user
can type, so evaluation runs directly on the UI thread.
"""""

import logging
import sys

from PySide6 import QtWidgets, QtGui
from PySide6.QtCore import Qt, QTimer
import pyperclip

from . import error as E
from . import config_manager as config_manager
from . import storage_manager as storage_manager
from . import MathEngine as MathEngine
from .keyboard_state import shift_tracker, is_shift_pressed
from .ScientificEngine import AngleMode

logger = logging.getLogger(__name__)


class SettingsDialog(QtWidgets.QDialog):
    """""

    Settings window. Every key of config.json gets a widget:
    1. Checkboxes   (boolean settings)
    2. Input Fields (angle mode, sound volume)

    Values are validated by config_manager before anything is written.

    """""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.widgets = {}  # setting key -> widget

        # --- 1. Window Setup ---
        self.setWindowTitle("Calculator Settings")
        self.setMinimumSize(320, 240)

        main_layout = QtWidgets.QVBoxLayout(self)

        # --- 2. Load Settings ---
        self.setting_value_list = config_manager.load_setting_value("all")
        self.setting_description_list = config_manager.load_setting_description("all")

        # --- 3. Build Widgets ---
        for key_value, value in self.setting_value_list.items():
            description = self.setting_description_list.get(key_value, key_value)

            if isinstance(value, bool):
                checkbox = QtWidgets.QCheckBox(description)
                checkbox.setChecked(value)
                main_layout.addWidget(checkbox)
                self.widgets[key_value] = checkbox

            else:
                row_h_layout = QtWidgets.QHBoxLayout()
                main_layout.addLayout(row_h_layout)
                label = QtWidgets.QLabel(description + ":")
                input_field = QtWidgets.QLineEdit()
                input_field.setPlaceholderText(str(value))  # Show current value as placeholder

                row_h_layout.addWidget(label)
                row_h_layout.addWidget(input_field)
                row_h_layout.setStretch(1, 1)
                self.widgets[key_value] = input_field

        # --- 4. OK / Cancel Buttons ---
        button_box = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel)
        main_layout.addWidget(button_box)
        main_layout.addStretch(1)

        button_box.accepted.connect(self.save_settings)
        button_box.rejected.connect(self.reject)

        self.update_darkmode()

    def save_settings(self):
        new_settings = dict(self.setting_value_list)

        for key_value, widget in self.widgets.items():
            if isinstance(widget, QtWidgets.QCheckBox):
                new_settings[key_value] = widget.isChecked()
                continue

            new_value_str = widget.text().strip()
            if new_value_str == "":
                continue  # Blank keeps the old value

            try:
                new_settings[key_value] = config_manager.validate_setting(key_value, new_value_str)
            except E.ConfigurationError as e:
                # Show an error box and STOP the save process
                QtWidgets.QMessageBox.critical(self, "Invalid Input:",
                                               f"Error {e.code} in input for '{key_value}':\n\n{e.message}\n\nPlease correct your input.")
                return

        saved_settings = config_manager.save_setting(new_settings)

        if saved_settings != {}:
            self.setting_value_list = saved_settings
            self.accept()
        else:
            QtWidgets.QMessageBox.critical(self, "Error",
                                           "Settings could not be saved (error in config_manager).")

    def update_darkmode(self):
        if self.setting_value_list["darkmode"] == True:
            self.setStyleSheet("""
                        QDialog {background-color: #121212;}
                        QLabel {color: white;}
                        QCheckBox {color: white;}
                        QLineEdit {background-color: #444444;color: white;border: 1px solid #666666;}
                        QDialogButtonBox QPushButton {background-color: #666666;color: white;}""")
        else:
            self.setStyleSheet("")


class CalculatorWindow(QtWidgets.QWidget):
    # --- Class-level attributes for button hold logic ---
    initial_delay = 500
    repeat_interval = 100

    def __init__(self):
        super().__init__()

        # --- 1. Load Settings and Stores ---
        self.setting_value_list = config_manager.load_setting_value("all")
        self.angle_mode = config_manager.load_angle_mode()
        self.history = storage_manager.get_history()
        self.memory = storage_manager.get_memory()

        # --- 2. Instance State Variables ---
        self.expression = ""  # The text currently being built
        self.result = None  # Last live result (float) or None
        self.was_held = False
        self.held_button_value = None
        self.hold_timer = QTimer(self)
        self.hold_timer.timeout.connect(self.handle_hold_tick)

        # --- 3. Window Setup ---
        self.button_objects = {}
        self.setWindowTitle("Calculator")
        self.resize(640, 520)
        root_layout = QtWidgets.QHBoxLayout(self)
        main_v_layout = QtWidgets.QVBoxLayout()
        root_layout.addLayout(main_v_layout, 3)

        # --- 4. Display + live preview ---
        self.display = QtWidgets.QLineEdit("0")
        self.display.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.display.setReadOnly(True)
        font = self.display.font()
        font.setPointSize(28)
        self.display.setFont(font)
        main_v_layout.addWidget(self.display)

        self.preview = QtWidgets.QLabel("")
        self.preview.setAlignment(Qt.AlignmentFlag.AlignRight)
        main_v_layout.addWidget(self.preview)

        # --- 5. Mode / memory row ---
        mode_row = QtWidgets.QHBoxLayout()
        main_v_layout.addLayout(mode_row)

        self.angle_button = QtWidgets.QPushButton()
        self.angle_button.clicked.connect(self.toggle_angle_mode)
        mode_row.addWidget(self.angle_button)

        self.memory_slot = QtWidgets.QComboBox()
        self.memory_slot.addItems(storage_manager.MEMORY_SLOTS)
        self.memory_slot.currentTextChanged.connect(self.update_memory_label)
        mode_row.addWidget(self.memory_slot)

        for operation in storage_manager.MEMORY_OPERATIONS:
            button = QtWidgets.QPushButton(operation)
            button.clicked.connect(lambda checked=False, op=operation: self.handle_memory_operation(op))
            mode_row.addWidget(button)
            self.button_objects[operation] = button

        self.memory_label = QtWidgets.QLabel("")
        main_v_layout.addWidget(self.memory_label)

        # --- 6. Button Grid Setup ---
        button_container = QtWidgets.QWidget()
        main_v_layout.addWidget(button_container, 1)
        button_grid = QtWidgets.QGridLayout(button_container)
        button_grid.setSpacing(2)
        button_grid.setContentsMargins(0, 0, 0, 0)

        expanding_policy = QtWidgets.QSizePolicy(
            QtWidgets.QSizePolicy.Policy.Expanding,
            QtWidgets.QSizePolicy.Policy.Expanding
        )

        # (text, row, column)
        self.buttons = [
            ('⚙', 0, 0), ('📋', 0, 1), ('(', 0, 2), (')', 0, 3), ('<', 0, 4),
            ('sin(', 1, 0), ('cos(', 1, 1), ('tan(', 1, 2), ('π', 1, 3), ('e', 1, 4),
            ('asin(', 2, 0), ('acos(', 2, 1), ('atan(', 2, 2), ('^', 2, 3), ('%', 2, 4),
            ('log(', 3, 0), ('ln(', 3, 1), ('sqrt(', 3, 2), ('cbrt(', 3, 3), ('÷', 3, 4),
            ('C', 4, 0), ('7', 4, 1), ('8', 4, 2), ('9', 4, 3), ('×', 4, 4),
            ('', 5, 0), ('4', 5, 1), ('5', 5, 2), ('6', 5, 3), ('-', 5, 4),
            ('', 6, 0), ('1', 6, 1), ('2', 6, 2), ('3', 6, 3), ('+', 6, 4),
            ('', 7, 0), ('0', 7, 1), ('.', 7, 2), ('=', 7, 3, 1, 2),
        ]

        # Buttons that support "press and hold"
        HOLD_BUTTONS = ['0', '1', '2', '3', '4', '5', '6', '7', '8', '9', '<']

        for text, row, col, *span in self.buttons:
            if not text:
                continue
            button = QtWidgets.QPushButton(text)
            button.setSizePolicy(expanding_policy)

            if text == '⚙':
                button.clicked.connect(self.open_settings)
            elif text in HOLD_BUTTONS:
                button.pressed.connect(lambda val=text: self.handle_button_pressed_hold(val))
                button.released.connect(self.handle_button_released_hold)
                button.clicked.connect(lambda checked=False, val=text: self.handle_button_clicked_hold(val))
            else:
                button.clicked.connect(lambda checked=False, val=text: self.handle_button_press(val))

            if text == '=':
                button.setStyleSheet("background-color: #007bff; color: white; font-weight: bold;")

            button_grid.addWidget(button, row, col, *span)
            self.button_objects[text] = button

        # --- 7. History panel ---
        history_layout = QtWidgets.QVBoxLayout()
        root_layout.addLayout(history_layout, 2)
        history_layout.addWidget(QtWidgets.QLabel("History"))
        self.history_list = QtWidgets.QListWidget()
        self.history_list.itemDoubleClicked.connect(self.load_from_history)
        self.history_list.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.history_list.customContextMenuRequested.connect(self.open_history_menu)
        history_layout.addWidget(self.history_list, 1)
        clear_history_button = QtWidgets.QPushButton("Clear history")
        clear_history_button.clicked.connect(self.clear_history)
        history_layout.addWidget(clear_history_button)

        self.refresh_history()
        self.update_angle_button()
        self.update_memory_label()
        self.update_darkmode()

    # --- Button Hold Logic ---
    def handle_button_pressed_hold(self, value):
        self.was_held = False
        self.held_button_value = value
        self.hold_timer.setInterval(self.initial_delay)
        self.hold_timer.start()

    def handle_button_released_hold(self):
        self.hold_timer.stop()
        self.held_button_value = None

    def handle_button_clicked_hold(self, value):
        # A click after a hold was already handled by the timer
        if not self.was_held:
            self.handle_button_press(value)

    def handle_hold_tick(self):
        self.was_held = True
        if self.hold_timer.interval() == self.initial_delay:
            self.hold_timer.setInterval(self.repeat_interval)
        if self.held_button_value:
            self.handle_button_press(self.held_button_value)

    # --- Keyboard input ---
    def keyPressEvent(self, event):
        key = event.key()
        if key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.handle_button_press("=")
        elif key == Qt.Key.Key_Backspace:
            self.handle_button_press("<")
        elif key == Qt.Key.Key_Escape:
            self.handle_button_press("C")
        elif event.text() and event.text().isprintable():
            self.set_expression(self.expression + event.text())
        else:
            super().keyPressEvent(event)

    # --- Input handling ---
    def handle_button_press(self, value):
        if value == "=":
            if self.setting_value_list["shift_to_copy"] and is_shift_pressed():
                self.copy_result()
                return
            self.handle_equals()

        elif value == "<":
            self.set_expression(self.expression[:-1])

        elif value == "C":
            self.set_expression("")

        elif value == '📋':
            self.copy_result()

        else:
            self.set_expression(self.expression + value)

    def set_expression(self, expression):
        self.expression = expression
        self.display.setText(self.expression or "0")
        self.update_preview()

    def update_preview(self):
        # Live evaluation: keep the last valid preview while the user is mid-typing
        if not self.expression:
            self.result = None
            self.preview.setText("")
            return
        if not MathEngine.is_valid_expression(self.expression):
            return
        calculated = MathEngine.evaluate(self.expression, self.angle_mode)
        if calculated is not None:
            self.result = calculated
            self.preview.setText("= " + MathEngine.format_for_display(calculated))

    def handle_equals(self):
        if not self.expression:
            return

        outcome = MathEngine.evaluate_outcome(self.expression, self.angle_mode)
        if isinstance(outcome, E.Failure):
            self.show_failure(outcome)
            return

        item = storage_manager.new_history_item(self.expression, outcome)
        self.history = storage_manager.save_to_history(item)
        self.refresh_history()

        formatted = MathEngine.format_for_display(outcome)
        self.result = outcome
        self.expression = formatted
        self.display.setText(formatted)
        self.preview.setText("")

    def show_failure(self, failure):
        error_box = QtWidgets.QMessageBox(self)
        error_box.setIcon(QtWidgets.QMessageBox.Critical)
        error_box.setWindowTitle("Calculation error")
        error_box.setText(f"Error {failure.code}: {E.category(failure.code)}")
        error_box.setInformativeText(f"Details: {failure.message}\nExpression: {self.expression}")
        error_box.setStandardButtons(QtWidgets.QMessageBox.Ok)
        error_box.setStyleSheet(self.get_message_box_stylesheet())
        error_box.exec()

    def copy_result(self):
        if self.result is not None:
            pyperclip.copy(MathEngine.format_for_display(self.result))
        else:
            pyperclip.copy(self.display.text())

    # --- Angle mode ---
    def toggle_angle_mode(self):
        if self.angle_mode is AngleMode.DEGREES:
            self.angle_mode = AngleMode.RADIANS
        else:
            self.angle_mode = AngleMode.DEGREES
        if config_manager.save_angle_mode(self.angle_mode) == {}:
            logger.warning("Angle mode could not be persisted")
        self.update_angle_button()
        self.update_preview()

    def update_angle_button(self):
        self.angle_button.setText("DEG" if self.angle_mode is AngleMode.DEGREES else "RAD")

    # --- Memory ---
    def current_value(self):
        if self.result is not None:
            return self.result
        return MathEngine.evaluate(self.display.text(), self.angle_mode) or 0.0

    def handle_memory_operation(self, operation):
        slot = self.memory_slot.currentText()
        if operation == "MR":
            value = storage_manager.recall_memory(self.memory, slot)
            self.set_expression(MathEngine.format_for_display(value))
            return

        self.memory = storage_manager.apply_memory_operation(self.memory, operation, slot, self.current_value())
        storage_manager.save_memory(self.memory)
        self.update_memory_label()

    def update_memory_label(self):
        self.memory_label.setText("   ".join(
            f"{slot}: {MathEngine.format_for_display(self.memory[slot])}" for slot in storage_manager.MEMORY_SLOTS
        ))

    # --- History ---
    def refresh_history(self):
        self.history_list.clear()
        notes = storage_manager.get_notes()
        for item in self.history:
            text = f"{item.expression} = {MathEngine.format_for_display(item.result)}"
            note = notes.get(item.id)
            if note:
                text += f"   ({note})"
            list_item = QtWidgets.QListWidgetItem(text)
            list_item.setData(Qt.ItemDataRole.UserRole, item.id)
            self.history_list.addItem(list_item)

    def load_from_history(self, list_item):
        item_id = list_item.data(Qt.ItemDataRole.UserRole)
        for item in self.history:
            if item.id == item_id:
                self.set_expression(MathEngine.format_for_display(item.result))
                self.result = item.result
                return

    def open_history_menu(self, position):
        list_item = self.history_list.itemAt(position)
        if list_item is None:
            return
        item_id = list_item.data(Qt.ItemDataRole.UserRole)

        menu = QtWidgets.QMenu(self)
        note_action = menu.addAction("Edit note...")
        delete_action = menu.addAction("Delete entry")
        chosen = menu.exec(self.history_list.viewport().mapToGlobal(position))
        if chosen is note_action:
            self.edit_note(item_id)
        elif chosen is delete_action:
            self.history = storage_manager.remove_history_item(item_id)
            self.refresh_history()

    def edit_note(self, item_id):
        current = storage_manager.get_note(item_id) or ""
        text, accepted = QtWidgets.QInputDialog.getText(
            self, "History note", "Note (leave empty to remove):", text=current
        )
        if not accepted:
            return
        storage_manager.save_note(item_id, text)
        self.refresh_history()

    def clear_history(self):
        storage_manager.clear_history()
        self.history = []
        self.refresh_history()

    # --- Settings / theme ---
    def open_settings(self):
        settings_dialog = SettingsDialog(self)
        settings_dialog.exec()  # "exec" makes the dialog modal (blocks main window)

        # Reload settings after dialog closes
        self.setting_value_list = config_manager.load_setting_value("all")
        self.angle_mode = config_manager.load_angle_mode()
        self.update_angle_button()
        self.update_preview()
        self.update_darkmode()

    def update_darkmode(self):
        if self.setting_value_list["darkmode"] == True:
            for text, button in self.button_objects.items():
                if text != '=':
                    button.setStyleSheet("background-color: #121212; color: white; font-weight: bold;")
            self.setStyleSheet("background-color: #121212; color: white;")
            self.display.setStyleSheet("background-color: #121212; color: white; font-weight: bold;")
        else:
            for text, button in self.button_objects.items():
                if text != '=':
                    button.setStyleSheet("font-weight: normal;")
            self.setStyleSheet("")
            self.display.setStyleSheet("font-weight: bold;")

    def get_message_box_stylesheet(self):
        if self.setting_value_list["darkmode"] == True:
            return """
                QMessageBox { background-color: #121212; color: white; }
                QLabel { color: white; }
                QPushButton { background-color: #2e2e2e; color: white; border: 1px solid #444444; padding: 5px 15px; }
                QPushButton:hover { background-color: #444444; }
            """
        return ""


def main():
    app = QtWidgets.QApplication(sys.argv)
    app.setWindowIcon(QtGui.QIcon.fromTheme("accessories-calculator"))
    shift_tracker.start()
    window = CalculatorWindow()
    window.show()
    exit_code = app.exec()
    shift_tracker.stop()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
