from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QVBoxLayout,
    QTextEdit,
    QFileDialog,
    QMessageBox,
    QDialog,
    QDialogButtonBox,
    QToolBar,
    QDockWidget,
    QTreeWidget,
    QTreeWidgetItem,
)
from PySide6.QtCore import Qt, QSize
from PySide6.QtGui import QKeySequence, QAction, QActionGroup

from app.schematic_view import SchematicView
from core.document import SchematicDocument
from core.settings import EditorSettings
from core.symbol import ComponentSymbol
from core.symbol_library import builtin_symbols, symbols_by_group

log = logging.getLogger(__name__)

# loggers whose records show up in the Log dock
LOG_DOCK_LOGGERS = ("core", "app")


class TikzExportDialog(QDialog):
    """Shows the exported CircuiTikZ code and offers to save it."""

    def __init__(self, parent, tikz: str):
        super().__init__(parent)
        self.setWindowTitle("CircuiTikZ export")
        self.resize(560, 360)
        self._tikz = tikz

        layout = QVBoxLayout(self)
        text = QTextEdit()
        text.setReadOnly(True)
        text.setPlainText(tikz)
        text.setLineWrapMode(QTextEdit.LineWrapMode.NoWrap)
        layout.addWidget(text)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Close)
        buttons.accepted.connect(self._on_save)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _on_save(self):
        path, _ = QFileDialog.getSaveFileName(self, "Save CircuiTikZ", "schematic.tex", "TeX files (*.tex)")
        if not path:
            return
        try:
            Path(path).write_text(self._tikz + "\n", encoding="utf-8")
        except OSError as exc:
            QMessageBox.critical(self, "Save failed", str(exc))
            return
        log.info("Exported CircuiTikZ to %s", path)
        self.accept()


class LogViewHandler(logging.Handler):
    """Appends log records from the editor's loggers to the Log dock."""

    def __init__(self, view: QTextEdit, level: int = logging.INFO):
        super().__init__(level)
        self.view = view
        self.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.view.append(self.format(record))
        except Exception:
            self.handleError(record)


class MainWindow(QMainWindow):
    def __init__(self, settings: Optional[EditorSettings] = None) -> None:
        super().__init__()
        self.settings = settings or EditorSettings.from_env()
        self.symbols: List[ComponentSymbol] = builtin_symbols()
        self.setWindowTitle("Schematic Canvas")

        self._setup_central_widget()
        self._setup_menu_bar()
        self._setup_toolbars()
        self._setup_left_dock()
        self._setup_bottom_dock()

    def _setup_central_widget(self):
        """Create the document and the SchematicView showing it."""
        self.schematic_view = SchematicView(self.settings)
        self.document = SchematicDocument(self.settings, cursor=self.schematic_view.snap_cursor)
        self.schematic_view.set_document(self.document)
        self.setCentralWidget(self.schematic_view)

        self.schematic_view.selectionChanged.connect(self._on_selection_changed)
        self.schematic_view.modeChanged.connect(self._on_mode_changed)
        self.schematic_view.statusMessage.connect(self.statusBar().showMessage)

    def _setup_menu_bar(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("File")
        export_action = file_menu.addAction("Export CircuiTikZ...", self.on_export_tikz)
        export_action.setShortcut(QKeySequence("Ctrl+E"))
        file_menu.addSeparator()
        file_menu.addAction("Exit", self.close)

        edit_menu = menubar.addMenu("Edit")
        edit_menu.addAction("Select All", self.schematic_view.select_all)
        edit_menu.addAction("Delete", self.schematic_view.delete_selection)
        edit_menu.addSeparator()
        edit_menu.addAction("Rotate 90°", lambda: self.schematic_view.rotate_selection(90.0))
        edit_menu.addAction("Rotate -90°", lambda: self.schematic_view.rotate_selection(-90.0))
        edit_menu.addAction("Flip Horizontal", lambda: self.schematic_view.flip_selection(True))
        edit_menu.addAction("Flip Vertical", lambda: self.schematic_view.flip_selection(False))

    def _setup_toolbars(self):
        """Mode actions, one placement action per symbol, and the transform actions."""
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        toolbar.setIconSize(QSize(20, 20))
        self.addToolBar(toolbar)

        # select, wire and the placement actions are mutually exclusive
        self._mode_group = QActionGroup(self)
        self._mode_group.setExclusive(True)

        self.action_pointer = QAction("Select", self)
        self.action_pointer.setCheckable(True)
        self.action_pointer.setChecked(True)
        self.action_pointer.setToolTip("Select/Move (S)")
        self.action_pointer.triggered.connect(lambda: self.schematic_view.set_mode("select"))
        self._mode_group.addAction(self.action_pointer)
        toolbar.addAction(self.action_pointer)

        self.action_wire = QAction("Wire", self)
        self.action_wire.setCheckable(True)
        self.action_wire.setToolTip("Wire (W); Enter finishes, Esc cancels")
        self.action_wire.triggered.connect(lambda: self.schematic_view.set_mode("wire"))
        self._mode_group.addAction(self.action_wire)
        toolbar.addAction(self.action_wire)

        toolbar.addSeparator()

        self._placement_actions: Dict[QAction, ComponentSymbol] = {}
        for symbol in self.symbols:
            action = QAction(symbol.display_name, self)
            action.setCheckable(True)
            action.setToolTip(f"Place {symbol.display_name}")
            action.triggered.connect(lambda checked=False, s=symbol: self.on_place_symbol(s))
            self._mode_group.addAction(action)
            toolbar.addAction(action)
            self._placement_actions[action] = symbol

        toolbar.addSeparator()

        action_rotate = QAction("Rotate", self)
        action_rotate.setToolTip("Rotate selection by 90° (R)")
        action_rotate.triggered.connect(lambda: self.schematic_view.rotate_selection(90.0))
        toolbar.addAction(action_rotate)

        action_flip_h = QAction("Flip H", self)
        action_flip_h.setToolTip("Flip selection horizontally (H)")
        action_flip_h.triggered.connect(lambda: self.schematic_view.flip_selection(True))
        toolbar.addAction(action_flip_h)

        action_flip_v = QAction("Flip V", self)
        action_flip_v.setToolTip("Flip selection vertically (V)")
        action_flip_v.triggered.connect(lambda: self.schematic_view.flip_selection(False))
        toolbar.addAction(action_flip_v)

        action_delete = QAction("Delete", self)
        action_delete.setToolTip("Delete selection (Del)")
        action_delete.triggered.connect(self.schematic_view.delete_selection)
        toolbar.addAction(action_delete)

    def _setup_left_dock(self):
        """Component library grouped by symbol group."""
        dock = QDockWidget("Component Library", self)
        dock.setAllowedAreas(Qt.DockWidgetArea.LeftDockWidgetArea | Qt.DockWidgetArea.RightDockWidgetArea)

        tree = QTreeWidget()
        tree.setHeaderHidden(True)
        for group, symbols in symbols_by_group(self.symbols).items():
            group_item = QTreeWidgetItem([group])
            tree.addTopLevelItem(group_item)
            for symbol in symbols:
                item = QTreeWidgetItem([symbol.display_name])
                item.setData(0, Qt.ItemDataRole.UserRole, self.symbols.index(symbol))
                group_item.addChild(item)
            group_item.setExpanded(True)
        tree.itemClicked.connect(self._on_component_library_item_selected)

        dock.setWidget(tree)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, dock)

    def _setup_bottom_dock(self):
        dock = QDockWidget("Log", self)
        self.log_view = QTextEdit()
        self.log_view.setReadOnly(True)
        dock.setWidget(self.log_view)
        self.addDockWidget(Qt.DockWidgetArea.BottomDockWidgetArea, dock)

        self.log_handler = LogViewHandler(self.log_view)
        for name in LOG_DOCK_LOGGERS:
            logging.getLogger(name).addHandler(self.log_handler)

    def closeEvent(self, event):
        for name in LOG_DOCK_LOGGERS:
            logging.getLogger(name).removeHandler(self.log_handler)
        super().closeEvent(event)

    def _on_component_library_item_selected(self, item: QTreeWidgetItem, column: int):
        if item.parent() is None:  # category
            return
        symbol = self.symbols[item.data(0, Qt.ItemDataRole.UserRole)]
        for action, action_symbol in self._placement_actions.items():
            if action_symbol is symbol:
                action.setChecked(True)
        self.on_place_symbol(symbol)

    def log(self, text: str) -> None:
        self.log_view.append(text)

    # ------------------------------------------------------------------ #
    # Slots
    # ------------------------------------------------------------------ #

    def on_place_symbol(self, symbol: ComponentSymbol) -> None:
        self.schematic_view.set_placement_mode(symbol)
        self.log(f"Placing {symbol.display_name}: click on the canvas, Esc to stop")

    def on_export_tikz(self) -> None:
        TikzExportDialog(self, self.document.to_tikz()).exec()

    def _on_mode_changed(self, mode: str) -> None:
        if mode == "select":
            self.action_pointer.setChecked(True)
        elif mode == "wire":
            self.action_wire.setChecked(True)
        self.statusBar().showMessage(f"Mode: {mode}")

    def _on_selection_changed(self) -> None:
        selection = self.document.selection
        names = [c.node_name for c in selection.currently_selected_components]
        wires = len(selection.currently_selected_lines)
        if not names and not wires:
            self.statusBar().showMessage("Nothing selected")
            return
        self.statusBar().showMessage(f"Selected: {', '.join(names) or '-'}; {wires} wire(s)")


def main() -> None:
    app = QApplication(sys.argv)
    win = MainWindow()
    win.resize(1000, 700)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
