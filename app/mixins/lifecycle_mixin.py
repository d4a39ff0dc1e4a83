from __future__ import annotations

from tkinter import messagebox

from core.app_logging import get_app_logger, trace
from ui.ui_actions import on_tab_changed_action, tab_has_unsaved_data_action
from ui.ui_helpers import get_entry_value


logger = get_app_logger()


class LifecycleMixin:
    def _on_tab_changed(self, _event=None):
        on_tab_changed_action(app=self, refresh_tab_cb=self._refresh_tab)
        self.after_idle(self._focus_current_tab_primary_input)

    def _tab_has_unsaved_data(self, tab) -> bool:
        return tab_has_unsaved_data_action(app=self, tab=tab, get_entry_value_cb=get_entry_value)

    def _tabs_with_unsaved_data(self) -> list[str]:
        names = []
        for tab in (self.tab_add_entry, self.tab_add_advance, self.tab_str):
            if self._tab_has_unsaved_data(tab):
                names.append(self.main_notebook.tab(tab, "text"))
        return names

    @trace
    def on_close(self, force: bool = False):
        if not force:
            pending = self._tabs_with_unsaved_data()
            prompt = "Close Suhel Roadline now?"
            if pending:
                prompt += "\n\nUnsaved input will be lost on: " + ", ".join(pending)
            if not messagebox.askyesno("Exit Application", prompt):
                return
        try:
            self.storage.close()
        except Exception as e:
            logger.warning(f"Failed to close storage: {e}")
        self.destroy()
