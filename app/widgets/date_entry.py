from __future__ import annotations

from tkcalendar import DateEntry as _CalendarDateEntry

from core.app_logging import get_app_logger

logger = get_app_logger()


class SmartDateEntry(_CalendarDateEntry):
    """
    tkcalendar DateEntry for the trip forms.

    Weeks start on Monday and the popup opens above the field when the
    screen has no room below it.
    """

    def __init__(self, master=None, **kw):
        kw.setdefault("date_pattern", "yyyy-mm-dd")
        kw.setdefault("firstweekday", "monday")
        kw.setdefault("showweeknumbers", False)
        super().__init__(master, **kw)

    def drop_down(self):
        super().drop_down()
        self.after_idle(self._reposition_popup)

    def _reposition_popup(self):
        top = getattr(self, "_top_cal", None)
        if top is None or not top.winfo_exists():
            return
        self.update_idletasks()
        popup_h = top.winfo_reqheight()
        field_y = self.winfo_rooty()
        field_h = self.winfo_height()
        x = self.winfo_rootx()
        if self.winfo_screenheight() - (field_y + field_h) < popup_h + 20:
            logger.debug("Date popup flipped above field at y=%s", field_y)
            top.geometry(f"+{x}+{field_y - popup_h - 4}")
        else:
            top.geometry(f"+{x}+{field_y + field_h + 2}")


DateEntry = SmartDateEntry
