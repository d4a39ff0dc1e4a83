from __future__ import annotations

from datetime import datetime

from core.app_logging import get_trace_logger, trace
from ledger.report_builder import TodayMetrics
from ui.ui_actions import refresh_dashboard_action
from utils.currency import format_inr
from utils.date_utils import format_display_date, format_timestamp

_log = get_trace_logger()


class DashboardMixin:
    @trace
    def refresh_dashboard(self):
        refresh_dashboard_action(
            app=self,
            storage=self.storage,
            apply_metrics_cb=self._apply_dashboard_metrics,
        )

    def _apply_dashboard_metrics(self, metrics: TodayMetrics, summaries: dict, failed: bool):
        self.dash_today_trips_var.set(str(metrics.today_trips_count))
        self.dash_today_advances_var.set(format_inr(metrics.today_advances_total))
        self.dash_active_vehicles_var.set(str(metrics.active_vehicles))

        trip_tree = self.dashboard_trip_tree
        trip_tree.delete(*trip_tree.get_children())
        for row_index, trip in enumerate(metrics.recent_trips):
            summary = summaries.get(trip.id)
            tags = [self._row_stripe_tag(row_index)]
            if summary is None or summary.failed:
                total_text = "-"
                tags.append("advance_failed")
            else:
                total_text = format_inr(summary.total_advances)
            trip_tree.insert(
                "",
                "end",
                values=(
                    trip.sl_number,
                    format_display_date(trip.date),
                    trip.vehicle_number,
                    ", ".join(trip.villages),
                    total_text,
                ),
                tags=tuple(tags),
            )

        advance_tree = self.dashboard_advance_tree
        advance_tree.delete(*advance_tree.get_children())
        for row_index, advance in enumerate(metrics.recent_advances):
            advance_tree.insert(
                "",
                "end",
                values=(
                    format_timestamp(advance.created_at),
                    advance.vehicle_number,
                    format_inr(advance.advance_amount),
                ),
                tags=(self._row_stripe_tag(row_index),),
            )

        if failed:
            self.dash_status_var.set("Could not load today's figures. Showing zeros.")
            _log.debug("Dashboard load failed or timed out")
        else:
            self.dash_status_var.set(f"Updated {datetime.now().strftime('%H:%M:%S')}")
