"""Telegram-Markdown rendering of threshold reports."""

from __future__ import annotations

from datetime import datetime, timezone

from threshold_tracker.models import ThresholdReport
from threshold_tracker.pricing import compute_threshold

TITLE = "📊 *MetaDAO Proposal Threshold Update*"
UNAVAILABLE_MESSAGE = "⚠️ Unable to fetch proposal data. Will retry next hour."

_STATUS_ICONS = {"passed": "✅", "failed": "❌"}


def _signed(value: float, digits: int) -> str:
    return f"{'+' if value >= 0 else ''}{value:.{digits}f}"


def format_threshold(threshold: float) -> str:
    return f"{_signed(threshold, 4)}%"


def format_price(price: float) -> str:
    return f"${price:.6f}"


def _utc(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")


def format_unavailable() -> str:
    return UNAVAILABLE_MESSAGE


def _finalized_lines(report: ThresholdReport) -> list[str]:
    icon = _STATUS_ICONS.get(report.status.lower(), "📋")
    return [
        f"{icon} *Proposal Status:* {report.status.upper()}",
        "",
        "_This proposal has been finalized._",
        "_Markets are closed - live threshold data unavailable._",
        "",
        f"_Last checked: {_utc(report.timestamp)}_",
    ]


def _change_lines(report: ThresholdReport) -> list[str]:
    if report.variation is None or report.previous_hour is None:
        return ["_No previous data available for comparison_"]

    if report.variation > 0:
        arrow = "📈"
    elif report.variation < 0:
        arrow = "📉"
    else:
        arrow = "➡️"

    lines = ["*1-Hour Change:*", f"{arrow} {_signed(report.variation, 4)} percentage points"]
    if report.variation_percent is not None:
        lines.append(f"   ({_signed(report.variation_percent, 2)}% relative change)")
    lines.append(f"   Previous: {format_threshold(report.previous_hour)}")
    return lines


def _status_line(current: float, pass_threshold: float) -> str:
    if current > pass_threshold:
        return f"✅ *Status:* Currently PASSING (above {pass_threshold:g}% threshold)"
    if current > 0:
        return "⚠️ *Status:* Positive but below pass threshold"
    return "❌ *Status:* Currently FAILING (negative threshold)"


def format_report(report: ThresholdReport, pass_threshold: float = 3.0) -> str:
    lines = [TITLE, ""]

    if report.is_finalized:
        return "\n".join(lines + _finalized_lines(report))

    lines.append(f"*Current Threshold:* {format_threshold(report.current)}")
    lines.append(f"*Pass Price:* {format_price(report.pass_price)}")
    lines.append(f"*Fail Price:* {format_price(report.fail_price)}")
    if report.pass_price > 0 and report.fail_price > 0:
        diff = compute_threshold(report.pass_price, report.fail_price)
        lines.append(f"*Price Difference:* {format_threshold(diff)}")
    lines.append("")

    lines.extend(_change_lines(report))
    lines.append("")
    lines.append(_status_line(report.current, pass_threshold))
    lines.append("")
    lines.append(f"_Updated: {_utc(report.timestamp)}_")
    return "\n".join(lines)
