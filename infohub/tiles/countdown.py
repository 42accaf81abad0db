from __future__ import annotations

from typing import Any, Mapping

from infohub.escaping import esc
from infohub.tiles.base import Field, TileType, flag, text_of

COUNT_MODES = ("dynamic", "days", "hours", "timer")

COUNTDOWN_CSS = """
.countdown-description { color: var(--text-light); }
.countdown-display { font-size: 1.1rem; }
.countdown-value { font-size: 1.6rem; font-weight: 700; }
.countdown-timer { display: flex; align-items: flex-start; gap: 6px; }
.countdown-segment { display: inline-flex; flex-direction: column; align-items: center; }
.countdown-label { font-size: 0.75rem; color: var(--text-light); }
.countdown-separator { font-size: 1.6rem; font-weight: 700; }
.countdown-expired { font-weight: 600; }
""".strip()

COUNTDOWN_JS = """
function initCountdowns() {
    const DAY = 86400000, HOUR = 3600000, MINUTE = 60000;

    function plural(n, one, many) {
        return n === 1 ? one : many;
    }

    function value(n) {
        return '<span class="countdown-value">' + n + '</span>';
    }

    function segment(n, label) {
        return '<span class="countdown-segment">' + value(String(n).padStart(2, '0')) +
            '<span class="countdown-label">' + label + '</span></span>';
    }

    function format(diff, mode) {
        const days = Math.floor(diff / DAY);
        const hours = Math.floor((diff % DAY) / HOUR);
        const minutes = Math.floor((diff % HOUR) / MINUTE);
        const seconds = Math.floor((diff % MINUTE) / 1000);

        if (mode === 'days') {
            const total = Math.ceil(diff / DAY);
            return value(total) + ' ' + plural(total, 'day', 'days');
        }
        if (mode === 'hours') {
            const total = Math.ceil(diff / HOUR);
            return value(total) + ' ' + plural(total, 'hour', 'hours');
        }
        if (mode === 'timer') {
            const sep = '<span class="countdown-separator">:</span>';
            return '<div class="countdown-timer">' + segment(days, 'days') + sep + segment(hours, 'hrs') +
                sep + segment(minutes, 'min') + sep + segment(seconds, 'sec') + '</div>';
        }
        if (days > 7) {
            return value(days) + ' days left';
        }
        if (days >= 1) {
            return value(days) + ' ' + plural(days, 'day', 'days') + ' and ' +
                value(hours) + ' ' + plural(hours, 'hour', 'hours') + ' left';
        }
        if (hours >= 1) {
            return value(hours) + ' ' + plural(hours, 'hour', 'hours') + ' and ' +
                value(minutes) + ' ' + plural(minutes, 'minute', 'minutes') + ' left';
        }
        return value(minutes) + ' ' + plural(minutes, 'minute', 'minutes') + ' and ' +
            value(seconds) + ' ' + plural(seconds, 'second', 'seconds') + ' left';
    }

    document.querySelectorAll('.countdown-display[data-target]').forEach(countdown => {
        const target = new Date(countdown.dataset.target);
        const mode = countdown.dataset.mode || 'dynamic';
        const hideOnExpiry = countdown.dataset.hideOnExpiry === 'true';

        function update() {
            const diff = target - new Date();
            if (isNaN(diff)) return false;
            if (diff <= 0) {
                if (hideOnExpiry) {
                    const tile = countdown.closest('.tile');
                    if (tile) {
                        tile.dataset.expired = 'true';
                        tile.style.display = 'none';
                    }
                } else {
                    const expired = document.createElement('div');
                    expired.className = 'countdown-expired';
                    expired.textContent = countdown.dataset.expiredText || 'Expired';
                    countdown.replaceChildren(expired);
                }
                return false;
            }
            countdown.innerHTML = '<div class="countdown-content">' + format(diff, mode) + '</div>';
            return true;
        }

        if (update()) {
            const timer = setInterval(() => {
                if (!update()) clearInterval(timer);
            }, 1000);
        }
    });
}
""".strip()


class CountdownTile(TileType):
    key = "countdown"
    name = "Countdown"
    description = "Live countdown to a date and time"
    fields = (
        Field("title", "text", "Title", required=True, placeholder="e.g. Registration opens"),
        Field("showTitle", "checkbox", "Show title on page", default=True),
        Field("description", "text", "Description", placeholder="e.g. until registration"),
        Field("targetDate", "date", "Target date", required=True),
        Field("targetTime", "time", "Time", default="00:00"),
        Field(
            "countMode",
            "select",
            "Display mode",
            default="dynamic",
            options=(
                ("dynamic", "Dynamic (adapts)"),
                ("days", "Days (X days left)"),
                ("hours", "Hours (X hours left)"),
                ("timer", "Timer (DD:HH:MM:SS)"),
            ),
        ),
        Field("expiredText", "text", "Text after expiry", default="Expired", placeholder="e.g. Register now!"),
        Field("hideOnExpiry", "checkbox", "Hide after expiry", default=False),
    )

    def target(self, data: Mapping[str, Any]) -> str:
        date = text_of(data, "targetDate").strip()
        time = text_of(data, "targetTime").strip() or "00:00"
        return f"{date}T{time}:00"

    def render(self, data: Mapping[str, Any]) -> str:
        description = text_of(data, "description")
        mode = text_of(data, "countMode") or "dynamic"
        if mode not in COUNT_MODES:
            mode = "dynamic"
        expired_text = text_of(data, "expiredText") or "Expired"
        hide = "true" if flag(data, "hideOnExpiry", False) else "false"

        html_out = self.title_html(data, default_show=True)
        if description:
            html_out += f'<p class="countdown-description">{esc(description)}</p>\n'
        html_out += (
            f'<div class="countdown-display" data-target="{esc(self.target(data))}" '
            f'data-mode="{mode}" data-expired-text="{esc(expired_text)}" '
            f'data-hide-on-expiry="{hide}">\n'
            '    <div class="countdown-loading">Loading...</div>\n'
            "</div>\n"
        )
        return html_out

    def css(self) -> str:
        return COUNTDOWN_CSS

    def js(self) -> str:
        return COUNTDOWN_JS

    def init_function(self) -> str | None:
        return "initCountdowns"
