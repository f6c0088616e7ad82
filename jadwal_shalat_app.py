#!/usr/bin/env python3
"""
Jadwal Shalat desktop widget
Always-on-top window showing:
  - Current location and date (Gregorian + Hijri when the server answered)
  - Daily prayer times
  - Countdown to the next prayer, refreshed every second
  - An accuracy notice whenever local calculation or offline data is used
"""

import argparse
import datetime
import logging
import sys
import threading
import tkinter as tk

import pytz

from jadwal.config import CONFIG_FILE, ConfigError, build_service, load_config
from jadwal.logger import setup_logging
from jadwal.models import PRAYER_DISPLAY, PRAYER_NAMES, PROVENANCE_REMOTE
from jadwal.next_prayer import select_next_prayer, seconds_until, time_str_to_dt

# ──────────────────────────────────────────────────────────────────────────────
# Theme constants
# ──────────────────────────────────────────────────────────────────────────────
BG_DARK = "#0d1117"
BG_CARD = "#161b22"
BG_NEXT = "#1a3a2a"          # row of the upcoming prayer
BORDER_COLOR = "#2ea043"
ACCENT_GOLD = "#f0c040"
ACCENT_GREEN = "#3fb950"
TEXT_WHITE = "#e6edf3"
TEXT_DIM = "#8b949e"
TEXT_RED = "#ff6b6b"
TEXT_WARN = "#ffa07a"        # degraded-accuracy notice

FONT_PIXEL = ("Courier", 10, "bold")
FONT_PIXEL_SM = ("Courier", 8)
FONT_PIXEL_LG = ("Courier", 14, "bold")
FONT_TITLE = ("Courier", 12, "bold")
FONT_CLOCK = ("Courier", 22, "bold")

WINDOW_W = 420
WINDOW_H = 620

REFRESH_MS = 1000  # update countdown every second

INFO_ONLY = ("Sunrise", "Sunset", "Midnight")


class PrayerTimesWidget:
    def __init__(self, root: tk.Tk, service):
        self.root = root
        self.service = service
        self._drag_x = 0
        self._drag_y = 0

        self.state = None          # PrayerTimesState of the last finished refresh
        self.tz = pytz.utc
        self._loading = False
        self._closed = False
        self._tick_id = None

        self._setup_window()
        self._build_ui()
        self.refresh()
        self._tick()

    # ──────────────────────────────────────────────────────────────────────
    # Window setup
    # ──────────────────────────────────────────────────────────────────────
    def _setup_window(self):
        root = self.root
        root.title("Jadwal Shalat")
        root.configure(bg=BG_DARK)
        root.resizable(False, False)
        root.overrideredirect(True)
        root.attributes("-topmost", True)

        x = root.winfo_screenwidth() - WINDOW_W - 40
        y = (root.winfo_screenheight() - WINDOW_H) // 2
        root.geometry(f"{WINDOW_W}x{WINDOW_H}+{x}+{y}")

        root.bind("<ButtonPress-1>", self._on_drag_start)
        root.bind("<B1-Motion>", self._on_drag_motion)
        root.protocol("WM_DELETE_WINDOW", self.close)

    def _on_drag_start(self, event):
        self._drag_x = event.x_root - self.root.winfo_x()
        self._drag_y = event.y_root - self.root.winfo_y()

    def _on_drag_motion(self, event):
        self.root.geometry(f"+{event.x_root - self._drag_x}+{event.y_root - self._drag_y}")

    # ──────────────────────────────────────────────────────────────────────
    # UI construction
    # ──────────────────────────────────────────────────────────────────────
    def _build_ui(self):
        outer = tk.Frame(self.root, bg=BORDER_COLOR, bd=0)
        outer.pack(fill=tk.BOTH, expand=True, padx=2, pady=2)
        inner = tk.Frame(outer, bg=BG_DARK, bd=0)
        inner.pack(fill=tk.BOTH, expand=True, padx=1, pady=1)

        # ── title bar ─────────────────────────────────────────────────────
        title_bar = tk.Frame(inner, bg=BG_CARD, height=32)
        title_bar.pack(fill=tk.X, side=tk.TOP)
        title_bar.pack_propagate(False)

        tk.Label(
            title_bar, text="  🕌  JADWAL SHALAT", font=FONT_PIXEL,
            fg=ACCENT_GOLD, bg=BG_CARD,
        ).pack(side=tk.LEFT, padx=6)

        tk.Button(
            title_bar, text=" ✕ ", font=FONT_PIXEL_SM, fg=TEXT_RED, bg=BG_CARD,
            activeforeground=TEXT_WHITE, activebackground="#3a1a1a",
            bd=0, cursor="hand2", command=self.close,
        ).pack(side=tk.RIGHT, padx=4, pady=4)

        self.btn_refresh = tk.Button(
            title_bar, text=" ⟳ ", font=FONT_PIXEL_SM, fg=ACCENT_GREEN, bg=BG_CARD,
            activeforeground=TEXT_WHITE, activebackground=BG_NEXT,
            bd=0, cursor="hand2", command=self.refresh,
        )
        self.btn_refresh.pack(side=tk.RIGHT, pady=4)

        # ── location and dates ────────────────────────────────────────────
        self.lbl_location = tk.Label(
            inner, text="📍 Mendeteksi lokasi…", font=FONT_PIXEL,
            fg=TEXT_DIM, bg=BG_DARK, wraplength=WINDOW_W - 30,
        )
        self.lbl_location.pack(pady=(8, 0), padx=10)

        self.lbl_date = tk.Label(inner, text="", font=FONT_PIXEL, fg=TEXT_WHITE, bg=BG_DARK)
        self.lbl_date.pack()

        self.lbl_hijri = tk.Label(inner, text="", font=FONT_PIXEL, fg=ACCENT_GOLD, bg=BG_DARK)
        self.lbl_hijri.pack()

        self.lbl_clock = tk.Label(
            inner, text="00:00:00", font=FONT_CLOCK, fg=ACCENT_GOLD, bg=BG_DARK, pady=4,
        )
        self.lbl_clock.pack()

        # ── prayer times grid ─────────────────────────────────────────────
        self.prayer_frame = tk.Frame(inner, bg=BG_DARK)
        self.prayer_frame.pack(fill=tk.X, padx=10, pady=4)
        self.prayer_rows: dict = {}
        self._build_prayer_rows()

        # ── next prayer countdown ─────────────────────────────────────────
        tk.Label(inner, text="SHALAT BERIKUTNYA", font=FONT_PIXEL, fg=TEXT_DIM, bg=BG_DARK).pack(pady=(6, 0))

        self.lbl_next_name = tk.Label(inner, text="—", font=FONT_PIXEL_LG, fg=ACCENT_GREEN, bg=BG_DARK)
        self.lbl_next_name.pack()

        self.lbl_countdown = tk.Label(inner, text="--:--:--", font=FONT_CLOCK, fg=ACCENT_GOLD, bg=BG_DARK)
        self.lbl_countdown.pack()

        # ── status / accuracy notice ──────────────────────────────────────
        self.lbl_notice = tk.Label(
            inner, text="Memuat jadwal shalat…", font=FONT_PIXEL_SM,
            fg=TEXT_DIM, bg=BG_DARK, wraplength=WINDOW_W - 30, justify=tk.CENTER,
        )
        self.lbl_notice.pack(side=tk.BOTTOM, pady=8, padx=10)

    def _build_prayer_rows(self):
        """Create one row per prayer name; informational rows are dimmed."""
        for name in PRAYER_NAMES:
            fg = TEXT_DIM if name in INFO_ONLY else TEXT_WHITE
            row = tk.Frame(self.prayer_frame, bg=BG_CARD, pady=1)
            row.pack(fill=tk.X, pady=1)

            lbl_name = tk.Label(
                row, text=f"  {PRAYER_DISPLAY[name]}", font=FONT_PIXEL,
                fg=fg, bg=BG_CARD, anchor="w", width=20,
            )
            lbl_name.pack(side=tk.LEFT, padx=4)

            lbl_time = tk.Label(
                row, text="--:--", font=FONT_PIXEL_LG, fg=fg, bg=BG_CARD, anchor="e", width=8,
            )
            lbl_time.pack(side=tk.RIGHT, padx=4)

            self.prayer_rows[name] = {"row": row, "lbl_name": lbl_name, "lbl_time": lbl_time, "fg": fg}

    # ──────────────────────────────────────────────────────────────────────
    # Data loading (runs in background thread)
    # ──────────────────────────────────────────────────────────────────────
    def refresh(self):
        """Start a fresh resolve → fetch → calculate chain."""
        if self._closed:
            return
        self._loading = True
        self.lbl_notice.config(text="Memuat jadwal shalat…", fg=TEXT_DIM)
        t = threading.Thread(target=self._load_data, daemon=True)
        t.start()

    def _load_data(self):
        try:
            state = self.service.refresh(on_status=self._on_status)
        except Exception as exc:
            logging.exception("[APP] Refresh failed")
            message = str(exc)
            self._post(lambda: self._on_data_error(message))
            return
        self._post(lambda: self._on_data_loaded(state))

    def _on_status(self, message: str):
        """Called from the worker thread with retry progress."""
        self._post(lambda: self._show_status(message))

    def _show_status(self, message: str):
        if self._closed or not self._loading:
            return
        self.lbl_notice.config(text=message, fg=TEXT_DIM)

    def _post(self, callback):
        """Hand a result to the Tk thread unless the window is gone."""
        if self._closed:
            return
        try:
            self.root.after(0, callback)
        except (RuntimeError, tk.TclError):
            # interpreter already torn down
            pass

    def _on_data_loaded(self, state):
        if self._closed:
            return
        self._loading = False
        self.state = state
        try:
            self.tz = pytz.timezone(state.location.timezone)
        except pytz.UnknownTimeZoneError:
            self.tz = pytz.utc

        loc = state.location
        self.lbl_location.config(
            text=f"📍 {loc.name}",
            fg=TEXT_DIM if loc.is_fallback else ACCENT_GREEN,
        )

        times = state.prayer_times
        for name, widgets in self.prayer_rows.items():
            widgets["lbl_time"].config(text=times.get(name, "--:--"))

        hijri = times.hijri
        if hijri:
            self.lbl_hijri.config(text=f"☪  {hijri['day']} {hijri['month_name']} {hijri['year']} H")
        else:
            self.lbl_hijri.config(text="")

        if state.disclaimer:
            fg = TEXT_DIM if state.provenance == PROVENANCE_REMOTE else TEXT_WARN
            self.lbl_notice.config(text=f"⚠ {state.disclaimer}", fg=fg)
        else:
            self.lbl_notice.config(text="")

    def _on_data_error(self, message: str):
        if self._closed:
            return
        self._loading = False
        self.lbl_notice.config(text=f"⚠ Gagal memuat jadwal shalat: {message[:80]}", fg=TEXT_RED)

    # ──────────────────────────────────────────────────────────────────────
    # Live clock + countdown tick
    # ──────────────────────────────────────────────────────────────────────
    def _tick(self):
        """Called every second to update the live clock and countdown."""
        if self._closed:
            return
        now = datetime.datetime.now(self.tz)
        self.lbl_clock.config(text=now.strftime("%H:%M:%S"))
        self.lbl_date.config(text=f"📅 {now.strftime('%A, %d %B %Y')}")

        if self.state is not None:
            self._update_countdown(now)

        self._tick_id = self.root.after(REFRESH_MS, self._tick)

    def _update_countdown(self, now):
        times = self.state.prayer_times
        nxt = select_next_prayer(times, now)
        self.lbl_next_name.config(text=nxt.localized_name)
        color = TEXT_RED if nxt.seconds_remaining < 300 else ACCENT_GOLD
        self.lbl_countdown.config(text=nxt.countdown, fg=color)

        for name, widgets in self.prayer_rows.items():
            is_next = name == nxt.name
            bg = BG_NEXT if is_next else BG_CARD
            fg = ACCENT_GREEN if is_next else widgets["fg"]
            if name not in INFO_ONLY and not is_next and name in times.timings:
                # prayers already passed today are dimmed
                if seconds_until(time_str_to_dt(times[name], now), now) < 0:
                    fg = TEXT_DIM
            widgets["row"].config(bg=bg)
            widgets["lbl_name"].config(bg=bg, fg=fg)
            widgets["lbl_time"].config(bg=bg, fg=fg)

    # ──────────────────────────────────────────────────────────────────────
    # Shutdown
    # ──────────────────────────────────────────────────────────────────────
    def close(self):
        """Stop the tick and destroy the window; in-flight loads are discarded."""
        self._closed = True
        if self._tick_id is not None:
            self.root.after_cancel(self._tick_id)
            self._tick_id = None
        self.root.destroy()


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────
def main(argv=None):
    parser = argparse.ArgumentParser(description="Jadwal Shalat desktop widget")
    parser.add_argument("--config", default=CONFIG_FILE, help="path to config.json")
    parser.add_argument("--log-level", default=None, help="override log level (DEBUG, INFO, ...)")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    setup_logging(config["log_dir"], args.log_level or config["log_level"])

    try:
        service = build_service(config)
    except ConfigError as e:
        logging.error(f"[APP] {e}")
        return 2

    root = tk.Tk()
    PrayerTimesWidget(root, service)
    root.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
