"""
Focus Flow desktop app: tray icon, minute poll, session and summary windows.

Every tray menu action is marshalled onto the tk thread with
``root.after(0, ...)``; pystray runs its own loop on a daemon thread.
"""
from __future__ import annotations

import datetime
import platform
import threading
import tkinter as tk
from typing import Any, Callable, Optional

from . import __version__
from .exercises import ZONE_LABELS, ZONES, Exercise, load_catalog
from .icon import create_tray_icon
from .ledger import CompletionLedger
from .reminders import ConsoleBackend, ReminderDispatcher, TrayBackend
from .schedule import (
    active_work_schedule,
    current_session_id,
    format_interval,
    format_schedule_range,
    format_time_until,
    is_active_session,
    next_session,
    scheduled_sessions,
    time_until_next,
)
from .selector import PLACEHOLDER_EXERCISE, initial_exercise, pick_smart
from .sound import play_completion_sound
from .stats import (
    format_seconds_to_minutes,
    load_history,
    record_completed_exercise,
    week_date_range_label,
    weekly_daily_counts,
    weekly_session_count,
    weekly_total_seconds,
    weekly_zone_distribution,
)
from .storage import Store, load_advanced_settings, load_preferences

try:
    import pystray
    HAS_TRAY = True
except ImportError:
    HAS_TRAY = False

# ─── Platform ────────────────────────────────────────────────
IS_MAC = platform.system() == "Darwin"
IS_WIN = platform.system() == "Windows"
FONT = "Helvetica Neue" if IS_MAC else "Segoe UI" if IS_WIN else "DejaVu Sans"
MONO = "Menlo" if IS_MAC else "Consolas" if IS_WIN else "DejaVu Sans Mono"

# ─── Named Constants ─────────────────────────────────────────
POLL_SECONDS = 60
TEST_POLL_SECONDS = 5
TEST_EXERCISE_SECONDS = 10

# ─── Colours ─────────────────────────────────────────────────
C_BG = "#2e3440";   C_CARD = "#3b4252";   C_CARD_IN = "#434c5e"
C_ACCENT = "#a3be8c";   C_ACCENT2 = "#88c0d0"
C_BTN_PRI = "#5e81ac";  C_BTN_SEC = "#4c566a"
C_TEXT = "#eceff4";  C_TEXT_DIM = "#d8dee9";  C_TEXT_MUT = "#8f9aab"
C_CD = "#ebcb8b";    C_OK = "#a3be8c"

ZONE_COLOURS = {
    "cuello": "#b48ead",
    "hombros": "#5e81ac",
    "espalda": "#a3be8c",
    "cadera": "#d08770",
    "piernas": "#bf616a",
    "de_pie": "#8fbcbb",
}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
class FocusFlowApp:

    def __init__(self, store: Store, test_mode: bool = False):
        self.store = store
        self.test_mode = test_mode
        self.root = tk.Tk()
        self.root.withdraw()

        self.paused = False
        self.tray = None
        self.dispatcher = ReminderDispatcher(ConsoleBackend())
        self.current_exercise: Exercise = initial_exercise(load_catalog(store))

        self._poll_id: Optional[str] = None
        self._countdown_id: Optional[str] = None
        self._prompt_win: Optional[tk.Toplevel] = None
        self._session_win: Optional[tk.Toplevel] = None
        self._summary_win: Optional[tk.Toplevel] = None
        self._prompted: set[tuple[datetime.date, int]] = set()

        if HAS_TRAY:
            threading.Thread(target=self._run_tray, daemon=True).start()
        else:
            self.root.bind_all("<Control-q>", lambda e: self._quit())

        self._print_schedule()
        self._tick()

    def run(self) -> None:
        self.root.mainloop()

    # ━━━ Helpers ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _now(self) -> datetime.datetime:
        return datetime.datetime.now()

    def _sessions(self):
        return scheduled_sessions(load_advanced_settings(self.store))

    def _ledger(self) -> CompletionLedger:
        return CompletionLedger(self.store, self._now().date())

    def _centre(self, win: tk.Toplevel, w: int, h: int) -> None:
        sw, sh = win.winfo_screenwidth(), win.winfo_screenheight()
        win.geometry(f"{w}x{h}+{(sw-w)//2}+{(sh-h)//2}")

    def _btn(self, p: tk.Frame, text: str, bg: str, cmd: Callable, bold: bool = False) -> tk.Button:
        wt = "bold" if bold else "normal"
        b = tk.Button(p, text=text, font=(FONT, 10, wt), bg=bg, fg=C_TEXT,
                      relief="flat", padx=18, pady=5, cursor="hand2", command=cmd)
        b.pack(side="left", padx=6)
        return b

    def _close(self, attr: str) -> None:
        win = getattr(self, attr)
        setattr(self, attr, None)
        if win is not None:
            try:
                win.destroy()
            except tk.TclError:
                pass

    @staticmethod
    def _fmt_mm_ss(sec: int) -> str:
        m, s = divmod(max(0, sec), 60)
        return f"{m}:{s:02d}"

    # ━━━ Scheduling ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _tick(self) -> None:
        if not self.paused:
            self._check()
        self._update_tray_icon()
        interval = TEST_POLL_SECONDS if self.test_mode else POLL_SECONDS
        self._poll_id = self.root.after(interval * 1000, self._tick)

    def _check(self) -> None:
        now = self._now()
        sessions = self._sessions()
        if not is_active_session(sessions, self._ledger(), now):
            return
        self.dispatcher.poll(self.store, now)

        session_id = current_session_id(sessions, now)
        key = (now.date(), session_id)
        if session_id is None or key in self._prompted:
            return
        if self._prompt_win is None and self._session_win is None:
            self._prompted.add(key)
            self._show_prompt()

    # ━━━ Session prompt ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _show_prompt(self) -> None:
        if self._prompt_win is not None:
            try:
                self._prompt_win.lift()
                return
            except tk.TclError:
                self._prompt_win = None

        win = tk.Toplevel(self.root)
        win.title("Focus Flow")
        win.attributes("-topmost", True)
        win.configure(bg=C_BG)
        self._centre(win, 460, 300)
        win.protocol("WM_DELETE_WINDOW", lambda: self._close("_prompt_win"))
        self._prompt_win = win

        card = tk.Frame(win, bg=C_CARD, padx=24, pady=18)
        card.pack(fill="both", expand=True, padx=2, pady=2)
        tk.Label(card, text="Es hora de tu pausa activa", font=(FONT, 15, "bold"),
                 fg=C_ACCENT, bg=C_CARD).pack(pady=(0, 10))

        self._prompt_name = tk.StringVar()
        self._prompt_detail = tk.StringVar()
        tk.Label(card, textvariable=self._prompt_name, font=(FONT, 12, "bold"),
                 fg=C_TEXT, bg=C_CARD, wraplength=400).pack()
        tk.Label(card, textvariable=self._prompt_detail, font=(FONT, 10),
                 fg=C_TEXT_DIM, bg=C_CARD, justify="center", wraplength=400).pack(pady=(6, 16))
        self._refresh_prompt()

        bf = tk.Frame(card, bg=C_CARD)
        bf.pack()
        self._btn(bf, "Empezar", C_BTN_PRI, self._start_session, bold=True)
        self._btn(bf, "Otro ejercicio", C_BTN_SEC, self._skip_exercise)
        self._btn(bf, "Ahora no", C_BTN_SEC, lambda: self._close("_prompt_win"))

    def _refresh_prompt(self) -> None:
        ex = self.current_exercise
        self._prompt_name.set(ex.name)
        self._prompt_detail.set(f"{ZONE_LABELS.get(ex.zone, ex.zone)} · {ex.duration_seconds}s\n"
                                f"{ex.movement}\n{ex.objective}")

    def _skip_exercise(self) -> None:
        self.current_exercise = pick_smart(self.store, self._now().date(),
                                           exclude_id=self.current_exercise.id,
                                           current=self.current_exercise)
        self._refresh_prompt()

    # ━━━ Active session ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _start_session(self) -> None:
        self._close("_prompt_win")
        if self.current_exercise.id == PLACEHOLDER_EXERCISE.id:
            print("  [!] No exercises match your posture preferences.")
            return
        ex = self.current_exercise
        dur = TEST_EXERCISE_SECONDS if self.test_mode else ex.duration_seconds

        win = tk.Toplevel(self.root)
        win.title(f"Focus Flow - {ex.name}")
        win.attributes("-topmost", True)
        win.configure(bg=C_BG)
        self._centre(win, 480, 360)
        win.protocol("WM_DELETE_WINDOW", self._abandon_session)
        self._session_win = win

        card = tk.Frame(win, bg=C_CARD, padx=28, pady=20)
        card.pack(fill="both", expand=True, padx=2, pady=2)
        tk.Label(card, text=ex.name, font=(FONT, 15, "bold"),
                 fg=C_ACCENT2, bg=C_CARD, wraplength=420).pack(pady=(0, 8))
        tk.Label(card, text=ex.movement, font=(FONT, 11), fg=C_TEXT,
                 bg=C_CARD, wraplength=420).pack()
        tk.Label(card, text=ex.objective, font=(FONT, 10), fg=C_TEXT_DIM,
                 bg=C_CARD, wraplength=420).pack(pady=(4, 0))
        if ex.variants:
            variants = "  ·  ".join(v.name for v in ex.variants)
            tk.Label(card, text=f"Variantes: {variants}", font=(FONT, 9),
                     fg=C_TEXT_MUT, bg=C_CARD, wraplength=420).pack(pady=(6, 0))

        self._cd_var = tk.StringVar(value=self._fmt_mm_ss(dur))
        tk.Label(card, textvariable=self._cd_var, font=(MONO, 40, "bold"),
                 fg=C_CD, bg=C_CARD).pack(pady=(14, 10))

        bf = tk.Frame(card, bg=C_CARD)
        bf.pack()
        self._btn(bf, "Terminar ya", C_BTN_PRI, self._complete_session)
        self._btn(bf, "Cancelar", C_BTN_SEC, self._abandon_session)

        self._countdown(dur)

    def _countdown(self, rem: int) -> None:
        if self._session_win is None:
            return
        self._cd_var.set(self._fmt_mm_ss(rem))
        if rem <= 0:
            self._complete_session()
            return
        self._countdown_id = self.root.after(1000, lambda: self._countdown(rem - 1))

    def _cancel_countdown(self) -> None:
        if self._countdown_id is not None:
            try:
                self.root.after_cancel(self._countdown_id)
            except tk.TclError:
                pass
            self._countdown_id = None

    def _abandon_session(self) -> None:
        self._cancel_countdown()
        self._close("_session_win")

    def _complete_session(self) -> None:
        self._cancel_countdown()
        self._close("_session_win")
        now = self._now()
        session_id = current_session_id(self._sessions(), now)
        if session_id is not None:
            self._ledger().mark_completed(session_id)
        record_completed_exercise(self.store, self.current_exercise, now)
        if load_preferences(self.store).get("sound", True):
            play_completion_sound()
        print(f"  [OK] {self.current_exercise.name} completado a las {now:%H:%M}")

        self.current_exercise = pick_smart(self.store, now.date(),
                                           exclude_id=self.current_exercise.id,
                                           current=self.current_exercise)
        self._update_tray_icon()

    # ━━━ Weekly summary ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _show_summary_win(self) -> None:
        if self._summary_win is not None:
            try:
                self._summary_win.lift();  self._summary_win.focus_force();  return
            except tk.TclError:
                self._summary_win = None

        today = self._now().date()
        history = load_history(self.store)

        win = tk.Toplevel(self.root)
        win.title("Focus Flow - Resumen semanal")
        win.geometry("400x520")
        win.configure(bg=C_BG)
        win.protocol("WM_DELETE_WINDOW", lambda: self._close("_summary_win"))
        self._summary_win = win

        tk.Label(win, text="Resumen semanal", font=(FONT, 15, "bold"),
                 fg=C_ACCENT2, bg=C_BG).pack(pady=(14, 2))
        tk.Label(win, text=week_date_range_label(today), font=(FONT, 10),
                 fg=C_TEXT_MUT, bg=C_BG).pack(pady=(0, 10))

        tf = tk.Frame(win, bg=C_CARD, padx=16, pady=12)
        tf.pack(fill="x", padx=14, pady=(0, 8))
        count = weekly_session_count(history, today)
        total = weekly_total_seconds(history, today)
        tk.Label(tf, text=f"Pausas completadas: {count}\n"
                          f"Tiempo activo: {format_seconds_to_minutes(total)}",
                 font=(FONT, 11), fg=C_TEXT, bg=C_CARD, justify="left").pack(anchor="w")

        # Daily bars, Monday to Sunday
        cf = tk.Frame(win, bg=C_CARD, padx=16, pady=12)
        cf.pack(fill="x", padx=14, pady=(0, 8))
        tk.Label(cf, text="Actividad diaria", font=(FONT, 12, "bold"),
                 fg=C_TEXT, bg=C_CARD).pack(anchor="w")
        canvas = tk.Canvas(cf, width=340, height=110, bg=C_CARD, highlightthickness=0)
        canvas.pack(pady=(8, 4))
        days = weekly_daily_counts(history, today)
        max_val = max(1, max(d["count"] for d in days))
        bar_width, gap = 35, 12
        for i, day in enumerate(days):
            x = 15 + i * (bar_width + gap)
            h = 70 * day["count"] / max_val
            colour = C_ACCENT if day["isToday"] else C_BTN_PRI
            if day["count"]:
                canvas.create_rectangle(x, 85 - h, x + bar_width, 85, fill=colour, outline="")
                canvas.create_text(x + bar_width / 2, 78 - h, text=str(day["count"]),
                                   fill=C_TEXT_DIM, font=(FONT, 8))
            canvas.create_text(x + bar_width / 2, 100, text=day["day"],
                               fill=C_TEXT if day["isToday"] else C_TEXT_MUT,
                               font=(FONT, 9, "bold" if day["isToday"] else "normal"))

        # Zone distribution
        zf = tk.Frame(win, bg=C_CARD, padx=16, pady=12)
        zf.pack(fill="x", padx=14, pady=(0, 8))
        tk.Label(zf, text="Zonas trabajadas", font=(FONT, 12, "bold"),
                 fg=C_TEXT, bg=C_CARD).pack(anchor="w")
        dist = weekly_zone_distribution(history, today)
        top = max(1, max(v["count"] for v in dist.values()))
        for zone in ZONES:
            row = tk.Frame(zf, bg=C_CARD)
            row.pack(fill="x", pady=1)
            tk.Label(row, text=ZONE_LABELS[zone], width=9, anchor="w", font=(FONT, 9),
                     fg=C_TEXT_DIM, bg=C_CARD).pack(side="left")
            bar = tk.Canvas(row, width=220, height=12, bg=C_CARD_IN, highlightthickness=0)
            bar.pack(side="left", padx=(4, 6))
            bar.create_rectangle(0, 0, 220 * dist[zone]["count"] / top, 12,
                                 fill=ZONE_COLOURS[zone], outline="")
            tk.Label(row, text=str(dist[zone]["count"]), font=(FONT, 9),
                     fg=C_TEXT_MUT, bg=C_CARD).pack(side="left")

    # ━━━ Console ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _print_schedule(self) -> None:
        try:
            advanced = load_advanced_settings(self.store)
            sessions = scheduled_sessions(advanced)
            print()
            print("  +-----------------------------------------------+")
            print(f"  |          Focus Flow {__version__:<8s} -- Schedule       |")
            print("  +-----------------------------------------------+")
            for s in sessions:
                print(f"  |  Sesión {s.id:>2d}   {s.label:<32s}|")
            print("  +-----------------------------------------------+")
            print(f"  |  {format_schedule_range(sessions):<45s}|")
            print(f"  |  {format_interval(active_work_schedule(advanced)):<45s}|")
            now = self._now()
            upcoming = next_session(sessions, now)
            until = time_until_next(sessions, now)
            if upcoming and until:
                line = f"Next: {upcoming.label} (in {format_time_until(until)})"
                print(f"  |  {line:<45s}|")
            print("  +-----------------------------------------------+")
            if not HAS_TRAY:
                print("\n  [!] No tray icon (pystray not available).")
                print("      pip install pystray pillow   (Ctrl+Q quits)")
            print()
        except (UnicodeEncodeError, OSError):
            pass  # consoles that can't print

    # ━━━ Tray ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _progress(self) -> float:
        total = len(self._sessions())
        return self._ledger().completed_count() / total if total else 0.0

    def _update_tray_icon(self) -> None:
        if self.tray is None:
            return
        try:
            self.tray.icon = create_tray_icon(self._progress(), self.paused)
            self.tray.title = "Focus Flow (en pausa)" if self.paused else "Focus Flow"
        except (OSError, ValueError, AttributeError):
            pass

    def _run_tray(self) -> None:
        img = create_tray_icon(self._progress(), self.paused)
        menu = pystray.Menu(
            pystray.MenuItem("Open", lambda icon, item: self.root.after(0, self._show_prompt),
                             default=True, visible=False),
            pystray.MenuItem("Iniciar pausa ahora",
                lambda icon, item: self.root.after(0, self._show_prompt)),
            pystray.MenuItem("Resumen semanal",
                lambda icon, item: self.root.after(0, self._show_summary_win)),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem(
                lambda item: "Reanudar avisos" if self.paused else "Pausar avisos",
                lambda icon, item: self.root.after(0, self._toggle_pause)),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Salir", self._quit),
        )
        self.tray = pystray.Icon("focus_flow", img, "Focus Flow", menu)
        self.dispatcher.backend = TrayBackend(self.tray)
        self.dispatcher.fallback = ConsoleBackend()
        self.tray.run()

    def _toggle_pause(self) -> None:
        self.paused = not self.paused
        self._update_tray_icon()

    def _quit(self, icon: Optional[Any] = None, item: Optional[Any] = None) -> None:
        if self.tray is not None:
            self.tray.stop()
        self.root.after(0, self._shutdown)

    def _shutdown(self) -> None:
        if self._poll_id is not None:
            self.root.after_cancel(self._poll_id)
            self._poll_id = None
        self._cancel_countdown()
        for attr in ("_prompt_win", "_session_win", "_summary_win"):
            self._close(attr)
        self.root.quit()
