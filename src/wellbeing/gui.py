from __future__ import annotations

import logging
import sys
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk

from ._util import _fmt_when, configure_logging
from .aggregate import chart_series, history_view
from .breathing import IDLE_TEXT, SCALE_REST, BreathingTimer
from .entries import EntryStore, MoodEntry
from .export import EXPORT_FILENAME, write_csv
from .moods import DEFAULT_INTENSITY, INTENSITY_MAX, INTENSITY_MIN, MOODS, parse_intensity, parse_mood
from .paths import resolve_data_path
from .quotes import random_quote
from .safety import UnsafeDataPath, assert_safe_data_path
from .storage import JsonFileSlots

logger = logging.getLogger("wellbeing.gui")

BAR_FILL = "#6b2b8a"
LINE_FILL = "#ff7a7a"
BREATH_FILL = "#a78bfa"
SAVE_MSG_MS = 2000


class WellbeingApp(tk.Tk):
    def __init__(self, store: EntryStore, data_path: Path | None = None):
        super().__init__()
        self.title("Wellbeing")
        self.geometry("960x640")
        self.store = store
        self.data_path = data_path

        self._chart_redraw_job: str | None = None
        self._save_msg_job: str | None = None
        self._row_ids: dict[str, str] = {}  # treeview item -> entry id
        self._entries: list[MoodEntry] = []

        self._relax_win: tk.Toplevel | None = None
        self._breath: BreathingTimer | None = None

        self._build_header()
        self._build_body()

        self.store.subscribe(self._on_entries_changed)
        self._on_entries_changed(self.store.read_all())

    # -------- Crash guard --------

    def report_callback_exception(self, exc, val, tb):  # type: ignore[override]
        logger.error("Unhandled error in Tk callback", exc_info=(exc, val, tb))
        messagebox.showerror("Crash prevented", f"{exc.__name__}: {val}")

    def _safe_cmd(self, fn):
        def wrapped(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                logger.exception("Command %s failed", getattr(fn, "__name__", fn))
                messagebox.showerror("Crash prevented", f"{type(e).__name__}: {e}")
                return None

        return wrapped

    # -------------------------
    # Layout
    # -------------------------

    def _build_header(self) -> None:
        frm = ttk.Frame(self, padding=10)
        frm.pack(fill="x")

        ttk.Label(frm, text="Wellbeing", font=("TkDefaultFont", 16, "bold")).pack(side="left")
        if self.data_path is not None:
            ttk.Label(frm, text=str(self.data_path), foreground="#666").pack(side="left", padx=12)

        ttk.Button(frm, text="Relax", command=self._safe_cmd(self._open_relax)).pack(side="right", padx=4)
        ttk.Button(frm, text="Inspire me", command=self._safe_cmd(self._show_quote)).pack(side="right", padx=4)

        self.quote_var = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.quote_var, foreground="#555", padding=(10, 0)).pack(anchor="w")

    def _build_body(self) -> None:
        body = ttk.Frame(self, padding=10)
        body.pack(fill="both", expand=True)

        left = ttk.Frame(body)
        right = ttk.Frame(body)
        left.pack(side="left", fill="y", padx=(0, 10))
        right.pack(side="right", fill="both", expand=True)

        self._build_form(left)
        self._build_history(right)
        self._build_chart(right)

    def _build_form(self, parent: ttk.Frame) -> None:
        ttk.Label(parent, text="How are you feeling?", font=("TkDefaultFont", 12, "bold")).pack(
            anchor="w", pady=(0, 8)
        )

        self.mood_var = tk.StringVar(value=MOODS[0])
        ttk.Label(parent, text="Mood").pack(anchor="w")
        ttk.Combobox(parent, textvariable=self.mood_var, values=list(MOODS), state="readonly", width=14).pack(
            anchor="w", pady=(0, 8)
        )

        self.intensity_var = tk.IntVar(value=DEFAULT_INTENSITY)
        row = ttk.Frame(parent)
        row.pack(fill="x")
        ttk.Label(row, text="Intensity").pack(side="left")
        self.int_label = ttk.Label(row, text=str(DEFAULT_INTENSITY), width=3)
        self.int_label.pack(side="right")
        tk.Scale(
            parent,
            from_=INTENSITY_MIN,
            to=INTENSITY_MAX,
            resolution=1,
            orient="horizontal",
            showvalue=False,
            variable=self.intensity_var,
            command=self._on_intensity_slide,
        ).pack(fill="x", pady=(0, 8))

        ttk.Button(parent, text="Save", command=self._safe_cmd(self._save_entry)).pack(fill="x", pady=(8, 0))

        self.save_msg = tk.StringVar(value="")
        ttk.Label(parent, textvariable=self.save_msg, foreground="#0b6b2a").pack(anchor="w", pady=(6, 0))

    def _build_history(self, parent: ttk.Frame) -> None:
        ttk.Label(parent, text="History (newest first)", font=("TkDefaultFont", 12, "bold")).pack(anchor="w")

        frame = ttk.Frame(parent)
        frame.pack(fill="both", expand=True, pady=8)
        self.history = ttk.Treeview(frame, columns=("time", "mood", "intensity"), show="headings", height=8)
        for col, label, width in (("time", "Time", 200), ("mood", "Mood", 120), ("intensity", "Intensity", 80)):
            self.history.heading(col, text=label)
            self.history.column(col, width=width, anchor="w")
        sb = ttk.Scrollbar(frame, orient="vertical", command=self.history.yview)
        self.history.configure(yscrollcommand=sb.set)
        sb.pack(side="right", fill="y")
        self.history.pack(side="left", fill="both", expand=True)

        btns = ttk.Frame(parent)
        btns.pack(fill="x")
        ttk.Button(btns, text="Delete selected", command=self._safe_cmd(self._delete_selected)).pack(side="left")
        ttk.Button(btns, text="Clear all", command=self._safe_cmd(self._clear_all)).pack(side="left", padx=6)
        ttk.Button(btns, text="Export CSV", command=self._safe_cmd(self._export_csv)).pack(side="right")

    def _build_chart(self, parent: ttk.Frame) -> None:
        self.chart_canvas = tk.Canvas(parent, height=240, background="white", highlightthickness=0)
        self.chart_canvas.pack(fill="both", expand=True, pady=(10, 0))
        self.chart_canvas.bind("<Configure>", self._schedule_chart_redraw)

    # -------------------------
    # Input
    # -------------------------

    def _on_intensity_slide(self, raw: str) -> None:
        self.int_label.configure(text=str(int(float(raw))))

    def _save_entry(self) -> None:
        try:
            mood = parse_mood(self.mood_var.get())
            intensity = parse_intensity(self.intensity_var.get())
        except ValueError as e:
            messagebox.showerror("Can't save", str(e))
            return

        self.store.append(mood, intensity)
        self._flash_save_msg("Mood saved!")

    def _flash_save_msg(self, text: str) -> None:
        if self._save_msg_job is not None:
            self.after_cancel(self._save_msg_job)
        self.save_msg.set(text)
        self._save_msg_job = self.after(SAVE_MSG_MS, self._clear_save_msg)

    def _clear_save_msg(self) -> None:
        self._save_msg_job = None
        self.save_msg.set("")

    # -------------------------
    # History
    # -------------------------

    def _on_entries_changed(self, entries: list[MoodEntry]) -> None:
        self._entries = entries
        self._refresh_history()
        self._draw_chart()

    def _refresh_history(self) -> None:
        self.history.delete(*self.history.get_children())
        self._row_ids.clear()
        for e in history_view(self._entries):
            item = self.history.insert("", tk.END, values=(_fmt_when(e.time), e.mood, e.intensity))
            self._row_ids[item] = e.id

    def _delete_selected(self) -> None:
        sel = self.history.selection()
        if not sel:
            return
        if not messagebox.askyesno("Confirm delete", "Delete selected mood entry? This cannot be undone."):
            return
        for entry_id in {self._row_ids[item] for item in sel if item in self._row_ids}:
            self.store.delete_by_id(entry_id)

    def _clear_all(self) -> None:
        if not messagebox.askyesno("Clear all", "Clear all mood entries?"):
            return
        self.store.clear_all()

    def _export_csv(self) -> None:
        entries = self.store.read_all()
        if not entries:
            messagebox.showinfo("Export", "No entries to export")
            return

        path = filedialog.asksaveasfilename(
            title="Export mood history",
            defaultextension=".csv",
            initialfile=EXPORT_FILENAME,
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")],
        )
        if not path:
            return

        try:
            out = write_csv(entries, Path(path))
        except OSError as e:
            messagebox.showerror("Export failed", f"Could not write CSV:\n{e}")
            return
        messagebox.showinfo("Exported", f"Saved {len(entries)} entries → {out}")

    # -------------------------
    # Chart
    # -------------------------

    def _schedule_chart_redraw(self, _evt=None) -> None:
        if self._chart_redraw_job is not None:
            self.after_cancel(self._chart_redraw_job)
        self._chart_redraw_job = self.after(120, self._draw_chart)

    def _draw_chart(self) -> None:
        self._chart_redraw_job = None
        canvas = self.chart_canvas
        canvas.delete("all")

        labels, counts, avgs = chart_series(self._entries)

        w = max(1, canvas.winfo_width())
        h = max(1, canvas.winfo_height())
        pad_l, pad_r, pad_t, pad_b = 40, 40, 24, 28
        plot_w = max(1, w - pad_l - pad_r)
        plot_h = max(1, h - pad_t - pad_b)

        if not self._entries:
            canvas.create_text(w // 2, h // 2, text="No mood data", fill="#666")
            return

        count_max = max(1, max(counts))
        avg_max = float(INTENSITY_MAX)
        slot = plot_w / len(labels)
        y_bottom = pad_t + plot_h

        def y_count(v: float) -> float:
            return y_bottom - (v / count_max) * plot_h

        def y_avg(v: float) -> float:
            return y_bottom - (min(v, avg_max) / avg_max) * plot_h

        def x_mid(i: int) -> float:
            return pad_l + slot * (i + 0.5)

        # axes: counts on the left, average intensity on the right
        canvas.create_line(pad_l, pad_t, pad_l, y_bottom, fill="#444")
        canvas.create_line(w - pad_r, pad_t, w - pad_r, y_bottom, fill="#444")
        canvas.create_line(pad_l, y_bottom, w - pad_r, y_bottom, fill="#444")
        for tick in sorted({0, count_max // 2, count_max}):
            canvas.create_text(pad_l - 6, y_count(tick), text=str(tick), anchor="e", fill="#444")
        for tick in (0, 5, 10):
            canvas.create_text(w - pad_r + 6, y_avg(tick), text=str(tick), anchor="w", fill=LINE_FILL)

        bar_w = slot * 0.5
        for i, (label, c) in enumerate(zip(labels, counts)):
            x = x_mid(i)
            if c:
                canvas.create_rectangle(x - bar_w / 2, y_count(c), x + bar_w / 2, y_bottom, outline="", fill=BAR_FILL)
            canvas.create_text(x, h - 10, text=label, fill="#444")

        pts: list[float] = []
        for i, v in enumerate(avgs):
            pts.extend([x_mid(i), y_avg(v)])
        canvas.create_line(*pts, fill=LINE_FILL, width=2, smooth=True)
        for i, v in enumerate(avgs):
            x, y = x_mid(i), y_avg(v)
            canvas.create_oval(x - 3, y - 3, x + 3, y + 3, outline="", fill=LINE_FILL)

        canvas.create_text(pad_l, 10, text="■ Count", anchor="w", fill=BAR_FILL)
        canvas.create_text(w - pad_r, 10, text="● Avg Intensity", anchor="e", fill=LINE_FILL)

    # -------------------------
    # Quote
    # -------------------------

    def _show_quote(self) -> None:
        self.quote_var.set(random_quote())

    # -------------------------
    # Relaxation dialog
    # -------------------------

    def _open_relax(self) -> None:
        if self._relax_win is not None and self._relax_win.winfo_exists():
            self._relax_win.lift()
            return

        win = tk.Toplevel(self)
        win.title("Relax")
        win.resizable(False, False)
        self._relax_win = win

        canvas = tk.Canvas(win, width=260, height=260, background="white", highlightthickness=0)
        canvas.pack(padx=20, pady=(20, 8))
        circle = canvas.create_oval(0, 0, 0, 0, outline="", fill=BREATH_FILL)

        text_var = tk.StringVar(value=IDLE_TEXT)
        ttk.Label(win, textvariable=text_var, font=("TkDefaultFont", 13, "bold")).pack()

        def on_phase(text: str, scale: float) -> None:
            if not canvas.winfo_exists():
                return
            r = 110 * scale
            canvas.coords(circle, 130 - r, 130 - r, 130 + r, 130 + r)
            text_var.set(text)

        on_phase(IDLE_TEXT, SCALE_REST)
        timer = BreathingTimer(self, on_phase)
        self._breath = timer

        btns = ttk.Frame(win, padding=12)
        btns.pack(fill="x")
        ttk.Button(btns, text="Start", command=self._safe_cmd(timer.start)).pack(side="left", expand=True, fill="x")
        ttk.Button(btns, text="Stop", command=self._safe_cmd(self._close_relax)).pack(
            side="left", expand=True, fill="x", padx=6
        )
        ttk.Button(btns, text="Close", command=self._safe_cmd(self._close_relax)).pack(
            side="left", expand=True, fill="x"
        )

        win.protocol("WM_DELETE_WINDOW", self._close_relax)
        win.bind("<Destroy>", lambda e: self._stop_breathing() if e.widget is win else None)

    def _stop_breathing(self) -> None:
        if self._breath is not None:
            self._breath.stop()
            self._breath = None

    def _close_relax(self) -> None:
        self._stop_breathing()
        if self._relax_win is not None:
            win, self._relax_win = self._relax_win, None
            if win.winfo_exists():
                win.destroy()


# -------------------------
# GUI Entrypoint
# -------------------------


def run_gui(data_path: Path | None = None, allow_repo_data_path: bool = False) -> None:
    if data_path is None:
        configure_logging()
        data_path = resolve_data_path(None, None)
    try:
        assert_safe_data_path(data_path, allow_repo_data_path)
    except UnsafeDataPath as e:
        print(f"🚫 {e}", file=sys.stderr)
        raise SystemExit(2) from e
    logger.info("Using data file %s", data_path)
    app = WellbeingApp(EntryStore(JsonFileSlots(data_path)), data_path)
    app.mainloop()


if __name__ == "__main__":
    run_gui()
