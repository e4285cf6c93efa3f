"""
PS3Dec GUI
Yet another GUI for PS3Dec: pick the executable and an ISO, set the key or
let ps3dec find it, run it and watch its console output.
"""

import os
import logging
import tkinter as tk
from tkinter import filedialog

import customtkinter as ctk

from ps3dec_config import (
    load_config, save_config, clamp_thread_count, step_thread_count,
)
from ps3dec_runner import (
    launch, ValidationError, apply_messages, open_url, LINKS,
)

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Look
# ---------------------------------------------------------------------------

APP_TITLE = "PS3Dec GUI"
POLL_MS = 50

C = {
    "bg":        "#1a1b1e",
    "surface":   "#25262b",
    "surface2":  "#2c2e33",
    "border":    "#373a40",
    "text":      "#c1c2c5",
    "dimmed":    "#909296",
    "bright":    "#e9ecef",
    "accent":    "#339af0",
    "accent_h":  "#228be6",
    "green":     "#40c057",
    "green_d":   "#2b8a3e",
    "green_dd":  "#237032",
    "red":       "#fa5252",
    "log_bg":    "#141517",
}


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

class Ps3DecApp(ctk.CTk):
    def __init__(self):
        super().__init__()

        self.config_data = load_config()
        # replaced wholesale on every launch; a superseded ps3dec keeps running
        self.session = None

        self.title(APP_TITLE)
        self.geometry("800x560")
        self.resizable(False, False)
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")
        self.configure(fg_color=C["bg"])

        # ── Title Bar ────────────────────────────────────────────────────
        title_frame = ctk.CTkFrame(self, fg_color=C["surface"], corner_radius=0, height=56)
        title_frame.pack(fill="x")
        title_frame.pack_propagate(False)

        title_inner = ctk.CTkFrame(title_frame, fg_color="transparent")
        title_inner.pack(fill="x", padx=24)

        ctk.CTkLabel(
            title_inner, text=APP_TITLE,
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=C["bright"]
        ).pack(side="left", pady=14)

        ctk.CTkLabel(
            title_inner, text="Yet another GUI for PS3Dec",
            font=ctk.CTkFont(size=12), text_color=C["dimmed"]
        ).pack(side="right", pady=14)

        main = ctk.CTkFrame(self, fg_color="transparent")
        main.pack(fill="both", expand=True, padx=20, pady=(12, 12))

        # ── Panel: Settings ──────────────────────────────────────────────
        grid = ctk.CTkFrame(main, fg_color=C["surface"], corner_radius=8)
        grid.pack(fill="x", pady=(0, 8))
        grid.grid_columnconfigure(2, weight=1)

        # ps3dec executable
        self._grid_label(grid, 0, "ps3dec Executable:")
        ctk.CTkButton(
            grid, text="Select Executable", width=140, height=28,
            fg_color=C["surface2"], hover_color=C["border"],
            text_color=C["text"], border_width=1, border_color=C["border"],
            command=self.browse_executable
        ).grid(row=0, column=1, padx=8, pady=(10, 4), sticky="w")
        self.exe_label = self._path_label(grid, 0, self.config_data.ps3dec_path)

        # ISO file
        self._grid_label(grid, 1, "ISO File:")
        ctk.CTkButton(
            grid, text="Select ISO", width=140, height=28,
            fg_color=C["surface2"], hover_color=C["border"],
            text_color=C["text"], border_width=1, border_color=C["border"],
            command=self.browse_iso
        ).grid(row=1, column=1, padx=8, pady=4, sticky="w")
        self.iso_label = self._path_label(grid, 1, self.config_data.iso_path)

        # Decryption key
        self._grid_label(grid, 2, "Decryption Key:")
        self.key_var = ctk.StringVar(value=self.config_data.decryption_key)
        ctk.CTkEntry(
            grid, textvariable=self.key_var,
            font=ctk.CTkFont(family="Consolas", size=12),
            fg_color=C["surface2"], border_color=C["border"],
            text_color=C["text"]
        ).grid(row=2, column=1, columnspan=2, padx=(8, 12), pady=4, sticky="ew")
        self.key_var.trace_add("write", self._on_key_change)

        # Thread count
        self._grid_label(grid, 3, "Thread Count:")
        stepper = ctk.CTkFrame(grid, fg_color="transparent")
        stepper.grid(row=3, column=1, padx=8, pady=4, sticky="w")
        ctk.CTkButton(
            stepper, text="-", width=28, height=28,
            fg_color=C["surface2"], hover_color=C["border"], text_color=C["text"],
            command=lambda: self._step_threads(-1)
        ).pack(side="left")
        self.threads_var = ctk.StringVar(value=str(self.config_data.thread_count))
        self.threads_entry = ctk.CTkEntry(
            stepper, textvariable=self.threads_var, width=60, justify="center",
            font=ctk.CTkFont(family="Consolas", size=12),
            fg_color=C["surface2"], border_color=C["border"],
            text_color=C["text"]
        )
        self.threads_entry.pack(side="left", padx=4)
        self.threads_entry.bind("<Return>", self._commit_threads)
        self.threads_entry.bind("<FocusOut>", self._commit_threads)
        ctk.CTkButton(
            stepper, text="+", width=28, height=28,
            fg_color=C["surface2"], hover_color=C["border"], text_color=C["text"],
            command=lambda: self._step_threads(1)
        ).pack(side="left")
        self._note(grid, 3, "Note: too many threads will hang ps3dec.")

        # Auto key detection
        self._grid_label(grid, 4, "Automatic key detection:", pady=(4, 10))
        self.auto_var = ctk.BooleanVar(value=self.config_data.auto)
        ctk.CTkCheckBox(
            grid, text="", variable=self.auto_var, width=24,
            fg_color=C["accent"], hover_color=C["accent_h"],
            border_color=C["border"], command=self._on_auto_change
        ).grid(row=4, column=1, padx=8, pady=(4, 10), sticky="w")
        self._note(grid, 4, "Note: 'keys/' in ps3dec directory", pady=(4, 10))

        # ── Status ───────────────────────────────────────────────────────
        self.status_label = ctk.CTkLabel(
            main, text="", anchor="w",
            font=ctk.CTkFont(size=12), text_color=C["dimmed"]
        )
        self.status_label.pack(fill="x")

        # ── Output Log ───────────────────────────────────────────────────
        self.log_text = ctk.CTkTextbox(
            main, height=220,
            font=ctk.CTkFont(family="Consolas", size=11),
            fg_color=C["log_bg"], text_color=C["text"],
            border_width=1, border_color=C["border"], wrap="none"
        )
        self.log_text.pack(fill="both", expand=True, pady=(4, 8))
        self.log_text.configure(state="disabled")

        # ── Control Bar ──────────────────────────────────────────────────
        ctrl_frame = ctk.CTkFrame(main, fg_color="transparent")
        ctrl_frame.pack(fill="x", pady=(0, 8))

        self.run_btn = ctk.CTkButton(
            ctrl_frame, text="Run ps3dec", width=140, height=34,
            font=ctk.CTkFont(size=13, weight="bold"),
            fg_color=C["green_d"], hover_color=C["green_dd"],
            text_color="#ffffff", command=self.start_ps3dec
        )
        self.run_btn.pack(side="left")

        ctk.CTkButton(
            ctrl_frame, text="Copy to clipboard", width=140, height=34,
            font=ctk.CTkFont(size=12),
            fg_color=C["surface"], hover_color=C["surface2"],
            text_color=C["text"], border_width=1, border_color=C["border"],
            command=self.copy_log
        ).pack(side="left", padx=(8, 0))

        # ── Links ────────────────────────────────────────────────────────
        links_frame = ctk.CTkFrame(main, fg_color="transparent")
        links_frame.pack(fill="x")
        for caption, text, url in LINKS:
            ctk.CTkLabel(
                links_frame, text=caption,
                font=ctk.CTkFont(size=11), text_color=C["dimmed"]
            ).pack(side="left", padx=(0, 4))
            ctk.CTkButton(
                links_frame, text=text, width=70, height=24,
                font=ctk.CTkFont(size=11),
                fg_color=C["surface2"], hover_color=C["border"], text_color=C["accent"],
                command=lambda u=url: open_url(u)
            ).pack(side="left", padx=(0, 12))

        self.after(POLL_MS, self._poll_session)

    # ── Helpers ────────────────────────────────────────────────────────────

    @staticmethod
    def _grid_label(parent, row, text, pady=4):
        ctk.CTkLabel(
            parent, text=text,
            font=ctk.CTkFont(size=12), text_color=C["dimmed"]
        ).grid(row=row, column=0, padx=(12, 4), pady=pady, sticky="w")

    @staticmethod
    def _path_label(parent, row, text):
        lbl = ctk.CTkLabel(
            parent, text=text, anchor="w", wraplength=400, justify="left",
            font=ctk.CTkFont(family="Consolas", size=11), text_color=C["text"]
        )
        lbl.grid(row=row, column=2, padx=(4, 12), pady=4, sticky="ew")
        return lbl

    @staticmethod
    def _note(parent, row, text, pady=4):
        ctk.CTkLabel(
            parent, text=text, anchor="w",
            font=ctk.CTkFont(size=11), text_color=C["dimmed"]
        ).grid(row=row, column=2, padx=(4, 12), pady=pady, sticky="w")

    def _set_status(self, text, color=None):
        self.status_label.configure(text=text, text_color=color or C["dimmed"])

    def _save(self):
        save_config(self.config_data)

    # ── Field Changes ─────────────────────────────────────────────────────

    def _on_key_change(self, *_):
        self.config_data.decryption_key = self.key_var.get()
        self._save()

    def _on_auto_change(self):
        self.config_data.auto = bool(self.auto_var.get())
        self._save()

    def _set_threads(self, value):
        n = clamp_thread_count(value)
        self.threads_var.set(str(n))
        if n != self.config_data.thread_count:
            self.config_data.thread_count = n
            self._save()

    def _step_threads(self, delta):
        self._set_threads(step_thread_count(self.threads_var.get(), delta))

    def _commit_threads(self, _event=None):
        self._set_threads(self.threads_var.get())

    # ── File Browsers ─────────────────────────────────────────────────────

    @staticmethod
    def _initial_dir(current):
        d = os.path.dirname(current) if current else ""
        return d if os.path.isdir(d) else os.getcwd()

    def browse_executable(self):
        path = filedialog.askopenfilename(
            title="Select ps3dec Executable",
            initialdir=self._initial_dir(self.config_data.ps3dec_path)
        )
        if path:
            self.config_data.ps3dec_path = path
            self.exe_label.configure(text=path)
            self._save()

    def browse_iso(self):
        path = filedialog.askopenfilename(
            title="Select ISO",
            initialdir=self._initial_dir(self.config_data.iso_path),
            filetypes=[("ISO file", "*.iso"), ("All files", "*.*")]
        )
        if path:
            self.config_data.iso_path = path
            self.iso_label.configure(text=path)
            self._save()

    # ── Logging ───────────────────────────────────────────────────────────

    def append_log(self, text):
        self.log_text.configure(state="normal")
        self.log_text.insert("end", text)
        self.log_text.see("end")
        self.log_text.configure(state="disabled")

    def clear_log(self):
        self.log_text.configure(state="normal")
        self.log_text.delete("1.0", "end")
        self.log_text.configure(state="disabled")

    def copy_log(self):
        try:
            self.clipboard_clear()
            self.clipboard_append(self.log_text.get("1.0", "end-1c"))
        except tk.TclError as e:
            self._set_status(f"Clipboard copy failed: {e}", C["red"])

    # ── Run ───────────────────────────────────────────────────────────────

    def start_ps3dec(self):
        # a half-typed thread count still counts
        self._commit_threads()
        try:
            session = launch(self.config_data)
        except ValidationError as e:
            self._set_status(str(e), C["red"])
            return
        self.clear_log()
        self.session = session
        self._set_status("Running ps3dec...", C["accent"])
        log.info("%s", session.command_line)

    def _poll_session(self):
        session = self.session
        if session is not None and not session.finished:
            messages = session.drain()
            if messages:
                text, status, code = apply_messages(messages)
                if text:
                    self.append_log(text)
                if status is not None:
                    self._set_status(status, C["green"] if code == 0 else C["red"])
                    log.info("%s", status)
        self.after(POLL_MS, self._poll_session)


# ---------------------------------------------------------------------------
# Entry Point
# ---------------------------------------------------------------------------

def main():
    logging.basicConfig(
        level=getattr(logging, os.environ.get("PS3DEC_GUI_LOG", "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = Ps3DecApp()
    app.mainloop()


if __name__ == "__main__":
    main()
