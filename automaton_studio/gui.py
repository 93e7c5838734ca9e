from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import tkinter as tk
from tkinter import filedialog, messagebox

from .background import CHECKUP_INTERVAL_MS, BackgroundChecker
from .errors import InterpreterError
from .interpreter import BANNER, AutomatonInterpreter, BatchResult

THEMES: Dict[str, Dict[str, str]] = {
    "light": {
        "bg": "#f6f8fa",
        "surface": "#ffffff",
        "text": "#24292e",
        "muted": "#57606a",
        "input_bg": "#ffffff",
        "input_fg": "#24292e",
        "accent": "#0d6efd",
        "accent_fg": "#ffffff",
        "accent_hover": "#0b5ed7",
        "valid": "#2da44e",
        "invalid": "#cf222e",
    },
    "dark": {
        "bg": "#0d1117",
        "surface": "#161b22",
        "text": "#c9d1d9",
        "muted": "#8b949e",
        "input_bg": "#0d1117",
        "input_fg": "#c9d1d9",
        "accent": "#2f81f7",
        "accent_fg": "#0d1117",
        "accent_hover": "#508bff",
        "valid": "#3fb950",
        "invalid": "#f85149",
    },
}

DEFAULT_TEMPLATE = """/* strings over {a,b} that end with b */
#define verbose;
create dfa a,b;
add x,y;
connect x to a:x, b:y;
connect y -> a:x, b:y;
accept y;
#ifdef verbose;
show all;
#endif;
execute ab;
"""

TITLE = "Automaton Studio"


class AutomatonStudio(tk.Tk):
    def __init__(self) -> None:
        super().__init__()
        self.title(TITLE)
        self.geometry("1100x720")
        self.minsize(860, 560)

        self.interpreter = AutomatonInterpreter()
        self.current_theme = "light"
        self.status_var = tk.StringVar(value="Write commands and hit Run.")
        self._script_valid: Optional[bool] = None
        self._check_message = ""
        self._buttons: List[tk.Button] = []
        self._poll_after: Optional[str] = None

        self._checker = BackgroundChecker(self._on_check_finished)

        self._build_ui()
        self.apply_theme()
        self._write_output([BANNER])
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self._schedule_check()

    # ---------------------------------------------------------------
    def _build_ui(self) -> None:
        self.base_font = ("Segoe UI", 10)
        self.semibold_font = ("Segoe UI Semibold", 12)
        self.mono_font = ("JetBrains Mono", 10)

        self.header = tk.Frame(self, bd=0)
        self.header.pack(fill="x", padx=16, pady=(16, 8))
        self.title_label = tk.Label(self.header, text=TITLE, font=("Segoe UI Semibold", 16))
        self.title_label.pack(side="left")
        self.theme_button = self._button(self.header, "Dark mode", self.toggle_theme)
        self.theme_button.pack(side="right")

        self.body = tk.Frame(self, bd=0)
        self.body.pack(fill="both", expand=True, padx=16, pady=(0, 8))
        self.body.columnconfigure(0, weight=3)
        self.body.columnconfigure(1, weight=2)
        self.body.rowconfigure(1, weight=1)

        self.editor_label = tk.Label(self.body, text="Script", font=self.semibold_font)
        self.editor_label.grid(row=0, column=0, sticky="w")
        # the border colour reports the result of the background check
        self.editor_border = tk.Frame(self.body, bd=0, highlightthickness=2)
        self.editor_border.grid(row=1, column=0, sticky="nsew", padx=(0, 12), pady=(6, 0))
        self.editor_border.rowconfigure(0, weight=1)
        self.editor_border.columnconfigure(0, weight=1)
        self.editor = tk.Text(
            self.editor_border, wrap="none", font=self.mono_font, relief="flat", undo=True
        )
        self.editor.grid(row=0, column=0, sticky="nsew")
        self.editor.insert("1.0", DEFAULT_TEMPLATE)
        editor_scroll = tk.Scrollbar(self.editor_border, orient="vertical", command=self.editor.yview)
        editor_scroll.grid(row=0, column=1, sticky="ns")
        self.editor.configure(yscrollcommand=editor_scroll.set)

        self.output_label = tk.Label(self.body, text="Output", font=self.semibold_font)
        self.output_label.grid(row=0, column=1, sticky="w")
        self.output_text = tk.Text(
            self.body, wrap="word", font=self.mono_font, relief="flat", state="disabled"
        )
        self.output_text.grid(row=1, column=1, sticky="nsew", pady=(6, 0))

        self.actions = tk.Frame(self, bd=0)
        self.actions.pack(fill="x", padx=16, pady=(0, 8))
        self.run_button = self._button(self.actions, "Run", self.run_script)
        self.import_button = self._button(self.actions, "Import...", self.import_script)
        self.export_button = self._button(self.actions, "Export...", self.export_script)
        self.reset_button = self._button(self.actions, "Reset", self.reset_session)
        self.clear_button = self._button(self.actions, "Clear", self.clear)
        for button in (
            self.run_button,
            self.import_button,
            self.export_button,
            self.reset_button,
            self.clear_button,
        ):
            button.pack(side="left", padx=(0, 8))

        self.status_label = tk.Label(self, textvariable=self.status_var, anchor="w", font=self.base_font)
        self.status_label.pack(fill="x", padx=16, pady=(0, 12))

    def _button(self, parent: tk.Widget, text: str, command) -> tk.Button:
        button = tk.Button(parent, text=text, command=command, relief="flat", padx=16, pady=6)
        button.bind("<Enter>", lambda _event: self._on_button_hover(button, True))
        button.bind("<Leave>", lambda _event: self._on_button_hover(button, False))
        self._buttons.append(button)
        return button

    # ---------------------------------------------------------------
    def apply_theme(self) -> None:
        palette = THEMES[self.current_theme]
        self.configure(bg=palette["bg"])
        for frame in (self.header, self.body, self.actions):
            frame.configure(bg=palette["bg"])
        for label in (self.title_label, self.editor_label, self.output_label, self.status_label):
            label.configure(bg=palette["bg"], fg=palette["text"])
        for text in (self.editor, self.output_text):
            text.configure(
                bg=palette["input_bg"], fg=palette["input_fg"], insertbackground=palette["input_fg"]
            )
        for button in self._buttons:
            button.configure(
                bg=palette["accent"],
                fg=palette["accent_fg"],
                activebackground=palette["accent_hover"],
                activeforeground=palette["accent_fg"],
            )
        self.theme_button.configure(text="Light mode" if self.current_theme == "dark" else "Dark mode")
        self._paint_border()

    def toggle_theme(self) -> None:
        self.current_theme = "dark" if self.current_theme == "light" else "light"
        self.apply_theme()

    def _on_button_hover(self, button: tk.Button, entering: bool) -> None:
        palette = THEMES[self.current_theme]
        button.configure(bg=palette["accent_hover"] if entering else palette["accent"])

    def _paint_border(self) -> None:
        palette = THEMES[self.current_theme]
        if self._script_valid is None:
            color = palette["muted"]
        else:
            color = palette["valid"] if self._script_valid else palette["invalid"]
        self.editor_border.configure(highlightbackground=color, highlightcolor=color)

    # ---------------------------------------------------------------
    def _script(self) -> str:
        return self.editor.get("1.0", "end").strip()

    def run_script(self) -> None:
        code = self._script()
        if not code:
            messagebox.showinfo(TITLE, "Write some commands first.", parent=self)
            return
        if self.interpreter.is_closed:
            self.interpreter = AutomatonInterpreter()
        try:
            result = self.interpreter.execute_batch(code)
        except InterpreterError as exc:
            messagebox.showerror(TITLE, str(exc), parent=self)
            return
        self._show_result(result)
        if self.interpreter.is_closed:
            self.status_var.set("Interpreter closed; the next run starts a new session.")

    def import_script(self) -> None:
        path = filedialog.askopenfilename(parent=self, title="Import commands")
        if not path:
            return
        try:
            with open(path, "r", encoding="utf-8") as handle:
                code = handle.read()
        except OSError as exc:
            messagebox.showerror(TITLE, str(exc), parent=self)
            return
        self.editor.delete("1.0", "end")
        self.editor.insert("1.0", code)
        self.status_var.set(f"Loaded {path}.")

    def export_script(self) -> None:
        if not self.interpreter.exportable_record():
            messagebox.showinfo(TITLE, "Run some commands before exporting.", parent=self)
            return
        path = filedialog.asksaveasfilename(parent=self, title="Export commands")
        if not path:
            return
        try:
            count = self.interpreter.export_file(path)
        except OSError as exc:
            messagebox.showerror(TITLE, str(exc), parent=self)
            return
        self.status_var.set(f"Exported {count} command(s) to {path}.")

    def reset_session(self) -> None:
        self.interpreter = AutomatonInterpreter()
        self._write_output([BANNER])
        self.status_var.set("Session reset.")

    def clear(self) -> None:
        self.editor.delete("1.0", "end")
        self._write_output([])
        self.status_var.set("Cleared.")

    def _show_result(self, result: BatchResult) -> None:
        lines = list(result.messages)
        if result.success:
            self.status_var.set(f"Ran {len(result.results)} command(s).")
        else:
            lines.append(result.message)
            if result.failed_index is not None:
                self.status_var.set(f"Stopped at command {result.failed_index}.")
            else:
                self.status_var.set("Script rejected.")
        self._write_output(lines)

    def _write_output(self, lines: Sequence[str]) -> None:
        self.output_text.configure(state="normal")
        self.output_text.delete("1.0", "end")
        self.output_text.insert("1.0", "\n".join(lines))
        self.output_text.configure(state="disabled")
        self.output_text.see("end")

    # ---------------------------------------------------------------
    def _schedule_check(self) -> None:
        self._poll_after = self.after(CHECKUP_INTERVAL_MS, self._poll_check)

    def _poll_check(self) -> None:
        self._checker.submit(self._script())
        self._schedule_check()

    def _on_check_finished(self, result: Optional[BatchResult]) -> None:
        # runs on the checker thread; hand over to the Tk loop
        self.after(0, lambda: self._apply_check(result))

    def _apply_check(self, result: Optional[BatchResult]) -> None:
        if result is None:
            self._script_valid = None
            self._check_message = ""
        else:
            self._script_valid = result.success
            self._check_message = "" if result.success else result.message
        self._paint_border()
        if self._check_message:
            self.status_var.set(self._check_message.replace("\n", " "))

    def _on_close(self) -> None:
        if self._poll_after is not None:
            self.after_cancel(self._poll_after)
        self._checker.join(timeout=0.5)
        self.destroy()


def run_gui() -> int:
    app = AutomatonStudio()
    app.mainloop()
    return 0
