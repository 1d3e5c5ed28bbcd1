"""
Main GUI application — Gemini Chat.

Layout
------
┌──────────────────────────────────────────────────┐
│ Menu: File | Settings                             │
├──────────────────────────────────────────────────┤
│ Gem: [Default ▾]  [⇄ Synthesis] [+ Gem ▾] [🔍 Search]│  ← mode_frame
│                                          [status] │
├──────────────────────────────────────────────────┤
│                                                   │
│   Chat display (scrollable, text and images)      │  ← chat_frame
│                                                   │
├──────────────────────────────────────────────────┤
│  [📎 notes.pdf ✕]  [📎 photo.png ✕]               │  ← attach_frame (hidden when empty)
├──────────────────────────────────────────────────┤
│ [📎] │ Input text area…               │ [Send][👁][🗑]│  ← input_frame
└──────────────────────────────────────────────────┘

The window is a thin projection of a :class:`~gemini_chat.modes.ModeState`:
widgets call the :class:`~gemini_chat.modes.ModeController` transitions and
then redraw themselves from the new state.
"""

import json
import logging
import queue
import threading
import tkinter as tk
from tkinter import filedialog, messagebox, scrolledtext, ttk

from .composer import IMAGE_MODEL
from .errors import AttachmentError, InvalidRequest, MissingCredential
from .gemini_api import GeminiAPIError
from .modes import ModeController
from .session import ChatSession, error_text
from .settings import DEFAULT_MODEL, Settings

log = logging.getLogger("gemini_chat")


# ---------------------------------------------------------------------------
# Settings dialog
# ---------------------------------------------------------------------------

class _SettingsDialog(tk.Toplevel):
    """Edit the API key, the model name and the saved gems."""

    def __init__(self, parent: tk.Tk, settings: Settings) -> None:
        super().__init__(parent)
        self.title("Settings")
        self.geometry("560x460")
        self.grab_set()
        self.saved = False

        self._settings = settings

        f = ttk.Frame(self, padding=12)
        f.pack(fill=tk.BOTH, expand=True)

        ttk.Label(f, text="Gemini API Key",
                  font=("", 10, "bold")).pack(anchor=tk.W)
        ttk.Label(f, text="Enter your Google Gemini API key here.",
                  foreground="#555").pack(anchor=tk.W)
        self._key_var = tk.StringVar(value=settings.get_api_key())
        ttk.Entry(f, textvariable=self._key_var, show="•").pack(
            fill=tk.X, pady=(2, 10),
        )

        ttk.Label(f, text="Gemini Model Name",
                  font=("", 10, "bold")).pack(anchor=tk.W)
        ttk.Label(
            f,
            text=f"Enter the model name to use (e.g., {DEFAULT_MODEL}).",
            foreground="#555",
        ).pack(anchor=tk.W)
        self._model_var = tk.StringVar(value=settings.get_model())
        ttk.Entry(f, textvariable=self._model_var).pack(fill=tk.X, pady=(2, 10))

        ttk.Label(f, text="Saved Gems (JSON)",
                  font=("", 10, "bold")).pack(anchor=tk.W)
        ttk.Label(
            f,
            text='A JSON array of objects with "name" and "instruction" '
                 'properties.',
            foreground="#555",
        ).pack(anchor=tk.W)
        self._gems = scrolledtext.ScrolledText(f, wrap=tk.WORD, height=10,
                                               font=("Courier", 10))
        self._gems.pack(fill=tk.BOTH, expand=True, pady=(2, 8))
        self._gems.insert(tk.END, settings.personas_json())

        btn_row = ttk.Frame(f)
        btn_row.pack(fill=tk.X)
        ttk.Button(btn_row, text="Save",
                   command=self._save).pack(side=tk.RIGHT, padx=4)
        ttk.Button(btn_row, text="Cancel",
                   command=self.destroy).pack(side=tk.RIGHT)

    def _save(self) -> None:
        self._settings.set_api_key(self._key_var.get())
        self._settings.set_model(self._model_var.get())
        gems_text = self._gems.get("1.0", tk.END).strip() or "[]"
        if not self._settings.set_personas_json(gems_text):
            messagebox.showwarning(
                "Saved Gems",
                'Saved Gems must be a JSON array like\n'
                '[{"name": "My Gem", "instruction": "You are..."}]\n\n'
                "The previous gems were kept.",
                parent=self,
            )
        self.saved = True
        self.destroy()


# ---------------------------------------------------------------------------
# Main application
# ---------------------------------------------------------------------------

class GeminiChatApp:
    """Gemini Chat — main application class and :class:`ChatSurface`."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.root = tk.Tk()
        self.root.title("Gemini Chat")
        self.root.geometry("900x700")
        self.root.minsize(640, 480)

        self._settings = settings or Settings()
        self._session = ChatSession(self._settings, self)
        self._modes = ModeController()
        self._queue: queue.Queue = queue.Queue()
        self._images: list[tk.PhotoImage] = []   # keep references alive

        self._persona_var = tk.StringVar()
        self._secondary_var = tk.StringVar()
        self._search_var = tk.BooleanVar(value=False)
        self._status_var = tk.StringVar()

        self._build_menu()
        self._build_mode_bar()
        self._build_chat_area()
        self._build_attach_area()
        self._build_input_area()

        self._refresh_persona_choices()
        self._sync_mode_widgets()
        self._greet()
        self._pump_queue()

        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_menu(self) -> None:
        bar = tk.Menu(self.root)
        self.root.config(menu=bar)

        file_menu = tk.Menu(bar, tearoff=False)
        bar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="Attach File…", command=self._attach_file)
        file_menu.add_command(label="Clear Chat", command=self._clear_chat)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self._on_close)

        settings_menu = tk.Menu(bar, tearoff=False)
        bar.add_cascade(label="Settings", menu=settings_menu)
        settings_menu.add_command(label="Settings…",
                                  command=self._show_settings)

    def _build_mode_bar(self) -> None:
        frame = ttk.LabelFrame(self.root, text="Gem", padding=(8, 4))
        frame.pack(fill=tk.X, padx=10, pady=(6, 0))

        self._persona_cb = ttk.Combobox(
            frame, textvariable=self._persona_var,
            state="readonly", width=22,
        )
        self._persona_cb.pack(side=tk.LEFT, padx=(0, 8))
        self._persona_cb.bind("<<ComboboxSelected>>", self._on_persona_selected)

        self._synth_btn = ttk.Button(frame, text="⇄ Synthesis",
                                     command=self._toggle_synthesis)
        self._synth_btn.pack(side=tk.LEFT, padx=4)

        # Packed only while synthesis is active.
        self._secondary_cb = ttk.Combobox(
            frame, textvariable=self._secondary_var,
            state="readonly", width=22,
        )
        self._secondary_cb.bind("<<ComboboxSelected>>",
                                self._on_secondary_selected)

        self._search_btn = ttk.Checkbutton(
            frame, text="🔍 Search", variable=self._search_var,
            command=self._toggle_search,
        )
        self._search_btn.pack(side=tk.LEFT, padx=8)

        ttk.Label(frame, textvariable=self._status_var,
                  foreground="#444").pack(side=tk.RIGHT, padx=10)

    def _build_chat_area(self) -> None:
        frame = ttk.Frame(self.root)
        frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=6)

        self._chat = scrolledtext.ScrolledText(
            frame, wrap=tk.WORD, state=tk.DISABLED,
            font=("", 10), relief=tk.SUNKEN, borderwidth=1,
        )
        self._chat.pack(fill=tk.BOTH, expand=True)

        # Colour / font tags
        self._chat.tag_config("user_lbl",
                              foreground="#005cc5", font=("", 10, "bold"))
        self._chat.tag_config("asst_lbl",
                              foreground="#6f42c1", font=("", 10, "bold"))
        self._chat.tag_config("sys_lbl",
                              foreground="#6c757d", font=("", 9, "italic"))
        self._chat.tag_config("user_msg", foreground="#1a1a2e")
        self._chat.tag_config("asst_msg", foreground="#1a1a2e")
        self._chat.tag_config("sys_msg",
                              foreground="#6c757d", font=("", 9, "italic"))
        self._chat.tag_config("err_msg", foreground="#c0392b")

    def _build_attach_area(self) -> None:
        """Build the (initially hidden) attachment bar."""
        self._attach_outer = ttk.LabelFrame(
            self.root, text="Attachments", padding=(6, 4)
        )
        # Not packed yet; shown only when attachments are present.
        self._attach_inner = ttk.Frame(self._attach_outer)
        self._attach_inner.pack(fill=tk.X)

    def _build_input_area(self) -> None:
        outer = ttk.Frame(self.root, padding=(10, 4))
        outer.pack(fill=tk.X, side=tk.BOTTOM)
        self._input_frame = outer  # saved reference used by _refresh_attach_bar

        btn_col = ttk.Frame(outer)
        btn_col.grid(row=0, column=0, sticky="ns", padx=(0, 6))
        ttk.Button(btn_col, text="📎", width=4,
                   command=self._attach_file).pack(pady=2)

        self._input = scrolledtext.ScrolledText(
            outer, height=4, wrap=tk.WORD, font=("", 10),
            relief=tk.SUNKEN, borderwidth=1,
        )
        self._input.grid(row=0, column=1, sticky="nsew")
        self._input.bind("<Return>", self._on_enter_key)
        # Shift+Return → literal newline (handled by default)

        act_col = ttk.Frame(outer)
        act_col.grid(row=0, column=2, sticky="ns", padx=(6, 0))

        self._send_btn = ttk.Button(act_col, text="Send ➤",
                                    command=self._send, width=9)
        self._send_btn.pack(pady=2)
        ttk.Button(act_col, text="Preview 👁", command=self._preview_payload,
                   width=9).pack(pady=2)
        ttk.Button(act_col, text="Clear 🗑", command=self._clear_chat,
                   width=9).pack(pady=2)

        outer.columnconfigure(1, weight=1)

    # ------------------------------------------------------------------
    # ChatSurface
    # ------------------------------------------------------------------

    def append_text(self, sender: str, text: str) -> None:
        role = {"User": "user", "Gemini": "asst"}.get(sender, "system")
        self._append(f"{sender}:", text, role)

    def append_image(self, data_uri: str) -> None:
        self._append("Gemini:", "", "asst")
        b64 = data_uri.partition(",")[2]
        try:
            image = tk.PhotoImage(data=b64)
        except tk.TclError as exc:
            log.warning("[APP] Could not decode generated image: %s", exc)
            self.append_error(error_text(f"Could not display image ({exc})."))
            return
        # Scale large images down so they fit the chat column.
        factor = max(1, image.width() // 512)
        if factor > 1:
            image = image.subsample(factor, factor)
        self._images.append(image)
        self._chat.config(state=tk.NORMAL)
        self._chat.image_create(tk.END, image=image)
        self._chat.config(state=tk.DISABLED)
        self._chat.see(tk.END)

    def append_error(self, message: str) -> None:
        self._append("System:", message, "error")

    # ------------------------------------------------------------------
    # Chat display helpers
    # ------------------------------------------------------------------

    def _append(self, label: str, body: str, role: str) -> None:
        """Append a complete message block to the chat display."""
        self._chat.config(state=tk.NORMAL)
        if self._chat.get("1.0", tk.END).strip() or self._images:
            self._chat.insert(tk.END, "\n\n")

        tag_map = {
            "user":   ("user_lbl",  "user_msg"),
            "asst":   ("asst_lbl",  "asst_msg"),
            "system": ("sys_lbl",   "sys_msg"),
            "error":  ("sys_lbl",   "err_msg"),
        }
        lbl_tag, body_tag = tag_map.get(role, ("sys_lbl", "sys_msg"))

        self._chat.insert(tk.END, f"{label}\n", lbl_tag)
        if body:
            self._chat.insert(tk.END, body, body_tag)
        self._chat.config(state=tk.DISABLED)
        self._chat.see(tk.END)

    def _sys_msg(self, text: str) -> None:
        self._append("System:", text, "system")

    def _greet(self) -> None:
        if self._settings.get_api_key():
            self._status_var.set(f"✅  {self._settings.get_model()}")
            self._sys_msg(
                "Gemini Chat is ready.\n"
                "Pick a gem above and start chatting.\n"
                "Use Shift+Enter for multi-line input; Enter to send."
            )
        else:
            self._status_var.set("⚠️  No API key")
            self._sys_msg(
                "Welcome to Gemini Chat!\n"
                "Go to Settings → Settings… to enter your Gemini API key."
            )

    # ------------------------------------------------------------------
    # Queue pump (bridges worker thread → main thread)
    # ------------------------------------------------------------------

    def _pump_queue(self) -> None:
        try:
            while True:
                kind, payload = self._queue.get_nowait()
                if kind == "result":
                    self._session.render(payload)
                    self._send_btn.config(state=tk.NORMAL)
                elif kind == "error":
                    self.append_error(payload)
                    self._send_btn.config(state=tk.NORMAL)
        except queue.Empty:
            pass
        self.root.after(40, self._pump_queue)

    # ------------------------------------------------------------------
    # Mode toggles
    # ------------------------------------------------------------------

    def _refresh_persona_choices(self) -> None:
        names = self._session.catalog.names()
        self._persona_cb.config(values=names)
        self._secondary_cb.config(values=names)
        # Saved gems may have been renamed or removed; built-ins never change.
        state = self._modes.state
        if not state.active_persona.is_builtin:
            self._modes.select_persona(
                self._session.catalog.resolve(state.active_persona.name))
        if not state.secondary_persona.is_builtin:
            self._modes.select_secondary_persona(
                self._session.catalog.resolve(state.secondary_persona.name))

    def _sync_mode_widgets(self) -> None:
        """Redraw every toggle from the current :class:`ModeState`."""
        state = self._modes.state
        self._persona_var.set(state.active_persona.name)
        self._secondary_var.set(state.secondary_persona.name)
        self._search_var.set(state.search_active)

        if state.synthesis_active:
            self._synth_btn.config(text="⇄ Synthesis ✓")
            self._secondary_cb.pack(side=tk.LEFT, padx=4,
                                    after=self._synth_btn)
        else:
            self._synth_btn.config(text="⇄ Synthesis")
            self._secondary_cb.pack_forget()

        if state.image_mode:
            self._status_var.set(f"🖼  {IMAGE_MODEL}")
        elif self._settings.get_api_key():
            self._status_var.set(f"✅  {self._settings.get_model()}")

    def _on_persona_selected(self, _event=None) -> None:
        persona = self._session.catalog.resolve(self._persona_var.get())
        self._modes.select_persona(persona)
        self._sync_mode_widgets()

    def _on_secondary_selected(self, _event=None) -> None:
        persona = self._session.catalog.resolve(self._secondary_var.get())
        self._modes.select_secondary_persona(persona)
        self._sync_mode_widgets()

    def _toggle_synthesis(self) -> None:
        self._modes.toggle_synthesis()
        self._sync_mode_widgets()

    def _toggle_search(self) -> None:
        self._modes.toggle_search()
        self._sync_mode_widgets()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _show_settings(self) -> None:
        dlg = _SettingsDialog(self.root, self._settings)
        self.root.wait_window(dlg)
        if dlg.saved:
            self._session.reload_personas()
            self._refresh_persona_choices()
            self._sync_mode_widgets()
            if not self._settings.get_api_key():
                self._status_var.set("⚠️  No API key")
            self._sys_msg("Settings saved.")

    # ------------------------------------------------------------------
    # File attachments
    # ------------------------------------------------------------------

    def _attach_file(self) -> None:
        path = filedialog.askopenfilename(
            title="Attach File",
            filetypes=[
                ("Images",    "*.png *.jpg *.jpeg *.gif *.webp *.heic"),
                ("Documents", "*.pdf *.txt *.md *.csv *.html"),
                ("Audio",     "*.mp3 *.wav *.ogg *.flac"),
                ("All files", "*.*"),
            ],
        )
        if not path:
            return
        try:
            self._session.attach_file(path)
        except AttachmentError as exc:
            self.append_error(error_text(str(exc)))
            return
        self._refresh_attach_bar()

    def _refresh_attach_bar(self) -> None:
        for w in self._attach_inner.winfo_children():
            w.destroy()

        attachments = self._session.attachments.items()
        if attachments:
            self._attach_outer.pack(
                fill=tk.X, padx=10, pady=2, before=self._input_frame
            )
            for idx, att in enumerate(attachments):
                icon = "🖼️" if att.mime_type.startswith("image/") else "📄"
                chip = ttk.Frame(self._attach_inner)
                chip.pack(side=tk.LEFT, padx=4)
                ttk.Label(chip, text=f"{icon} {att.name}",
                          font=("", 9)).pack(side=tk.LEFT)
                ttk.Button(
                    chip, text="✕", width=2,
                    command=lambda i=idx: self._remove_attachment(i),
                ).pack(side=tk.LEFT)
        else:
            self._attach_outer.pack_forget()

    def _remove_attachment(self, idx: int) -> None:
        self._session.attachments.remove(idx)
        self._refresh_attach_bar()

    # ------------------------------------------------------------------
    # Chat management
    # ------------------------------------------------------------------

    def _clear_chat(self) -> None:
        self._chat.config(state=tk.NORMAL)
        self._chat.delete("1.0", tk.END)
        self._chat.config(state=tk.DISABLED)
        self._images.clear()

    def _preview_payload(self) -> None:
        """Show the request that Send would make, without the API key."""
        text = self._input.get("1.0", tk.END)
        try:
            preview = self._session.preview(text, self._modes.snapshot())
        except InvalidRequest as exc:
            messagebox.showinfo("Preview", str(exc))
            return

        win = tk.Toplevel(self.root)
        win.title("Request Preview")
        win.geometry("640x480")
        body = scrolledtext.ScrolledText(win, wrap=tk.WORD,
                                         font=("Courier", 9))
        body.pack(fill=tk.BOTH, expand=True, padx=8, pady=8)
        body.insert(tk.END, json.dumps(preview, ensure_ascii=False, indent=2))
        body.config(state=tk.DISABLED)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def _on_enter_key(self, event: tk.Event) -> str | None:
        # Shift+Enter → insert a newline (default behaviour)
        if event.state & 0x1:  # Shift held
            return None
        self._send()
        return "break"

    def _send(self) -> None:
        text = self._input.get("1.0", tk.END)
        try:
            request = self._session.prepare(text, self._modes.snapshot())
        except InvalidRequest:
            return
        except MissingCredential:
            return
        if request is None:
            return

        self._input.delete("1.0", tk.END)
        self._refresh_attach_bar()
        self._send_btn.config(state=tk.DISABLED)

        threading.Thread(
            target=self._worker, args=(request,), daemon=True,
        ).start()

    def _worker(self, request) -> None:
        """Background thread: call the Gemini API and push the result to queue."""
        try:
            self._queue.put(("result", self._session.dispatch(request)))
        except GeminiAPIError as exc:
            log.error("[APP] GeminiAPIError while calling %s: %s",
                      request.model, exc)
            self._queue.put(("error", error_text(str(exc))))
        except Exception as exc:  # noqa: BLE001
            error_msg = (
                f"{type(exc).__name__}: {exc}\n"
                f"  Model: {request.model}\n"
                f"  This is an unexpected error."
            )
            log.error("[APP] Unexpected error in _worker: %s", error_msg,
                      exc_info=True)
            self._queue.put(("error", error_text(error_msg)))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _on_close(self) -> None:
        self.root.destroy()

    def run(self) -> None:
        """Start the Tk main loop."""
        self.root.mainloop()
