"""
GUI for TapCalc
Tkinter keypad and display driven by the calculator engine
"""
import logging
import tkinter as tk

import config
from calculator import is_error_state, reset_state
from keypad import KEYPAD, KEYPAD_COLUMNS, OP, action_for_key, apply_action, is_active, press

logger = logging.getLogger(__name__)


class TapCalcGUI:
    def __init__(self, root, dark_mode=config.DARK_MODE):
        self.root = root
        self.root.title(config.APP_NAME)
        self.root.geometry(f"{config.WINDOW_WIDTH}x{config.WINDOW_HEIGHT}")

        self.state = reset_state()
        self.dark_mode = dark_mode
        self.T = config.get_theme(self.dark_mode)
        self.root.configure(bg=self.T["bg"])

        self.key_buttons = {}
        self.create_widgets()
        self.root.bind('<Key>', self.on_key_press)
        self.refresh()

    # ── Theme helpers ──────────────────────────────────────────────────────────
    def _neu_btn(self, parent, text, command=None, kind="number", **kw):
        """Create a neumorphic styled flat button."""
        T = self.T
        if kind == "equals":
            bg, fg, abg = T["equals_bg"], T["equals_fg"], T["accent"]
        elif kind == "operator":
            bg, fg, abg = T["btn_bg"], T["operator_fg"], T["bg_dark"]
        elif kind == "action":
            bg, fg, abg = T["btn_bg"], T["action_fg"], T["bg_dark"]
        else:
            bg, fg, abg = T["btn_bg"], T["btn_fg"], T["bg_dark"]
        return tk.Button(
            parent, text=text, command=command,
            font=kw.pop("font", config.BUTTON_FONT),
            bg=bg, fg=fg,
            activebackground=abg, activeforeground=fg,
            relief=tk.FLAT, bd=0, cursor="hand2",
            highlightthickness=1,
            highlightbackground=T["shadow_dark"],
            highlightcolor=T["shadow_lite"],
            **kw
        )

    def _toggle_dark_mode(self):
        """Swap palettes and rebuild the widgets"""
        self.dark_mode = not self.dark_mode
        self.T = config.get_theme(self.dark_mode)
        self.root.configure(bg=self.T["bg"])
        for w in self.root.winfo_children():
            w.destroy()
        self.key_buttons = {}
        self.create_widgets()
        self.refresh()

    def create_widgets(self):
        """Create display and keypad"""
        T = self.T

        top = tk.Frame(self.root, bg=T["bg"])
        top.pack(fill=tk.X, padx=6, pady=(4, 0))
        tk.Label(top, text=config.APP_NAME, font=(config.LABEL_FONT[0], 12, "bold"),
                 bg=T["bg"], fg=T["accent"]).pack(side=tk.LEFT)
        tk.Button(top, text="☾" if not self.dark_mode else "☀",
                  font=config.LABEL_FONT, bg=T["bg"], fg=T["subtext"],
                  relief=tk.FLAT, bd=0, cursor="hand2", activebackground=T["bg_dark"],
                  command=self._toggle_dark_mode).pack(side=tk.RIGHT)

        # Display area: neumorphic inset card with LCD-style font
        outer = tk.Frame(self.root, bg=T["shadow_dark"], bd=0)
        outer.pack(fill=tk.X, padx=6, pady=(4, 6))
        self.display = tk.Label(
            outer, text="0",
            font=config.DISPLAY_FONT,
            bg=T["display_bg"], fg=T["display_fg"],
            anchor=tk.E, padx=12, pady=12
        )
        self.display.pack(fill=tk.X, padx=1, pady=1)

        grid = tk.Frame(self.root, bg=T["bg"])
        grid.pack(fill=tk.BOTH, expand=True, padx=6, pady=(0, 6))
        for col in range(KEYPAD_COLUMNS):
            grid.columnconfigure(col, weight=1, uniform="keys")

        for index, key in enumerate(KEYPAD):
            row, col = divmod(index, KEYPAD_COLUMNS)
            grid.rowconfigure(row, weight=1, uniform="rows")
            kind = "equals" if key.label == "=" else key.variant
            btn = self._neu_btn(grid, key.label, command=lambda k=key: self.on_button(k), kind=kind)
            btn.grid(row=row, column=col, sticky="nsew", padx=2, pady=2)
            self.key_buttons[key] = btn

    def on_button(self, key):
        """Handle keypad button clicks"""
        self.state = press(self.state, key)
        self.refresh()

    def on_key_press(self, event):
        """Handle keyboard input"""
        mapped = action_for_key(event.char) or action_for_key(event.keysym)
        if mapped is None:
            return
        self.state = apply_action(self.state, *mapped)
        self.refresh()

    def refresh(self):
        """Redraw the display and operator highlight from the current state"""
        T = self.T
        error = is_error_state(self.state)
        self.display.config(text=self.state.display_value,
                            fg=T["danger"] if error else T["display_fg"])
        for key, btn in self.key_buttons.items():
            if key.action != OP:
                continue
            btn.config(bg=T["operator_active_bg"] if is_active(key, self.state) else T["btn_bg"])
        if error:
            logger.debug("Calculator entered the error state")
