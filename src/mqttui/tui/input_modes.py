"""Focus-based key dispatch tables.

All keyboard input routes through MqttuiApp.on_key based on which pane has
focus. Textual BINDINGS are not used - on_key is the sole dispatcher.
"""

from mqttui.core.navigation import Focus


# Keys that behave identically whichever pane has focus.
_COMMON_KEYS: dict[str, str] = {
    "tab": "nav('toggle_focus')",
    "shift+tab": "nav('toggle_focus')",
    "up": "nav('move_up')",
    "k": "nav('move_up')",
    "down": "nav('move_down')",
    "j": "nav('move_down')",
    "pageup": "nav('page_up')",
    "ctrl+b": "nav('page_up')",
    "pagedown": "nav('page_down')",
    "ctrl+f": "nav('page_down')",
    "home": "nav('move_top')",
    "g": "nav('move_top')",
    "end": "nav('move_bottom')",
    "G": "nav('move_bottom')",
    "r": "nav('reset_messages')",
    "d": "nav('rediscover')",
    "q": "quit",
    "ctrl+c": "quit",
}


# [LAW:one-source-of-truth] Key→action mapping per focused pane.
FOCUS_KEYMAP: dict[Focus, dict[str, str]] = {
    Focus.TOPICS: {
        **_COMMON_KEYS,
        "enter": "nav('toggle_subscription')",
        "space": "nav('toggle_subscription')",
    },
    Focus.MESSAGES: dict(_COMMON_KEYS),
}


# [LAW:one-source-of-truth] Footer display per focused pane.
# Format: list of (key, description) tuples.
FOOTER_KEYS: dict[Focus, list[tuple[str, str]]] = {
    Focus.TOPICS: [
        ("↑/↓", "navigate"),
        ("tab", "switch panes"),
        ("enter/space", "toggle subscription"),
        ("d", "rediscover"),
        ("r", "reset messages"),
        ("q", "quit"),
    ],
    Focus.MESSAGES: [
        ("↑/↓", "scroll"),
        ("pgup/pgdn", "page"),
        ("g/G", "top/bottom"),
        ("tab", "switch panes"),
        ("r", "reset messages"),
        ("q", "quit"),
    ],
}
