"""Styling shared by all questionary prompts."""

from questionary import Style

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#5fafff bold"),
        ("question", "bold"),
        ("answer", "fg:#d787ff bold"),
        ("pointer", "fg:#d787ff bold"),
        ("highlighted", "fg:#1c1c1c bg:#d787ff bold"),
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
    ]
)

POINTER = "❯ "
QMARK = "? "
