"""
Backend-side command allowlist.

Checked before any console command is forwarded to the plugin,
independently of whatever the plugin itself allows.
"""

from __future__ import annotations

ALLOWED_COMMAND_PREFIXES: tuple[str, ...] = (
    "say",
    "kick",
    "ban",
    "tempban",
    "whitelist add",
    "whitelist remove",
)


def build_command_line(command: str, args: list[str] | None = None) -> str:
    """Join command and args the way the console would receive them."""
    if args:
        return f"{command} {' '.join(args)}"
    return command


def is_command_allowed(command_line: str) -> bool:
    """Case-insensitive prefix match against the allowlist."""
    lowered = command_line.lower()
    return any(lowered.startswith(prefix) for prefix in ALLOWED_COMMAND_PREFIXES)
