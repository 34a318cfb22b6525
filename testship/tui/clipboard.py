"""Best-effort clipboard access for share links."""

from __future__ import annotations

import platform
import shutil
import subprocess


def clipboard_commands(system: str | None = None) -> list[list[str]]:
    system = (system or platform.system()).lower()
    if system == "darwin":
        return [["pbcopy"]]
    if system == "windows":
        return [["clip"]]
    return [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ]


def copy_text_to_clipboard(text: str) -> tuple[bool, str]:
    """Try each platform clipboard tool in turn. Returns (copied, tool or reason)."""
    for cmd in clipboard_commands():
        exe = cmd[0]
        if shutil.which(exe) is None:
            continue
        try:
            subprocess.run(cmd, input=text, text=True, check=True, capture_output=True)
            return True, exe
        except (OSError, subprocess.CalledProcessError):
            continue
    return False, "no supported clipboard command found"
