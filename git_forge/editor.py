"""Collect a title and body from the user's text editor.

The editor opens a template whose cut-marker line separates the user's
message from help text. The first line above the marker is the title, the
rest the body.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .errors import EditorError

logger = logging.getLogger(__name__)

CUT_MARKER = "# ------------------------ >8 ------------------------"

MESSAGE_TEMPLATE = f"""

{CUT_MARKER}
# Do not modify or remove the line above.
# Everything below it will be ignored.

## Help

Enter a message above the cut marker (the line containing -- >8 --).
The first line of your message will be used as the title.
The remaining text will be used for the description.
Save and exit your editor to continue.

## Example

```txt
This line will be used as the title

The description starts with this line. It can contain
multiple paragraphs.

That means, this line will also be part of the description.

# --- <cut marker> ---
# ...
```
"""


@dataclass(frozen=True)
class Message:
    title: str
    body: str


def editor_command(custom: str | None = None) -> list[str]:
    """Split the configured editor command, falling back to ``$EDITOR``."""
    raw = (custom or os.environ.get("EDITOR", "")).strip()
    if not raw:
        raise EditorError("Cannot edit: $EDITOR is not set.")
    cmd = shlex.split(raw)
    if not cmd:
        raise EditorError("Cannot edit: $EDITOR is empty.")
    return cmd


def edit_file(path: Path, custom: str | None = None) -> None:
    cmd = editor_command(custom)
    logger.debug("launching editor %s on %s", cmd, path)
    try:
        proc = subprocess.run([*cmd, str(path)], check=False)
    except OSError as exc:
        raise EditorError(f"Failed to launch editor: {exc}") from exc
    if proc.returncode != 0:
        raise EditorError(f"Editor exited with status {proc.returncode}")


def edit_text(initial: str, custom: str | None = None) -> str | None:
    """Return the edited text, or ``None`` when the file was left unchanged."""
    with tempfile.TemporaryDirectory(prefix="git-forge-") as tmp:
        path = Path(tmp) / "MESSAGE.md"
        path.write_text(initial, encoding="utf-8")
        edit_file(path, custom)
        edited = path.read_text(encoding="utf-8")
    return None if edited == initial else edited


def parse_message(content: str) -> Message:
    before, sep, _ = content.rpartition(CUT_MARKER)
    if not sep:
        raise EditorError(
            f"The cut marker '{CUT_MARKER}' was removed or modified. "
            "This marker is required to separate your message from the help text."
        )
    title, _, body = before.strip().partition("\n")
    return Message(title=title.strip(), body=body.strip())


def prompt_message(custom: str | None = None) -> Message:
    content = edit_text(MESSAGE_TEMPLATE, custom)
    if content is None:
        raise EditorError("Aborting: No message provided (editor closed without saving)")
    return parse_message(content)


__all__ = [
    "CUT_MARKER",
    "MESSAGE_TEMPLATE",
    "Message",
    "edit_file",
    "edit_text",
    "editor_command",
    "parse_message",
    "prompt_message",
]
