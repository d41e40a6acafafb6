"""Raw terminal key decoding.

Reads bytes from a raw-mode file descriptor and turns them into key tokens
such as ``"UP"``, ``"CTRL_C"``, ``"ALT_BACKSPACE"``, or a printable string.
An empty token means no key arrived before the timeout or the sequence was
not recognized.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_CSI_MAX_LENGTH = 32

_CONTROL_KEYS: dict[bytes, str] = {
    b"\t": "TAB",
    b"\r": "ENTER",
    b"\n": "ENTER",
    b"\x7f": "BACKSPACE",
    b"\x08": "BACKSPACE",
}

_TILDE_KEYS: dict[str, str] = {
    "1": "HOME",
    "7": "HOME",
    "4": "END",
    "8": "END",
    "3": "DELETE",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
}

_ARROW_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}


def _utf8_length(first: int) -> int:
    if first >= 0xF0:
        return 4
    if first >= 0xE0:
        return 3
    if first >= 0xC0:
        return 2
    return 1


def _modifier_prefix(modifier: str) -> str:
    """Map an xterm modifier parameter to a token prefix."""
    if modifier in {"3", "9"}:
        return "ALT_"
    if modifier == "5":
        return "CTRL_"
    if modifier == "2":
        return "SHIFT_"
    return ""


class KeyReader:
    """Decode key tokens from ``fd``, buffering bytes read ahead of need."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._pending: list[bytes] = []

    def _read_byte(self, timeout_ms: int | None) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        if timeout_ms is not None:
            ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None
        ch = os.read(self.fd, 1)
        if not ch:
            return None
        return ch

    def read_key(self, timeout_ms: int | None = None) -> str:
        ch = self._read_byte(timeout_ms)
        if ch is None:
            return ""
        if ch == b"\x1b":
            return self._read_escape()
        if ch in _CONTROL_KEYS:
            return _CONTROL_KEYS[ch]
        code = ch[0]
        if code < 0x20:
            return f"CTRL_{chr(code + 0x40)}"
        if code < 0x80:
            return ch.decode("ascii")
        return self._read_utf8(ch)

    def _read_utf8(self, first: bytes) -> str:
        data = bytearray(first)
        for _ in range(_utf8_length(first[0]) - 1):
            nxt = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                break
            if nxt[0] & 0xC0 != 0x80:
                self._pending.append(nxt)
                break
            data.extend(nxt)
        return bytes(data).decode("utf-8", errors="replace")

    def _read_escape(self) -> str:
        seq = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "ESC"
        if seq in {b"\x7f", b"\x08"}:
            return "ALT_BACKSPACE"
        if seq in {b"b", b"B"}:
            return "ALT_LEFT"
        if seq in {b"f", b"F"}:
            return "ALT_RIGHT"
        if seq in {b"d", b"D"}:
            return "ALT_DELETE"
        if seq == b"O":
            final = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if final is None:
                return "O"
            return _ARROW_KEYS.get(final, "")
        if seq == b"[":
            return self._read_csi()
        # Alt with any other character types that character.
        code = seq[0]
        if 0x20 <= code < 0x7F:
            return seq.decode("ascii")
        if code >= 0xC0:
            return self._read_utf8(seq)
        self._pending.append(seq)
        return "ESC"

    def _read_csi(self) -> str:
        params = bytearray()
        while True:
            part = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if part is None:
                return "ESC"
            if 0x40 <= part[0] <= 0x7E:
                final = part
                break
            params.extend(part)
            if len(params) > _CSI_MAX_LENGTH:
                return ""

        fields = params.decode("ascii", errors="replace").split(";")
        modifier = fields[1] if len(fields) > 1 else ""
        if final == b"Z":
            return "SHIFT_TAB"
        if final == b"~":
            name = _TILDE_KEYS.get(fields[0], "")
            if name == "DELETE" and modifier in {"3", "5", "9"}:
                return "ALT_DELETE"
            return name
        name = _ARROW_KEYS.get(final, "")
        if name in {"LEFT", "RIGHT"}:
            return _modifier_prefix(modifier) + name
        return name


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "KeyReader"]
