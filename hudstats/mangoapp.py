"""Messages exchanged with the standalone overlay and its control tool."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass

USAGE = (
    "Usage: mangohudctl [set|toggle] attribute [value]\n"
    "Attributes:\n"
    "   no_display      hides or shows hud\n"
    "   log_session     handles logging status\n"
    "Accepted values:\n"
    "   true\n"
    "   false\n"
    "   1\n"
    "   0\n"
)

APP_MSG_TYPE = 1
CTRL_MSG_TYPE = 2

# Values of the control message fields.
CTRL_IGNORE = 0
CTRL_SET = 1
CTRL_CLEAR = 2
CTRL_TOGGLE = 3

_APP_HEADER = struct.Struct("<qI")
_APP_FIELDS = (
    ("pid", "I"),
    ("visible_frametime_ns", "Q"),
    ("fsr_upscale", "B"),
    ("fsr_sharpness", "B"),
    ("app_frametime_ns", "Q"),
    ("latency_ns", "Q"),
)
_CTRL = struct.Struct("<qIIBB64s")
_SESSION_NAME_LEN = 64


class UsageError(ValueError):
    """The control tool was called with invalid arguments."""

    def __init__(self, message: str = USAGE) -> None:
        super().__init__(message)


@dataclass
class AppMessage:
    """A frame report (version 1); fields missing from a short message are None."""

    msg_type: int
    version: int
    pid: int | None = None
    visible_frametime_ns: int | None = None
    fsr_upscale: int | None = None
    fsr_sharpness: int | None = None
    app_frametime_ns: int | None = None
    latency_ns: int | None = None

    @classmethod
    def unpack(cls, data: bytes) -> AppMessage:
        """Decode a packed message; newer fields are read only when present."""
        if len(data) < _APP_HEADER.size:
            raise ValueError("message shorter than its header")
        msg_type, version = _APP_HEADER.unpack_from(data)
        if version != 1:
            raise ValueError(f"Unsupported mangoapp struct version: {version}")
        message = cls(msg_type=msg_type, version=version)
        offset = _APP_HEADER.size
        for name, code in _APP_FIELDS:
            size = struct.calcsize("<" + code)
            if len(data) < offset + size:
                break
            (value,) = struct.unpack_from("<" + code, data, offset)
            setattr(message, name, value)
            offset += size
        return message


@dataclass
class CtrlMessage:
    """A control request: each field is ignore, set, clear or toggle."""

    no_display: int = CTRL_IGNORE
    log_session: int = CTRL_IGNORE
    log_session_name: str = ""
    msg_type: int = CTRL_MSG_TYPE
    ctrl_msg_type: int = 1
    version: int = 1

    def pack(self) -> bytes:
        name = self.log_session_name.encode("utf-8")[:_SESSION_NAME_LEN]
        return _CTRL.pack(
            self.msg_type,
            self.ctrl_msg_type,
            self.version,
            self.no_display,
            self.log_session,
            name,
        )

    @classmethod
    def unpack(cls, data: bytes) -> CtrlMessage:
        if len(data) < _CTRL.size:
            raise ValueError("control message is truncated")
        msg_type, ctrl_type, version, no_display, log_session, name = _CTRL.unpack_from(data)
        return cls(
            no_display=no_display,
            log_session=log_session,
            log_session_name=name.split(b"\0", 1)[0].decode("utf-8", errors="replace"),
            msg_type=msg_type,
            ctrl_msg_type=ctrl_type,
            version=version,
        )


def str_to_bool(value: str) -> bool:
    """Accept true/false (any case) or 1/0."""
    if value.lower() == "true" or value == "1":
        return True
    if value.lower() == "false" or value == "0":
        return False
    raise ValueError(
        f"The value '{value}' is not an accepted boolean. Use 0/1 or true/false"
    )


def build_ctrl_message(argv: Sequence[str]) -> CtrlMessage:
    """Build a control message from ``[set|toggle] attribute [value]``."""
    args = list(argv)
    if len(args) <= 1:
        raise UsageError()
    action, attribute = args[0], args[1]
    if action == "set":
        if len(args) != 3:
            raise UsageError()
        value = CTRL_SET if str_to_bool(args[2]) else CTRL_CLEAR
    elif action == "toggle":
        if len(args) != 2:
            raise UsageError()
        value = CTRL_TOGGLE
    else:
        raise UsageError()

    message = CtrlMessage()
    if attribute == "no_display":
        message.no_display = value
    elif attribute == "log_session":
        message.log_session = value
    else:
        raise UsageError()
    return message