"""
Command surface for the picker.

Requests carry a ``type``; every response has ``ok`` plus command-specific
fields. Failures are reported in the response rather than raised.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ValidationError

from .collaborators import ClipboardError
from .state_machine import Picker

logger = logging.getLogger(__name__)

NOTHING_SELECTED = "Nothing selected"
CLIPBOARD_FAILED = "Clipboard copy failed"
UNKNOWN_COMMAND = "Unknown command"


class CommandType(str, Enum):
    PING = "PING"
    TOGGLE_ZAP = "TOGGLE_ZAP"
    CLEAR_SELECTION = "CLEAR_SELECTION"
    GET_MD = "GET_MD"
    COPY_MD = "COPY_MD"


class CommandRequest(BaseModel):
    type: CommandType


class CommandResponse(BaseModel):
    ok: bool
    enabled: Optional[bool] = None
    md: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CommandRouter:
    """Routes command messages to a picker."""

    def __init__(self, picker: Picker):
        self.picker = picker
        self._handlers: Dict[CommandType, Callable[[], Awaitable[CommandResponse]]] = {
            CommandType.PING: self._ping,
            CommandType.TOGGLE_ZAP: self._toggle,
            CommandType.CLEAR_SELECTION: self._clear_selection,
            CommandType.GET_MD: self._get_markdown,
            CommandType.COPY_MD: self._copy_markdown,
        }

    async def handle(self, message: Any) -> Dict[str, Any]:
        try:
            request = CommandRequest.model_validate(message or {})
        except ValidationError:
            logger.debug(f"Rejected command message: {message!r}")
            return CommandResponse(ok=False, error=UNKNOWN_COMMAND).to_dict()

        response = await self._handlers[request.type]()
        return response.to_dict()

    async def _ping(self) -> CommandResponse:
        return CommandResponse(ok=True)

    async def _toggle(self) -> CommandResponse:
        return CommandResponse(ok=True, enabled=self.picker.toggle())

    async def _clear_selection(self) -> CommandResponse:
        self.picker.clear_selection()
        return CommandResponse(ok=True)

    async def _get_markdown(self) -> CommandResponse:
        return CommandResponse(ok=True, md=await self.picker.get_markdown())

    async def _copy_markdown(self) -> CommandResponse:
        markdown = await self.picker.get_markdown()
        if not markdown:
            return CommandResponse(ok=False, error=NOTHING_SELECTED)

        try:
            await self.picker.clipboard.write_text(markdown)
        except ClipboardError as e:
            logger.warning(f"COPY_MD failed, keeping selection: {e}")
            return CommandResponse(ok=False, error=CLIPBOARD_FAILED)

        self.picker.clear_selection()
        return CommandResponse(ok=True)
