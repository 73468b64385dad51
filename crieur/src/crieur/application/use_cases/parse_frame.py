"""
Frame parsing use case.

Turns a raw WebSocket text frame into a typed inbound frame:
- Size limit
- JSON object structure
- Known message type
- Field types
"""

import json
from typing import Any, Dict

from pydantic import ValidationError

from crieur.application.dto import INBOUND_FRAME_TYPES, InboundFrame
from crieur.domain.exceptions import ProtocolError

INVALID_FORMAT = "Invalid message format"
UNKNOWN_TYPE = "Unknown message type"


class ParseFrameUseCase:
    """
    Use case for parsing inbound WebSocket frames.

    Raises ProtocolError for anything that is not a well-formed frame of
    a known type; required-field checks belong to the Broker.
    """

    def __init__(self, max_frame_size: int = 65_536):
        """
        Initialize frame parser.

        Args:
            max_frame_size: Maximum frame size in bytes
        """
        self.max_frame_size = max_frame_size

    def execute(self, raw_frame: str) -> InboundFrame:
        """
        Parse a raw frame.

        Args:
            raw_frame: Raw text received from the WebSocket

        Returns:
            Typed InboundFrame subclass instance

        Raises:
            ProtocolError: If the frame is oversized, malformed or of an
                unknown type
        """
        size_bytes = len(raw_frame.encode("utf-8"))
        if size_bytes > self.max_frame_size:
            raise ProtocolError(
                f"Message too large: {size_bytes} bytes "
                f"(max: {self.max_frame_size})"
            )

        data = self._decode(raw_frame)

        frame_type = data.get("type")
        frame_model = INBOUND_FRAME_TYPES.get(frame_type) if isinstance(frame_type, str) else None
        if frame_model is None:
            raise ProtocolError(UNKNOWN_TYPE)

        try:
            return frame_model.model_validate(data)
        except ValidationError as e:
            raise ProtocolError(INVALID_FORMAT) from e

    @staticmethod
    def _decode(raw_frame: str) -> Dict[str, Any]:
        try:
            data = json.loads(raw_frame)
        except json.JSONDecodeError as e:
            raise ProtocolError(INVALID_FORMAT) from e

        if not isinstance(data, dict):
            raise ProtocolError(INVALID_FORMAT)

        return data
