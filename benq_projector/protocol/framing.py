# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Reassembly of reply frames from the projector's unframed byte stream.

The projector terminates each reply with a lone carriage return, which in
practice arrives as its own TCP segment. Everything received since the last
frame boundary is handed on as one frame. Garbage (idle prompts, runaway
buffers) is discarded and a carriage return is sent back to make the
projector flush its output.
"""

from __future__ import annotations

from ..internal_types import *
from ..pkg_logging import logger
from .constants import (
    CR,
    CR_BYTES,
    MAX_BUFFER_LENGTH,
    IDLE_PROMPT,
    REPEATED_IDLE_PROMPT,
    MAX_LONE_PROMPT_LENGTH,
  )

class FrameAssembler:
    """Accumulates received chunks and splits them into frames."""

    buffer: str
    send_correction: Callable[[bytes], Any]
    """Called with a lone CR when the buffer is discarded."""

    def __init__(self, send_correction: Callable[[bytes], Any]):
        self.buffer = ''
        self.send_correction = send_correction

    def reset(self) -> None:
        """Drops any partially received frame."""
        self.buffer = ''

    def is_idle_prompt(self) -> bool:
        """True iff the buffer holds only idle prompt noise"""
        return (
            (IDLE_PROMPT in self.buffer and len(self.buffer) < MAX_LONE_PROMPT_LENGTH) or
            REPEATED_IDLE_PROMPT in self.buffer
          )

    def _discard(self) -> None:
        self.buffer = ''
        self.send_correction(CR_BYTES)

    def feed(self, chunk: bytes) -> List[str]:
        """Adds a received chunk and returns the frames it completed (zero or one)."""
        text = chunk.decode('utf-8', errors='replace')
        self.buffer += text
        if len(self.buffer) > MAX_BUFFER_LENGTH:
            logger.debug(f"Receive buffer overflow ({len(self.buffer)} chars); discarding")
            self._discard()
        if self.is_idle_prompt():
            logger.debug(f"Idle prompt received; discarding buffer of length {len(self.buffer)}")
            self._discard()
        frames: List[str] = []
        if text == CR:
            frames.append(self.buffer)
            self.buffer = ''
        return frames
