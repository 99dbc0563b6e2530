# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
BenQ Projector emulator.

Provides a simple emulation of a BenQ projector on TCP/IP.
"""

from .session import BenqProjectorEmulatorSession
from .emulator_impl import BenqProjectorEmulator
