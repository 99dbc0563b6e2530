#!/usr/bin/env python3

"""
BenQ projector known command codes and metadata.

This module contains the known command codes and metadata for the BenQ RS-232/LAN text protocol,
grouped into per-model command tables. The information in this module is derived from BenQ's
RS232 command tables for the individual projector models, which share most commands.

There is no protocol implementation here; only metadata about the protocol.
"""
from __future__ import annotations

from enum import Enum

from ..internal_types import *
from ..exceptions import BenqProjectorError
from .constants import QUERY_MARKER, ON, OFF

CommandCode = str

class CommandKind(Enum):
    """Discriminant for the two shapes of command"""

    ACTION_ONLY = "action_only"
    """A bare trigger ("*menu#"). Has no state and cannot be queried."""

    VALUE_QUERYABLE = "value_queryable"
    """Takes one of a fixed set of values ("*pow=on#"), usually including the query marker."""

class CommandMeta:
    """Metadata for a single command in a model's command table"""
    code: CommandCode
    name: str
    """The host property name for the command. Unique within a model."""
    description: str
    values: Optional[Dict[str, str]]
    """Allowed values mapped to their friendly names, or None for action-only commands."""

    def __init__(
            self,
            code: CommandCode,
            name: str,
            description: Optional[str]=None,
            values: Optional[Dict[str, str]]=None,
          ):
        self.code = code
        self.name = name
        self.description = name if description is None else description
        self.values = None if values is None else dict(values)

    @property
    def kind(self) -> CommandKind:
        return CommandKind.ACTION_ONLY if self.values is None else CommandKind.VALUE_QUERYABLE

    @property
    def is_queryable(self) -> bool:
        return self.kind == CommandKind.VALUE_QUERYABLE

    @property
    def allowed_values(self) -> Set[str]:
        return set() if self.values is None else set(self.values.keys())

    @property
    def settable_values(self) -> Set[str]:
        """Allowed values other than the query marker"""
        return self.allowed_values - {QUERY_MARKER}

    @property
    def is_query_only(self) -> bool:
        """True iff the command can only be queried (e.g., lamp hours)"""
        return self.is_queryable and self.allowed_values == {QUERY_MARKER}

    @property
    def property_type(self) -> str:
        """Type of the host property: "boolean" for on/off commands, else "string"."""
        return "boolean" if self.settable_values == {ON, OFF} else "string"

    @property
    def property_role(self) -> str:
        """Role of the host property: "button" for actions; "indicator" for queryable
           commands that take neither "on" nor "off"; otherwise "media"."""
        if self.kind == CommandKind.ACTION_ONLY:
            return "button"
        allowed = self.allowed_values
        if ON in allowed or OFF in allowed:
            return "media"
        if QUERY_MARKER in allowed:
            return "indicator"
        return "media"

    def validate_value(self, value: str) -> bool:
        """Returns True iff value may be sent with this command."""
        if self.kind == CommandKind.ACTION_ONLY:
            return True
        return value in self.allowed_values

    def __str__(self) -> str:
        return f"CommandMeta({self.code}: {self.name})"

    def __repr__(self) -> str:
        return str(self)

_C = CommandMeta

class CommandTable:
    """Immutable lookup of the commands supported by one model, keyed by code and by name.

    Iteration yields the commands in table order.
    """
    _by_code: Dict[CommandCode, CommandMeta]
    _by_name: Dict[str, CommandMeta]

    def __init__(self, commands: Iterable[CommandMeta]):
        by_code: Dict[CommandCode, CommandMeta] = {}
        by_name: Dict[str, CommandMeta] = {}
        for command in commands:
            if command.code in by_code:
                raise BenqProjectorError(f"Duplicate command code in command table: {command.code}")
            if command.name in by_name:
                raise BenqProjectorError(f"Duplicate command name in command table: {command.name}")
            by_code[command.code] = command
            by_name[command.name] = command
        self._by_code = by_code
        self._by_name = by_name

    def __iter__(self) -> Iterator[CommandMeta]:
        return iter(self._by_code.values())

    def __len__(self) -> int:
        return len(self._by_code)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def get(self, code: CommandCode) -> Optional[CommandMeta]:
        return self._by_code.get(code)

    def get_by_name(self, name: str) -> Optional[CommandMeta]:
        return self._by_name.get(name)

    def resolve(self, name_or_code: str) -> Optional[CommandMeta]:
        """Maps a host property name to its command. A bare command code is also accepted."""
        result = self._by_name.get(name_or_code)
        if result is None:
            result = self._by_code.get(name_or_code)
        return result

    @property
    def codes(self) -> List[CommandCode]:
        return list(self._by_code.keys())

class BenqModel:
    """A projector model and the commands it supports"""
    name: str
    commands: CommandTable

    def __init__(self, name: str, commands: Iterable[CommandMeta]):
        self.name = name
        self.commands = CommandTable(commands)

    def __str__(self) -> str:
        return f"BenqModel({self.name})"

    def __repr__(self) -> str:
        return str(self)

_M = BenqModel

_on_off: Dict[str, str] = { ON: "On", OFF: "Off", QUERY_MARKER: "Query" }
_up_down: Dict[str, str] = { "+": "Increase", "-": "Decrease", QUERY_MARKER: "Query" }
_query: Dict[str, str] = { QUERY_MARKER: "Query" }

def _common_commands() -> List[CommandMeta]:
    """Commands shared by every supported model. Power must come first."""
    return [
        _C("pow", "power", "Power", _on_off),
        _C("sour", "source", "Input source", {
            "rgb": "Computer / YPbPr",
            "rgb2": "Computer 2 / YPbPr 2",
            "vid": "Composite video",
            "svid": "S-Video",
            "hdmi": "HDMI",
            "hdmi2": "HDMI 2",
            QUERY_MARKER: "Query",
          }),
        _C("mute", "mute", "Audio mute", _on_off),
        _C("vol", "volume", "Volume", _up_down),
        _C("appmod", "picture_mode", "Picture mode", {
            "bright": "Bright",
            "vivid": "Vivid",
            "cine": "Cinema",
            "std": "Standard",
            "game": "Game",
            "user1": "User 1",
            "user2": "User 2",
            QUERY_MARKER: "Query",
          }),
        _C("con", "contrast", "Contrast", _up_down),
        _C("bri", "brightness", "Brightness", _up_down),
        _C("color", "color", "Color", _up_down),
        _C("sharp", "sharpness", "Sharpness", _up_down),
        _C("ct", "color_temperature", "Color temperature", {
            "warmer": "Warmer",
            "warm": "Warm",
            "normal": "Normal",
            "cool": "Cool",
            QUERY_MARKER: "Query",
          }),
        _C("asp", "aspect", "Aspect ratio", {
            "4:3": "4:3",
            "16:9": "16:9",
            "auto": "Auto",
            "real": "Real",
            "lbox": "Letterbox",
            QUERY_MARKER: "Query",
          }),
        _C("pp", "projector_position", "Projector position", {
            "ft": "Front table",
            "re": "Rear table",
            "rc": "Rear ceiling",
            "fc": "Front ceiling",
            QUERY_MARKER: "Query",
          }),
        _C("lampm", "lamp_mode", "Lamp mode", {
            "lnor": "Normal",
            "eco": "Eco",
            "seco": "SmartEco",
            QUERY_MARKER: "Query",
          }),
        _C("ltim", "lamp_hours", "Lamp hours", _query),
        _C("modelname", "model_name", "Model name", _query),
        _C("blank", "blank", "Blank screen", _on_off),
        _C("freeze", "freeze", "Freeze picture", _on_off),
        _C("zoomi", "zoom_in", "Digital zoom in"),
        _C("zoomo", "zoom_out", "Digital zoom out"),
        _C("auto", "auto_adjust", "Auto adjust"),
        _C("menu", "menu", "Menu"),
        _C("up", "up", "Navigate up"),
        _C("down", "down", "Navigate down"),
        _C("left", "left", "Navigate left"),
        _C("right", "right", "Navigate right"),
        _C("enter", "enter", "Enter"),
        _C("directpower", "direct_power_on", "Direct power on", _on_off),
        _C("highaltitude", "high_altitude", "High altitude mode", _on_off),
      ]

def _three_d_commands() -> List[CommandMeta]:
    return [
        _C("3d", "three_d_mode", "3D mode", {
            "off": "Off",
            "auto": "Auto",
            "tb": "Top-Bottom",
            "sbs": "Side-by-Side",
            "fs": "Frame sequential",
            QUERY_MARKER: "Query",
          }),
        _C("3dinv", "three_d_sync_invert", "3D sync invert", _on_off),
      ]

def _audio_commands() -> List[CommandMeta]:
    return [
        _C("micvol", "mic_volume", "Microphone volume", _up_down),
        _C("audiosour", "audio_source", "Audio source", {
            "off": "Off",
            "rgb": "Computer",
            "vid": "Video",
            "hdmi": "HDMI",
            QUERY_MARKER: "Query",
          }),
      ]

# The supported models and their command tables.
_model_list: List[BenqModel] = [
    _M("W1070", _common_commands() + _three_d_commands()),
    _M("W1080ST", _common_commands() + _three_d_commands()),
    _M("W1110", _common_commands() + _three_d_commands()),
    _M("HT2050A", _common_commands() + _three_d_commands()),
    _M("TK800", _common_commands() + _three_d_commands()),
    _M("MX525", _common_commands() + _audio_commands()),
    _M("MS527", _common_commands() + _audio_commands()),
  ]

models: Dict[str, BenqModel] = dict((m.name, m) for m in _model_list)
"""Known projector models, keyed by model name."""

def get_model(name: str) -> BenqModel:
    """Returns the model with the given name, or raises BenqProjectorError if it is not known."""
    result = models.get(name)
    if result is None:
        raise BenqProjectorError(
            f"The selected model was not found in the command table: '{name}'; known models: {', '.join(sorted(models.keys()))}")
    return result
