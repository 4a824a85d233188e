# filename: command_types.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from command_errors import InvalidCommandLogError


@dataclass(frozen=True)
class CommandLog:
    commands: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.commands, list):
            raise InvalidCommandLogError("'commands' must be a list")
        for command in self.commands:
            if not isinstance(command, str):
                raise InvalidCommandLogError(f"command must be a string, got {command!r}")

    @classmethod
    def from_dict(cls, payload) -> "CommandLog":
        if not isinstance(payload, dict) or "commands" not in payload:
            raise InvalidCommandLogError("payload must be an object with a 'commands' list")
        commands = payload["commands"]
        if not isinstance(commands, list):
            raise InvalidCommandLogError("'commands' must be a list")
        return cls(commands=list(commands))


@dataclass(frozen=True)
class CommandLogRecord:
    id: int
    commands: List[str]
    timestamp: datetime

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "commands": list(self.commands),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CommandCode:
    command: str
    code: str


@dataclass(frozen=True)
class CommandCodeRecord:
    id: int
    command_log_id: int
    command: str
    command_code: str

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "command_log_id": self.command_log_id,
            "command": self.command,
            "command_code": self.command_code,
        }


def code_response(code: str) -> Dict:
    return {"rcr": code}


def convert_codes_to_command_codes(codes: Dict[str, str]) -> List[CommandCode]:
    return [CommandCode(command=command, code=codes[command]) for command in sorted(codes)]
