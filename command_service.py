# filename: command_service.py

import logging
import os
import threading
from dataclasses import dataclass

from command_core import CommandCodeLogic
from command_errors import CommandNotFoundError, InvalidCommandLogError
from command_storage import MAX_COMMAND_LOGS, InMemoryStorage
from command_types import CommandLog, convert_codes_to_command_codes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceConfig:
    max_command_logs: int = MAX_COMMAND_LOGS

    def __post_init__(self):
        if self.max_command_logs < 1:
            raise ValueError("max_command_logs must be at least 1")

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        raw = environ.get("COMMAND_CODES_MAX_LOGS")
        if raw is None:
            return cls()
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"COMMAND_CODES_MAX_LOGS must be an integer, got {raw!r}") from None
        return cls(max_command_logs=value)


class CommandEncodingService:
    def __init__(self, storage=None, config=None):
        self.config = config or ServiceConfig.from_env()
        self.storage = storage or InMemoryStorage(max_command_logs=self.config.max_command_logs)
        self.logic = CommandCodeLogic()
        # Guards storage writes and code generation; reentrant for code_for_command
        self._lock = threading.RLock()

    def submit_commands(self, commands):
        if isinstance(commands, CommandLog):
            command_log = commands
        elif isinstance(commands, dict):
            command_log = CommandLog.from_dict(commands)
        else:
            if isinstance(commands, str):
                raise InvalidCommandLogError("commands must be a list of strings, not a string")
            try:
                commands = list(commands)
            except TypeError:
                raise InvalidCommandLogError(
                    f"commands must be a list of strings, got {type(commands).__name__}"
                ) from None
            command_log = CommandLog(commands=commands)
        with self._lock:
            return self.storage.set_command_log(command_log)

    def command_logs(self):
        return self.storage.get_all_command_logs()

    def all_command_codes(self):
        return self.storage.get_all_command_codes()

    def codes_for_command_log(self, command_log):
        """Return the stored codes for a log, generating and storing them on first use."""
        with self._lock:
            stored = self.storage.get_command_codes_for_command_log(command_log.id)
            if stored:
                return stored
            freqs = self.logic.count_frequencies(command_log.commands)
            tree = self.logic.build_tree(freqs)
            codes = self.logic.generate_codes(tree)
            logger.info("Generated %d codes for command log %d", len(codes), command_log.id)
            return self.storage.set_command_codes(convert_codes_to_command_codes(codes), command_log.id)

    def code_for_command(self, command):
        with self._lock:
            command_log = self.storage.get_latest_command_log()
            records = self.codes_for_command_log(command_log)
        for record in records:
            if record.command == command:
                return record.command_code
        raise CommandNotFoundError(command)
