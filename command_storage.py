# filename: command_storage.py

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime

from command_errors import CommandLogNotFoundError
from command_types import CommandCodeRecord, CommandLogRecord

logger = logging.getLogger(__name__)

MAX_COMMAND_LOGS = 100


class Storage(ABC):
    @abstractmethod
    def set_command_log(self, command_log):
        pass

    @abstractmethod
    def get_all_command_logs(self):
        pass

    @abstractmethod
    def get_all_command_codes(self):
        pass

    @abstractmethod
    def get_latest_command_log(self):
        pass

    @abstractmethod
    def get_command_codes_for_command_log(self, command_log_id):
        pass

    @abstractmethod
    def set_command_codes(self, codes, command_log_id):
        pass


class InMemoryStorage(Storage):
    """Keeps command logs and their generated codes in process memory.

    Once more than ``max_command_logs`` logs are stored, the next insert
    clears all logs and codes before writing. Ids are never reused.
    """

    def __init__(self, max_command_logs=MAX_COMMAND_LOGS, clock=datetime.now):
        self.max_command_logs = max_command_logs
        self._clock = clock
        self._lock = threading.Lock()
        self._logs = {}
        self._codes = {}
        self._next_log_id = 1
        self._next_code_id = 1

    def _drop_command_logs_if_too_many(self):
        if len(self._logs) <= self.max_command_logs:
            return
        logger.info("Command log history exceeded %d entries, clearing", self.max_command_logs)
        self._logs.clear()
        self._codes.clear()

    def set_command_log(self, command_log):
        with self._lock:
            self._drop_command_logs_if_too_many()
            record = CommandLogRecord(
                id=self._next_log_id,
                commands=list(command_log.commands),
                timestamp=self._clock(),
            )
            self._next_log_id += 1
            self._logs[record.id] = record
        logger.info("Stored command log %d with %d commands", record.id, len(record.commands))
        return record

    def get_all_command_logs(self):
        with self._lock:
            return list(self._logs.values())

    def get_all_command_codes(self):
        with self._lock:
            return [code for log_id in sorted(self._codes) for code in self._codes[log_id]]

    def get_latest_command_log(self):
        with self._lock:
            if not self._logs:
                raise CommandLogNotFoundError()
            return max(self._logs.values(), key=lambda record: (record.timestamp, record.id))

    def get_command_codes_for_command_log(self, command_log_id):
        with self._lock:
            return list(self._codes.get(command_log_id, []))

    def set_command_codes(self, codes, command_log_id):
        with self._lock:
            if command_log_id not in self._logs:
                raise CommandLogNotFoundError(command_log_id)
            inserted = []
            for code in codes:
                inserted.append(CommandCodeRecord(
                    id=self._next_code_id,
                    command_log_id=command_log_id,
                    command=code.command,
                    command_code=code.code,
                ))
                self._next_code_id += 1
            self._codes.setdefault(command_log_id, []).extend(inserted)
        logger.info("Stored %d command codes for command log %d", len(inserted), command_log_id)
        return inserted
