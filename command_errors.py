# filename: command_errors.py


class CommandCodesError(Exception):
    """Base class for errors raised by the storage and service layers."""


class CommandLogNotFoundError(CommandCodesError):
    def __init__(self, command_log_id=None):
        self.command_log_id = command_log_id
        if command_log_id is None:
            message = "no command log stored"
        else:
            message = f"command log not found: {command_log_id}"
        super().__init__(message)


class CommandNotFoundError(CommandCodesError):
    def __init__(self, command):
        self.command = command
        super().__init__(f"command not found: {command}")


class InvalidCommandLogError(CommandCodesError):
    pass
