import os
import sys
import threading
from datetime import datetime

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

import command_service as cs
from command_errors import CommandLogNotFoundError, CommandNotFoundError, InvalidCommandLogError
from command_storage import InMemoryStorage
from command_types import CommandLog, code_response


EXAMPLE_LOG = ["LEFT", "GRAB", "LEFT", "BACK", "LEFT", "BACK", "LEFT"]


def _get_service(max_command_logs=100):
	config = cs.ServiceConfig(max_command_logs=max_command_logs)
	return cs.CommandEncodingService(config=config)


def test_service_initializes_logic_and_storage():
	svc = _get_service()
	assert svc.logic is not None
	assert isinstance(svc.storage, InMemoryStorage)
	assert svc.storage.max_command_logs == 100


def test_submit_commands_returns_record():
	svc = _get_service()
	record = svc.submit_commands(EXAMPLE_LOG)
	assert record.id == 1
	assert record.commands == EXAMPLE_LOG
	assert isinstance(record.timestamp, datetime)
	assert svc.command_logs() == [record]


def test_submit_commands_accepts_payload_dict_and_log():
	svc = _get_service()
	first = svc.submit_commands({"commands": ["A", "B"]})
	second = svc.submit_commands(CommandLog(commands=["C"]))
	assert first.commands == ["A", "B"]
	assert second.commands == ["C"]
	assert second.id == first.id + 1


@pytest.mark.parametrize("payload", [
	"LEFT",
	None,
	5,
	{"commands": "LEFT"},
	{"commands": ["LEFT", 3]},
	{"cmds": ["LEFT"]},
])
def test_submit_commands_rejects_invalid_payloads(payload):
	svc = _get_service()
	with pytest.raises(InvalidCommandLogError):
		svc.submit_commands(payload)
	assert svc.command_logs() == []


def test_command_log_validates_on_construction():
	svc = _get_service()
	with pytest.raises(InvalidCommandLogError):
		svc.submit_commands(CommandLog(commands="LEFT"))
	with pytest.raises(InvalidCommandLogError):
		CommandLog(commands=["LEFT", None])
	assert svc.command_logs() == []


class _InterleavingStorage(InMemoryStorage):
	"""Runs a hook once, just before the codes for a log are read."""

	def __init__(self, **kwargs):
		super().__init__(**kwargs)
		self.before_read_codes = None

	def get_command_codes_for_command_log(self, command_log_id):
		hook, self.before_read_codes = self.before_read_codes, None
		if hook is not None:
			hook()
		return super().get_command_codes_for_command_log(command_log_id)


def test_lookup_is_not_broken_by_submit_that_clears_history():
	storage = _InterleavingStorage(max_command_logs=1)
	svc = cs.CommandEncodingService(storage=storage, config=cs.ServiceConfig(max_command_logs=1))
	svc.submit_commands(["GRAB"])
	svc.submit_commands(EXAMPLE_LOG)
	# a third submit would clear both stored logs
	submitter = threading.Thread(target=svc.submit_commands, args=(["BACK"],))

	blocked = []

	def submit_during_lookup():
		submitter.start()
		submitter.join(timeout=0.2)
		blocked.append(submitter.is_alive())

	storage.before_read_codes = submit_during_lookup
	assert svc.code_for_command("LEFT") == "1"
	assert blocked == [True]

	submitter.join(timeout=5)
	assert not submitter.is_alive()
	assert [log.commands for log in svc.command_logs()] == [["BACK"]]
	assert svc.code_for_command("BACK") == ""


def test_code_for_command_uses_latest_log():
	svc = _get_service()
	svc.submit_commands(EXAMPLE_LOG)
	assert svc.code_for_command("LEFT") == "1"
	assert svc.code_for_command("GRAB") == "00"
	assert svc.code_for_command("BACK") == "01"
	assert code_response(svc.code_for_command("LEFT")) == {"rcr": "1"}

	svc.submit_commands(["BACK", "BACK", "BACK", "GRAB"])
	assert svc.code_for_command("BACK") == "1"
	assert svc.code_for_command("GRAB") == "0"


def test_code_for_unknown_command_raises_not_found():
	svc = _get_service()
	svc.submit_commands(EXAMPLE_LOG)
	with pytest.raises(CommandNotFoundError) as excinfo:
		svc.code_for_command("JUMP")
	assert excinfo.value.command == "JUMP"


def test_code_for_command_without_logs_raises():
	svc = _get_service()
	with pytest.raises(CommandLogNotFoundError):
		svc.code_for_command("LEFT")


def test_single_command_log_code_is_empty():
	svc = _get_service()
	svc.submit_commands(["GRAB", "GRAB"])
	assert svc.code_for_command("GRAB") == ""


def test_empty_log_has_no_codes():
	svc = _get_service()
	svc.submit_commands([])
	with pytest.raises(CommandNotFoundError):
		svc.code_for_command("LEFT")
	assert svc.all_command_codes() == []


def test_codes_generated_once_per_log(monkeypatch):
	svc = _get_service()
	record = svc.submit_commands(EXAMPLE_LOG)
	calls = []
	original = svc.logic.generate_codes

	def counting(root):
		calls.append(root)
		return original(root)

	monkeypatch.setattr(svc.logic, "generate_codes", counting)
	first = svc.codes_for_command_log(record)
	second = svc.codes_for_command_log(record)
	svc.code_for_command("LEFT")
	assert len(calls) == 1
	assert first == second
	assert len(svc.all_command_codes()) == 3


def test_concurrent_lookups_generate_once():
	svc = _get_service()
	svc.submit_commands(EXAMPLE_LOG)
	results = []
	errors = []

	def lookup():
		try:
			results.append(svc.code_for_command("LEFT"))
		except Exception as e:
			errors.append(e)

	threads = [threading.Thread(target=lookup) for _ in range(16)]
	for t in threads:
		t.start()
	for t in threads:
		t.join()

	assert errors == []
	assert results == ["1"] * 16
	assert len(svc.all_command_codes()) == 3


def test_stored_codes_are_tagged_with_log_id():
	svc = _get_service()
	record = svc.submit_commands(EXAMPLE_LOG)
	codes = svc.codes_for_command_log(record)
	assert [c.command for c in codes] == ["BACK", "GRAB", "LEFT"]
	assert {c.command_log_id for c in codes} == {record.id}
	assert codes[0].to_dict() == {
		"id": codes[0].id,
		"command_log_id": record.id,
		"command": "BACK",
		"command_code": "01",
	}


def test_config_from_env():
	assert cs.ServiceConfig.from_env({}).max_command_logs == 100
	assert cs.ServiceConfig.from_env({"COMMAND_CODES_MAX_LOGS": "5"}).max_command_logs == 5
	with pytest.raises(ValueError):
		cs.ServiceConfig.from_env({"COMMAND_CODES_MAX_LOGS": "many"})
	with pytest.raises(ValueError):
		cs.ServiceConfig.from_env({"COMMAND_CODES_MAX_LOGS": "0"})


def test_service_reads_config_from_environment(monkeypatch):
	monkeypatch.setenv("COMMAND_CODES_MAX_LOGS", "7")
	svc = cs.CommandEncodingService()
	assert svc.config.max_command_logs == 7
	assert svc.storage.max_command_logs == 7
