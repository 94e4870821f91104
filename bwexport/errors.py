"""Error kinds surfaced to the user, each carrying the process exit status."""
from __future__ import annotations
from typing import Sequence
from config.settings import EXIT_NOT_CONFIGURED, EXIT_NO_SESSION, EXIT_PASSPHRASE_MISMATCH

class ExportError(Exception):
	exit_code = 1

	def __init__(self, message: str, exit_code: int | None = None):
		super().__init__(message)
		if exit_code is not None:
			self.exit_code = exit_code

class NotConfiguredError(ExportError):
	exit_code = EXIT_NOT_CONFIGURED

class SessionError(ExportError):
	exit_code = EXIT_NO_SESSION

class PassphraseMismatchError(ExportError):
	exit_code = EXIT_PASSPHRASE_MISMATCH

class CommandError(ExportError):
	"""An external tool exited non-zero; its status becomes ours."""

	def __init__(self, cmd: Sequence[str], returncode: int, stderr: str = ''):
		self.cmd = list(cmd)
		self.returncode = returncode
		self.stderr = stderr or ''
		msg = f"'{self.cmd[0]}' failed with status {returncode}"
		if self.stderr.strip():
			msg += f": {self.stderr.strip()}"
		# A signal-killed child reports a negative status
		super().__init__(msg, returncode if returncode > 0 else 1)
