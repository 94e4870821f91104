"""Bitwarden CLI client.

Every capability is one `bw` invocation. The session token is an explicit
attribute handed to child processes via their environment (BW_SESSION),
never via argv and never via our own os.environ.
"""
from __future__ import annotations
import json, logging, os
from pathlib import Path
from typing import Any, Dict, List, Optional
from config.settings import DEFAULT_BW_CLI, ENV_SESSION
from bwexport.errors import ExportError
from . import runner

log = logging.getLogger(__name__)

class BitwardenClient:
	def __init__(self, binary: str = DEFAULT_BW_CLI, session: Optional[str] = None):
		self.binary = binary
		self.session = session

	def _env(self) -> Dict[str, str]:
		env = dict(os.environ)
		env.pop(ENV_SESSION, None)
		if self.session:
			env[ENV_SESSION] = self.session
		return env

	def _run(self, *args: str, **kwargs):
		return runner.run([self.binary, *args], env=self._env(), **kwargs)

	def is_logged_in(self) -> bool:
		return self._run('login', '--check', check=False).returncode == 0

	def is_unlocked(self) -> bool:
		return self._run('unlock', '--check', check=False).returncode == 0

	def unlock(self) -> str:
		"""Prompt for the master password on the terminal and return the raw token."""
		result = self._run('unlock', '--raw', capture=False)
		return (result.stdout or '').strip()

	def sync(self) -> None:
		self._run('sync')

	def list_items(self) -> List[Dict[str, Any]]:
		out = self._run('list', 'items').stdout
		try:
			items = json.loads(out or '[]')
		except json.JSONDecodeError as e:
			raise ExportError(f'Could not parse item list from {self.binary}: {e}') from e
		if not isinstance(items, list):
			raise ExportError(f'Unexpected item list from {self.binary}')
		return items

	def export(self, output: Path, password: Optional[str] = None) -> None:
		if password:
			self._run('export', '--format', 'encrypted_json', '--password', password, '--output', str(output))
		else:
			self._run('export', '--format', 'json', '--output', str(output))

	def get_attachment(self, attachment_id: str, item_id: str, output: Path) -> None:
		self._run('get', 'attachment', attachment_id, '--itemid', item_id, '--output', str(output))

	def lock(self) -> None:
		self._run('lock')
