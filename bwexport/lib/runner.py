"""Thin wrapper around subprocess for the external tools (bw, gpg)."""
from __future__ import annotations
import logging, subprocess
from typing import Mapping, Optional, Sequence
from bwexport.errors import CommandError

log = logging.getLogger(__name__)

# Arguments whose following value must never reach the logs
SECRET_FLAGS = frozenset({'--password', '--passphrase', '--session'})

def mask(cmd: Sequence[str]) -> str:
	out = []; hide = False
	for arg in cmd:
		out.append('****' if hide else arg)
		hide = arg in SECRET_FLAGS
	return ' '.join(out)

def run(cmd: Sequence[str], *, env: Optional[Mapping[str, str]] = None, input: Optional[str] = None,
		capture: bool = True, check: bool = True) -> subprocess.CompletedProcess:
	"""Run a command and return the CompletedProcess.

	With capture=False only stdout is captured; stdin and stderr stay on the
	terminal so the tool can prompt the user.
	"""
	log.debug('exec: %s', mask(cmd))
	kwargs = dict(env=dict(env) if env is not None else None, text=True, check=False)
	if capture:
		kwargs.update(capture_output=True, input=input)
	else:
		kwargs.update(stdout=subprocess.PIPE)
	try:
		result = subprocess.run(list(cmd), **kwargs)
	except FileNotFoundError as e:
		raise CommandError(cmd, 127, f'executable not found: {cmd[0]}') from e
	log.debug('exit %s: %s', result.returncode, cmd[0])
	if check and result.returncode != 0:
		raise CommandError(cmd, result.returncode, result.stderr if capture else '')
	return result
