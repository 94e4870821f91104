"""Session lifecycle and the staging area that holds plaintext during a run.

`export_context()` is the one scope that owns both sensitive resources:
it creates the owner-only staging tree, acquires a vault session and
guarantees on every exit path (success, error, interrupt) that the tree
is removed and, unless asked to keep it, the session is locked.
"""
from __future__ import annotations
import logging, os, shutil, signal, tempfile, threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional
import click
from config.settings import ATTACHMENTS_DIR_NAME, BUILD_DIR_NAME, STAGING_MODE
from bwexport.errors import CommandError, ExportError, NotConfiguredError, SessionError
from .bw import BitwardenClient
from .config import ExportConfig

log = logging.getLogger(__name__)

def preflight(client: BitwardenClient) -> None:
	if not client.is_logged_in():
		raise NotConfiguredError('Bitwarden is not set up. Please run `bw login`.')

def acquire_session(client: BitwardenClient, supplied: Optional[str] = None) -> str:
	"""Reuse a supplied token if the client accepts it, otherwise unlock interactively.

	`bw unlock --check` is unreliable on some client versions, so a negative
	answer only ever leads to re-authentication, never to failure.
	"""
	if supplied:
		client.session = supplied
		if client.is_unlocked():
			log.debug('reusing supplied session')
			return supplied
		log.debug('supplied session not accepted')
	click.echo('No valid session available, prompting for password...')
	client.session = None
	try:
		token = client.unlock()
	except CommandError as e:
		raise SessionError('Could not create session token.') from e
	if not token:
		raise SessionError('Could not create session token.')
	client.session = token
	return token

@dataclass
class ExportContext:
	config: ExportConfig
	client: BitwardenClient
	staging_dir: Path
	finalized: bool = False

	@property
	def build_dir(self) -> Path:
		return self.staging_dir / BUILD_DIR_NAME

	@property
	def attachments_dir(self) -> Path:
		return self.build_dir / ATTACHMENTS_DIR_NAME

	def finalize(self, failed: bool = False) -> None:
		"""Remove staged plaintext and release the session. Runs at most once.

		Every step runs even if an earlier one is interrupted; the first
		interrupt is re-raised once the session has been cleared, unless
		the run is already unwinding from a failure.
		"""
		if self.finalized:
			return
		self.finalized = True
		pending = None
		with signals_held():
			if failed:
				click.echo('Something went wrong! Aborting.', err=True)
			try:
				shutil.rmtree(self.staging_dir)
			except OSError as e:
				log.warning('could not remove staging dir %s: %s', self.staging_dir, e)
			except BaseException as e:
				pending = e
				shutil.rmtree(self.staging_dir, ignore_errors=True)
			if not self.config.keep_session:
				try:
					self.client.lock()
				except ExportError as e:
					log.warning('bw lock failed: %s', e)
				except BaseException as e:
					log.warning('bw lock interrupted: %r', e)
					pending = pending or e
				self.client.session = None
				click.echo('Session token destroyed.')
			click.echo('Clean-up complete.')
		if pending is not None and not failed:
			raise pending

def make_staging() -> Path:
	staging = Path(tempfile.mkdtemp(prefix='bw_export.'))
	os.chmod(staging, STAGING_MODE)
	(staging / BUILD_DIR_NAME / ATTACHMENTS_DIR_NAME).mkdir(parents=True)
	return staging

def _is_failure(exc: BaseException) -> bool:
	if isinstance(exc, (KeyboardInterrupt, click.Abort, GeneratorExit)):
		return False
	if isinstance(exc, SystemExit):
		return exc.code not in (None, 0)
	return True

@contextmanager
def export_context(config: ExportConfig, client: BitwardenClient) -> Iterator[ExportContext]:
	preflight(client)
	ctx = ExportContext(config, client, make_staging())
	failed = False
	try:
		click.echo(f"Using staging dir '{ctx.staging_dir}'.")
		acquire_session(client, config.session)
		yield ctx
	except BaseException as e:
		failed = _is_failure(e)
		raise
	finally:
		ctx.finalize(failed)

def _raise_interrupt(signum, frame):
	raise KeyboardInterrupt

def _raise_terminated(signum, frame):
	# Shell convention: killed by signal N exits 128 + N
	raise SystemExit(128 + signum)

HANDLERS = {signal.SIGINT: _raise_interrupt, signal.SIGTERM: _raise_terminated}

def _swap_handlers(handlers) -> dict:
	if threading.current_thread() is not threading.main_thread():
		return {}
	return {s: signal.signal(s, signal.SIG_DFL if h is None else h) for s, h in handlers.items()}

@contextmanager
def interrupt_handler(handlers=None) -> Iterator[None]:
	"""SIGINT unwinds as KeyboardInterrupt (a clean abort), SIGTERM as SystemExit(143)."""
	previous = _swap_handlers(HANDLERS if handlers is None else handlers)
	try:
		yield
	finally:
		_swap_handlers(previous)

@contextmanager
def signals_held() -> Iterator[None]:
	"""Ignore SIGINT/SIGTERM so cleanup cannot be cut short."""
	previous = _swap_handlers({s: signal.SIG_IGN for s in HANDLERS})
	try:
		yield
	finally:
		_swap_handlers(previous)
