"""The export pipeline: sync, export, attachments, archive, encrypt."""
from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
import click
from config.settings import ENCRYPTED_SUFFIX, TIMESTAMP_FORMAT, VAULT_FILE_NAME
from bwexport.errors import PassphraseMismatchError
from .archive import archive_name, create_archive
from .attachments import collect_attachments, download_attachments
from .bw import BitwardenClient
from .config import ExportConfig
from .crypto import check_password_strength, encrypt_file
from .session import ExportContext, export_context

log = logging.getLogger(__name__)

WEAK_SCORE = 40

def _prompt(text: str) -> str:
	return click.prompt(text, hide_input=True)

def sync_timestamp(now: Optional[datetime] = None) -> str:
	return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)

def obtain_passphrase(supplied: Optional[str] = None, prompt: Callable[[str], str] = _prompt) -> str:
	"""Return the supplied passphrase, or ask twice and insist both entries match."""
	if supplied:
		return supplied
	first = prompt('Choose a password for the export')
	second = prompt('Confirm your password')
	if first != second:
		raise PassphraseMismatchError('Your passwords did not match.')
	score, feedback = check_password_strength(second)
	if score < WEAK_SCORE:
		click.echo(f'Warning: weak export password: {feedback}', err=True)
	return second

def export_vault(ctx: ExportContext, passphrase: str) -> Path:
	out = ctx.build_dir / VAULT_FILE_NAME
	if ctx.config.enc_vault:
		click.echo('Staging base vault as encrypted json file using supplied password.')
		ctx.client.export(out, password=passphrase)
	else:
		click.echo('Staging base vault as unencrypted json file (BW_ENC_VAULT not set).')
		ctx.client.export(out)
	return out

def run_export(config: ExportConfig, client: Optional[BitwardenClient] = None,
		prompt: Callable[[str], str] = _prompt, encrypt: Callable[..., Path] = encrypt_file,
		now: Optional[datetime] = None) -> Path:
	"""Run the whole export and return the path of the encrypted archive."""
	client = client or BitwardenClient(config.bw_bin)
	with export_context(config, client) as ctx:
		client.sync()
		stamp = sync_timestamp(now)
		passphrase = obtain_passphrase(config.enc_pass, prompt)
		export_vault(ctx, passphrase)

		attachments = collect_attachments(client.list_items())
		download_attachments(client, attachments, ctx.attachments_dir)

		name = archive_name(stamp)
		archive = create_archive(ctx.build_dir, ctx.staging_dir / name)
		export_dir = Path(config.export_dir)
		export_dir.mkdir(parents=True, exist_ok=True)
		target = export_dir / (name + ENCRYPTED_SUFFIX)
		encrypt(archive, target, passphrase, gpg=config.gpg_bin)
		log.info('wrote %s', target)
		return target.resolve()
