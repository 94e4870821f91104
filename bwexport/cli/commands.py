"""CLI commands implemented with click.

- `bw-export export`: full vault + attachments export into one gpg file
- `bw-export decrypt`: decrypt and unpack such a file
- `bw-export pw-strength`: rate a candidate export password
"""
from __future__ import annotations
import logging, os, shutil, sys, tempfile
from pathlib import Path
import click
from config.settings import ENV_LOG_LEVEL, EXIT_INTERRUPTED, LOG_FORMAT, LOG_LEVEL
from bwexport.errors import ExportError
from bwexport.lib.archive import extract_archive
from bwexport.lib.config import ExportConfig
from bwexport.lib.crypto import check_password_strength, decrypt_file
from bwexport.lib.export import run_export
from bwexport.lib.session import interrupt_handler

def _fail(e: ExportError):
	click.echo(f'Error: {e}', err=True)
	sys.exit(e.exit_code)

def _aborted():
	click.echo('\nAborted by user.')
	sys.exit(EXIT_INTERRUPTED)

@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Log external commands (secrets masked).')
def cli(verbose):
	"""Export a Bitwarden vault, attachments included, into an encrypted archive."""
	level = 'DEBUG' if verbose else os.environ.get(ENV_LOG_LEVEL, LOG_LEVEL).upper()
	logging.basicConfig(level=getattr(logging, level, logging.WARNING), format=LOG_FORMAT)

@cli.command()
@click.option('--export-dir', type=click.Path(file_okay=False, path_type=Path), default=None, help='Destination directory (env BW_EXPORT_DIR, default: cwd).')
@click.option('--encrypt-vault/--no-encrypt-vault', default=None, help='Also encrypt vault.json itself (env BW_ENC_VAULT).')
@click.option('--keep-session/--no-keep-session', default=None, help='Do not lock the vault on exit (env BW_KEEP_SESSION).')
@click.option('--bw', 'bw_bin', default=None, help='Bitwarden CLI executable (env BW_CLI).')
@click.option('--gpg', 'gpg_bin', default=None, help='gpg executable (env GPG_CLI).')
def export(export_dir, encrypt_vault, keep_session, bw_bin, gpg_bin):
	"""Export vault.json and all attachments into bw_export_<time>.tar.gz.gpg.

	The archive password is taken from BW_ENC_PASS or prompted for; an
	existing session may be passed in BW_SESSION.
	"""
	config = ExportConfig.from_env().merged(export_dir=export_dir, enc_vault=encrypt_vault,
		keep_session=keep_session, bw_bin=bw_bin, gpg_bin=gpg_bin)
	try:
		with interrupt_handler():
			path = run_export(config)
	except (KeyboardInterrupt, click.Abort):
		_aborted()
	except ExportError as e:
		_fail(e)
	click.echo(f"Export to '{path}' finished.")

@cli.command()
@click.argument('archive', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('-o', '--output', type=click.Path(file_okay=False, path_type=Path), default=None, help='Directory to unpack into (default: archive name without extensions).')
@click.option('--gpg', 'gpg_bin', default=None, help='gpg executable (env GPG_CLI).')
def decrypt(archive, output, gpg_bin):
	"""Decrypt an export and unpack vault.json and attachments/."""
	config = ExportConfig.from_env().merged(gpg_bin=gpg_bin)
	passphrase = config.enc_pass or click.prompt('Export password', hide_input=True)
	dest = output or archive.with_name(archive.name.split('.', 1)[0])
	work = Path(tempfile.mkdtemp(prefix='bw_export.'))
	try:
		tarball = decrypt_file(archive, work / 'export.tar.gz', passphrase, gpg=config.gpg_bin)
		extract_archive(tarball, dest)
	except ExportError as e:
		_fail(e)
	finally:
		shutil.rmtree(work, ignore_errors=True)
	click.echo(f"Unpacked to '{dest}'.")

@cli.command('pw-strength')
@click.argument('password', required=False)
def pw_strength_cmd(password):
	"""Rate a password (prompted when not given; env BW_ENC_PASS is not read)."""
	if password is None:
		password = click.prompt('Password', hide_input=True)
	score, fb = check_password_strength(password)
	click.echo(f"Score: {score} -> {fb}")
