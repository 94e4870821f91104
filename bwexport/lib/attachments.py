"""Attachment collection: flatten `bw list items` output and download each file."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any, Dict, Iterable, List
import click
from bwexport.errors import ExportError

log = logging.getLogger(__name__)

@dataclass(frozen=True)
class Attachment:
	item_id: str
	attachment_id: str
	filename: str

	def target(self, attachments_dir: Path) -> Path:
		# Item ids become a directory name and must be a single path component
		item_dir = _component(self.item_id)
		if not item_dir or item_dir != self.item_id:
			raise ExportError(f"Refusing to stage attachments for unsafe item id {self.item_id!r}")
		# Crafted filenames are reduced to their last component
		name = _component(self.filename) or _component(self.attachment_id)
		if not name:
			raise ExportError(f"No usable file name for attachment {self.attachment_id!r}")
		return attachments_dir / item_dir / name

def _component(value: str) -> str:
	name = PureWindowsPath(PurePosixPath(value).name).name
	return '' if name in ('.', '..') else name

def collect_attachments(items: Iterable[Dict[str, Any]]) -> List[Attachment]:
	"""One record per (item, attachment), in enumeration order."""
	out: List[Attachment] = []
	for item in items:
		for att in item.get('attachments') or []:
			out.append(Attachment(str(item['id']), str(att['id']), str(att.get('fileName') or att['id'])))
	return out

def download_attachments(client, attachments: List[Attachment], attachments_dir: Path) -> List[Path]:
	if not attachments:
		click.echo('No attachments found.')
		return []
	click.echo(f'Processing {len(attachments)} attachments...')
	written = []
	for att in attachments:
		dest = att.target(attachments_dir)
		dest.parent.mkdir(parents=True, exist_ok=True)
		log.debug('downloading %s of item %s', att.attachment_id, att.item_id)
		client.get_attachment(att.attachment_id, att.item_id, dest)
		written.append(dest)
	click.echo('Download of attachments complete.')
	return written
