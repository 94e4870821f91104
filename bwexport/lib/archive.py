"""Pack the staging build tree into a gzip tarball (and unpack it again)."""
from __future__ import annotations
import logging, tarfile
from pathlib import Path
from config.settings import ARCHIVE_PREFIX, ARCHIVE_SUFFIX
from bwexport.errors import ExportError

log = logging.getLogger(__name__)

def archive_name(timestamp: str) -> str:
	return f"{ARCHIVE_PREFIX}_{timestamp}{ARCHIVE_SUFFIX}"

def create_archive(build_dir: Path, archive_path: Path) -> Path:
	"""Archive the contents of build_dir with member names relative to it."""
	with tarfile.open(archive_path, 'w:gz') as tar:
		for child in sorted(build_dir.iterdir()):
			tar.add(child, arcname=child.name)
	log.debug('archived %s -> %s', build_dir, archive_path)
	return archive_path

def extract_archive(archive_path: Path, dest: Path) -> Path:
	dest = Path(dest)
	dest.mkdir(parents=True, exist_ok=True)
	root = dest.resolve()
	with tarfile.open(archive_path, 'r:gz') as tar:
		members = tar.getmembers()
		for m in members:
			target = (root / m.name).resolve()
			if target != root and root not in target.parents:
				raise ExportError(f'Refusing to extract {m.name!r} outside {dest}')
			if m.issym() or m.islnk():
				raise ExportError(f'Refusing to extract link {m.name!r}')
		# Older interpreters lack extraction filters
		extra = {'filter': 'data'} if hasattr(tarfile, 'data_filter') else {}
		tar.extractall(dest, members=members, **extra)
	return dest
