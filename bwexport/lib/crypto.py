"""Symmetric encryption of the archive with gpg, plus passphrase strength hints."""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Tuple
from config.settings import CIPHER_ALGO, DEFAULT_GPG_CLI
from . import runner

log = logging.getLogger(__name__)

# Passphrase is fed on stdin; loopback pinentry keeps gpg-agent from prompting
_GPG_BASE = ['--batch', '--yes', '--pinentry-mode', 'loopback', '--passphrase-fd', '0']

def encrypt_file(src: Path, dest: Path, passphrase: str, gpg: str = DEFAULT_GPG_CLI) -> Path:
	"""Encrypt src to dest (overwriting it) with AES256 and the given passphrase."""
	runner.run([gpg, *_GPG_BASE, '--symmetric', '--cipher-algo', CIPHER_ALGO, '-o', str(dest), str(src)],
		input=passphrase + '\n')
	log.debug('encrypted %s -> %s', src, dest)
	return dest

def decrypt_file(src: Path, dest: Path, passphrase: str, gpg: str = DEFAULT_GPG_CLI) -> Path:
	runner.run([gpg, *_GPG_BASE, '-o', str(dest), '--decrypt', str(src)], input=passphrase + '\n')
	return dest

COMMON_PATTERNS = ('password', 'qwerty', 'abc', '123', '111', 'bitwarden')
_LABELS = ((80, 'Very Strong'), (60, 'Strong'), (40, 'Moderate'), (20, 'Weak'), (0, 'Very Weak'))

def check_password_strength(password: str) -> Tuple[int, str]:
	"""Score 0-100 with a short label; only used to warn, never to reject."""
	classes = sum(any(test(c) for c in password)
		for test in (str.islower, str.isupper, str.isdigit, lambda c: not c.isalnum()))
	score = min(len(password), 16) * 3 + classes * 13
	hints = []
	if len(password) < 12: hints.append('use 12+ characters')
	if classes < 3: hints.append('mix case, digits and symbols')
	if any(p in password.lower() for p in COMMON_PATTERNS):
		score -= 20; hints.append('avoid common words')
	score = max(0, min(100, score))
	label = next(name for floor, name in _LABELS if score >= floor)
	text = f"{label} ({score}/100)"
	return score, text + (' - ' + ', '.join(hints) if hints else '')
