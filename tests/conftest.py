import json, shutil, tempfile
from pathlib import Path
import pytest


class FakeClient:
    """Stands in for BitwardenClient; records every call in order."""

    def __init__(self, items=None, files=None, logged_in=True, unlocked=False, token='tok-123'):
        self.items = items or []
        self.files = files or {}
        self.logged_in = logged_in
        self.unlocked = unlocked
        self.token = token
        self.session = None
        self.calls = []

    def is_logged_in(self):
        self.calls.append('login-check')
        return self.logged_in

    def is_unlocked(self):
        self.calls.append('unlock-check')
        return self.unlocked

    def unlock(self):
        self.calls.append('unlock')
        return self.token

    def sync(self):
        self.calls.append('sync')

    def list_items(self):
        self.calls.append('list')
        return json.loads(json.dumps(self.items))

    def export(self, output, password=None):
        self.calls.append(('export', password))
        fmt = 'encrypted_json' if password else 'json'
        Path(output).write_text(json.dumps({'format': fmt, 'items': self.items}))

    def get_attachment(self, attachment_id, item_id, output):
        self.calls.append(('get', attachment_id, item_id))
        Path(output).write_bytes(self.files[attachment_id])

    def lock(self):
        self.calls.append('lock')


class CopyEncrypt:
    """Encrypt stand-in: copies the archive and snapshots the staged tree."""

    def __init__(self):
        self.calls = []
        self.staged = None

    def __call__(self, src, dest, passphrase, gpg='gpg'):
        build = Path(src).parent / 'raw'
        self.staged = {str(p.relative_to(build)): p.read_bytes() for p in build.rglob('*') if p.is_file()}
        self.calls.append((Path(src), Path(dest), passphrase, gpg))
        shutil.copyfile(src, dest)
        return dest


@pytest.fixture
def staging_root(tmp_path, monkeypatch):
    root = tmp_path / 'tmp'
    root.mkdir()
    monkeypatch.setattr(tempfile, 'tempdir', str(root))
    return root


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def copy_encrypt():
    return CopyEncrypt()
