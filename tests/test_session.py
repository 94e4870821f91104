import os, signal, time
import pytest
from bwexport.errors import NotConfiguredError, SessionError, CommandError
from bwexport.lib.config import ExportConfig
from bwexport.lib.session import acquire_session, export_context, interrupt_handler, preflight
from conftest import FakeClient


def test_preflight_not_logged_in():
    with pytest.raises(NotConfiguredError) as exc:
        preflight(FakeClient(logged_in=False))
    assert exc.value.exit_code == 255


def test_reuses_valid_supplied_session():
    c = FakeClient(unlocked=True)
    assert acquire_session(c, 'given') == 'given'
    assert c.session == 'given'
    assert 'unlock' not in c.calls


def test_rejected_session_reprompts():
    c = FakeClient(unlocked=False, token='fresh')
    assert acquire_session(c, 'given') == 'fresh'
    assert c.session == 'fresh'


def test_no_supplied_session_prompts_without_probe():
    c = FakeClient(token='fresh')
    assert acquire_session(c, None) == 'fresh'
    assert c.calls == ['unlock']


def test_empty_token_fails():
    with pytest.raises(SessionError) as exc:
        acquire_session(FakeClient(token=''), None)
    assert exc.value.exit_code == 254


def test_failed_unlock_is_session_error():
    c = FakeClient()
    def boom():
        raise CommandError(['bw', 'unlock'], 1, 'Invalid master password.')
    c.unlock = boom
    with pytest.raises(SessionError):
        acquire_session(c, None)


def test_context_cleans_up_and_locks(staging_root, capsys):
    c = FakeClient()
    with export_context(ExportConfig(), c) as ctx:
        assert ctx.attachments_dir.is_dir()
        assert oct(os.stat(ctx.staging_dir).st_mode & 0o777) == oct(0o700)
        assert c.session == 'tok-123'
        (ctx.build_dir / 'vault.json').write_text('{}')
    assert list(staging_root.iterdir()) == []
    assert c.calls[-1] == 'lock' and c.session is None
    out = capsys.readouterr()
    assert 'Session token destroyed.' in out.out and 'Clean-up complete.' in out.out
    assert 'Something went wrong' not in out.err


def test_context_keep_session(staging_root, capsys):
    c = FakeClient()
    with export_context(ExportConfig(keep_session=True), c):
        pass
    assert 'lock' not in c.calls and c.session == 'tok-123'
    assert 'Session token destroyed.' not in capsys.readouterr().out


def test_context_cleans_up_on_error(staging_root, capsys):
    c = FakeClient()
    with pytest.raises(RuntimeError):
        with export_context(ExportConfig(), c):
            raise RuntimeError('bw exploded')
    assert list(staging_root.iterdir()) == []
    assert 'lock' in c.calls
    assert 'Something went wrong! Aborting.' in capsys.readouterr().err


def test_context_cleans_up_on_interrupt(staging_root, capsys):
    c = FakeClient()
    with pytest.raises(KeyboardInterrupt):
        with export_context(ExportConfig(), c):
            raise KeyboardInterrupt
    assert list(staging_root.iterdir()) == []
    out = capsys.readouterr()
    assert 'Something went wrong' not in out.err and 'Clean-up complete.' in out.out


def test_context_cleans_up_when_session_fails(staging_root):
    with pytest.raises(SessionError):
        with export_context(ExportConfig(), FakeClient(token='')):
            pytest.fail('body must not run')
    assert list(staging_root.iterdir()) == []


def test_finalizer_survives_lock_failure(staging_root):
    c = FakeClient()
    def boom():
        raise CommandError(['bw', 'lock'], 1)
    c.lock = boom
    with export_context(ExportConfig(), c) as ctx:
        pass
    assert ctx.finalized and c.session is None
    assert list(staging_root.iterdir()) == []


def test_not_configured_creates_no_staging(staging_root):
    with pytest.raises(NotConfiguredError):
        with export_context(ExportConfig(), FakeClient(logged_in=False)):
            pass
    assert list(staging_root.iterdir()) == []


def test_sigint_becomes_keyboard_interrupt_and_handler_restored():
    before = signal.getsignal(signal.SIGINT)
    with pytest.raises(KeyboardInterrupt):
        with interrupt_handler():
            os.kill(os.getpid(), signal.SIGINT)
            time.sleep(5)
    assert signal.getsignal(signal.SIGINT) is before


def test_sigterm_exits_with_signal_status():
    before = signal.getsignal(signal.SIGTERM)
    with pytest.raises(SystemExit) as exc:
        with interrupt_handler():
            os.kill(os.getpid(), signal.SIGTERM)
            time.sleep(5)
    assert exc.value.code == 128 + signal.SIGTERM
    assert signal.getsignal(signal.SIGTERM) is before


def test_terminated_run_is_reported_as_failure(staging_root, capsys):
    with pytest.raises(SystemExit):
        with export_context(ExportConfig(), FakeClient()):
            raise SystemExit(143)
    assert 'Something went wrong! Aborting.' in capsys.readouterr().err
    assert list(staging_root.iterdir()) == []


def test_interrupted_lock_still_finishes_cleanup(staging_root, capsys):
    c = FakeClient()
    def slow_lock():
        c.calls.append('lock')
        raise KeyboardInterrupt
    c.lock = slow_lock
    with pytest.raises(KeyboardInterrupt):
        with export_context(ExportConfig(), c):
            raise KeyboardInterrupt
    assert c.session is None
    out = capsys.readouterr().out
    assert 'Session token destroyed.' in out and 'Clean-up complete.' in out
    assert list(staging_root.iterdir()) == []


def test_interrupted_lock_does_not_mask_failure(staging_root):
    c = FakeClient()
    def slow_lock():
        raise KeyboardInterrupt
    c.lock = slow_lock
    with pytest.raises(RuntimeError):
        with export_context(ExportConfig(), c):
            raise RuntimeError('bw exploded')
    assert c.session is None


def test_signals_ignored_while_finalizing(staging_root):
    c = FakeClient()
    seen = []
    def lock():
        seen.append((signal.getsignal(signal.SIGINT), signal.getsignal(signal.SIGTERM)))
    c.lock = lock
    with interrupt_handler():
        with export_context(ExportConfig(), c):
            pass
    assert seen == [(signal.SIG_IGN, signal.SIG_IGN)]


def test_staging_removed_if_interrupted_right_after_creation(staging_root, monkeypatch):
    from bwexport.lib import session
    real_echo = session.click.echo
    def echo(message=None, **kwargs):
        if str(message).startswith('Using staging dir'):
            raise KeyboardInterrupt
        real_echo(message, **kwargs)
    monkeypatch.setattr(session.click, 'echo', echo)
    with pytest.raises(KeyboardInterrupt):
        with export_context(ExportConfig(), FakeClient()):
            pytest.fail('body must not run')
    assert list(staging_root.iterdir()) == []
