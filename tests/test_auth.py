from budget_planner.auth import env_owner, session_owner, static_owner


def test_static_owner():
    assert static_owner('user-1')() == 'user-1'
    assert static_owner('  ')() is None
    assert static_owner(None)() is None


def test_env_owner_reads_at_call_time(monkeypatch):
    resolve = env_owner('TEST_BUDGET_OWNER')
    monkeypatch.delenv('TEST_BUDGET_OWNER', raising=False)
    assert resolve() is None
    monkeypatch.setenv('TEST_BUDGET_OWNER', 'user-9')
    assert resolve() == 'user-9'


def test_session_owner_follows_session_changes():
    session = {}
    resolve = session_owner(session)
    assert resolve() is None
    session['user_id'] = 42
    assert resolve() == '42'
