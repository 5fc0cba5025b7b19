from nosplug import defaults


def test_env_var_used_when_set(monkeypatch):
    monkeypatch.setenv("NOSPLUG_TEST_VAR", "value")
    assert defaults.get_env_var_or_default("NOSPLUG_TEST_VAR", "fallback") == "value"


def test_env_var_default_when_unset(monkeypatch):
    monkeypatch.delenv("NOSPLUG_TEST_VAR", raising=False)
    assert defaults.get_env_var_or_default("NOSPLUG_TEST_VAR", "fallback") == "fallback"


def test_env_var_default_when_empty(monkeypatch):
    monkeypatch.setenv("NOSPLUG_TEST_VAR", "")
    assert defaults.get_env_var_or_default("NOSPLUG_TEST_VAR", "fallback") == "fallback"


def test_peer_connection_string_default(monkeypatch):
    monkeypatch.delenv("WEBRTC_CONNECT", raising=False)
    assert defaults.get_peer_connection_string() == "stun:stun.l.google.com:19302"


def test_peer_connection_string_override(monkeypatch):
    monkeypatch.setenv("WEBRTC_CONNECT", "stun:turn.example.com:3478")
    assert defaults.get_peer_connection_string() == "stun:turn.example.com:3478"


def test_default_server_name(monkeypatch):
    monkeypatch.delenv("WEBRTC_SERVER", raising=False)
    assert defaults.get_default_server_name() == "localhost"
    monkeypatch.setenv("WEBRTC_SERVER", "signal.example.com")
    assert defaults.get_default_server_name() == "signal.example.com"


def test_peer_name():
    assert defaults.get_peer_name() == "nosWebRTC_Client"