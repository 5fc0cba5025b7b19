"""Connection defaults and the JSON keys of the signalling protocol."""

from __future__ import annotations

import os

AUDIO_LABEL = "audio_label"
VIDEO_LABEL = "video_label"
STREAM_ID = "stream_id"
DEFAULT_SERVER_PORT = 1919

CANDIDATE_KEY = "candidate"
SDP_KEY = "sdp"
SDP_MID_KEY = "sdpMid"
SDP_MLINE_INDEX_KEY = "sdpMLineIndex"
PEER_ID_KEY = "playerId"
TYPE_KEY = "type"
TYPE_ANSWER = "answer"
TYPE_OFFER = "offer"
TYPE_ICE = "iceCandidate"

_DEFAULT_PEER_CONNECTION = "stun:stun.l.google.com:19302"
_DEFAULT_SERVER_NAME = "localhost"
_PEER_NAME = "nosWebRTC_Client"


def get_env_var_or_default(env_var_name: str, default_value: str) -> str:
    """Return the environment variable's value, or the default if unset or empty."""
    return os.environ.get(env_var_name) or default_value


def get_peer_connection_string() -> str:
    """Return the ICE server to use, overridable with WEBRTC_CONNECT."""
    return get_env_var_or_default("WEBRTC_CONNECT", _DEFAULT_PEER_CONNECTION)


def get_default_server_name() -> str:
    """Return the signalling server host, overridable with WEBRTC_SERVER."""
    return get_env_var_or_default("WEBRTC_SERVER", _DEFAULT_SERVER_NAME)


def get_peer_name() -> str:
    """Return the name this client announces to its peers."""
    return _PEER_NAME