"""Slack user keys and the Lyrebird OAuth ``state`` parameter.

Both are plain strings joined with ``STATE_DELIMITER``. The state token is not
signed: whatever Lyrebird hands back on the redirect is trusted as-is.
"""
from typing import NamedTuple

STATE_DELIMITER = "_$_"

class SlackIdentity(NamedTuple):
    team_id: str
    user_id: str
    username: str

def make_user_key(team_id: str, user_id: str) -> str:
    """Primary key of a credential record"""
    return f"{team_id}{STATE_DELIMITER}{user_id}"

def encode_state(team_id: str, user_id: str, username: str) -> str:
    return STATE_DELIMITER.join([team_id, user_id, username])

def decode_state(state: str) -> SlackIdentity:
    """Parse a state token produced by encode_state.

    The username is whatever follows the second delimiter, so it may itself
    contain the delimiter. Raises ValueError on a malformed token.
    """
    if not state:
        raise ValueError("Empty OAuth state")

    parts = state.split(STATE_DELIMITER, 2)
    if len(parts) != 3:
        raise ValueError(f"Malformed OAuth state: expected 3 parts, got {len(parts)}")

    return SlackIdentity(*parts)
