from __future__ import annotations

import pytest

from token_broker.domain.channels import ChannelType
from token_broker.domain.tokens import Action, decode_access_token
from token_broker.errors import TokenGenerationError
from tests.conftest import FIXED_NOW, SECRET


def _decode(token: str):
    return decode_access_token(token, secret_key=SECRET)


def test_login_claims(fixed_service):
    claims = _decode(fixed_service.login("alice"))
    assert claims.iss == "i"
    assert claims.vxa is Action.login
    assert claims.f == "sip:.i.alice.@d"
    assert claims.t is None and claims.sub is None
    assert claims.exp == int(FIXED_NOW) + 90


def test_join_defaults_to_non_positional_channel(fixed_service):
    claims = _decode(fixed_service.join("alice", "lobby"))
    assert claims.vxa is Action.join
    assert claims.f == "sip:.i.alice.@d"
    assert claims.t == "sip:confctl-g-i.lobby@d"


def test_join_positional_channel(fixed_service):
    claims = _decode(fixed_service.join("alice", "arena", ChannelType.positional))
    assert claims.t == "sip:confctl-d-i.arena!p-32-1-1.000-1@d"


def test_join_muted(fixed_service):
    claims = _decode(fixed_service.join_muted("alice", "lobby"))
    assert claims.vxa is Action.join_muted
    assert claims.t == "sip:confctl-g-i.lobby@d"


def test_kick_is_issued_by_the_admin_user(fixed_service):
    claims = _decode(fixed_service.kick("mallory", "lobby"))
    assert claims.vxa is Action.kick
    assert claims.f == "sip:.i.a.@d"
    assert claims.sub == "sip:.i.mallory.@d"
    assert claims.t == "sip:confctl-g-i.lobby@d"


def test_ttl_comes_from_config(issuer_config):
    from token_broker.service.token_service import VivoxTokenService

    service = VivoxTokenService(issuer_config.model_copy(update={"ttl_seconds": 5}), clock=lambda: 10.0)
    assert _decode(service.login("alice")).exp == 15


def test_tokens_differ_per_channel(token_service):
    assert token_service.join("alice", "one") != token_service.join("alice", "two")


@pytest.mark.parametrize("user_id", ["", None])
def test_login_requires_user_id(token_service, user_id):
    with pytest.raises(TokenGenerationError):
        token_service.login(user_id)


@pytest.mark.parametrize("call", ["join", "join_muted", "kick"])
def test_channel_actions_require_channel_id(token_service, call):
    with pytest.raises(TokenGenerationError):
        getattr(token_service, call)("alice", "")


def test_unknown_channel_type_is_a_generation_error(token_service):
    with pytest.raises(TokenGenerationError):
        token_service.join("alice", "lobby", "z")
