from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

__all__ = [
    "REQUEST_TYPES",
    "LoginRequest",
    "JoinRequest",
    "JoinMutedRequest",
    "KickRequest",
    "TokenRequest",
    "token_request_adapter",
]


class _TokenRequestBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="userId")


class _ChannelRequestBase(_TokenRequestBase):
    channel_id: str = Field(..., alias="channelID")


class LoginRequest(_TokenRequestBase):
    """Sign a user in to the voice service."""
    type: Literal["login"]


class JoinRequest(_ChannelRequestBase):
    """Join a non-positional channel."""
    type: Literal["join"]


class JoinMutedRequest(_ChannelRequestBase):
    """Join a non-positional channel with the microphone muted."""
    type: Literal["join_muted"]


class KickRequest(_ChannelRequestBase):
    """Remove a user from a channel (issued as the admin user)."""
    type: Literal["kick"]


TokenRequest = Annotated[
    Union[LoginRequest, JoinRequest, JoinMutedRequest, KickRequest],
    Field(discriminator="type"),
]

token_request_adapter: TypeAdapter[TokenRequest] = TypeAdapter(TokenRequest)

REQUEST_TYPES = ("login", "join", "join_muted", "kick")
