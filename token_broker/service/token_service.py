from __future__ import annotations

import time
from collections.abc import Callable

from ..config import TokenIssuerConfig
from ..domain.channels import ChannelType, channel_uri, user_uri
from ..domain.tokens import AccessTokenClaims, Action, encode_access_token, new_serial
from ..errors import TokenGenerationError
from ..logging_conf import get_logger

__all__ = ["VivoxTokenService"]

logger = get_logger("service.token")


class VivoxTokenService:
    """Issues signed Vivox access tokens for one issuer.

    Holds only the immutable issuer config, so a single instance is safe to
    share between concurrent requests.
    """

    def __init__(
        self, config: TokenIssuerConfig, *, clock: Callable[[], float] = time.time
    ) -> None:
        self._config = config
        self._clock = clock

    @property
    def config(self) -> TokenIssuerConfig:
        return self._config

    # ------------------------
    # Use-cases
    # ------------------------

    def login(self, user_id: str) -> str:
        """Token allowing `user_id` to sign in."""
        return self._issue(Action.login, user_id=user_id)

    def join(
        self,
        user_id: str,
        channel_id: str,
        channel_type: ChannelType = ChannelType.non_positional,
    ) -> str:
        """Token allowing `user_id` to join `channel_id`."""
        return self._issue(
            Action.join, user_id=user_id, channel_id=channel_id, channel_type=channel_type
        )

    def join_muted(
        self,
        user_id: str,
        channel_id: str,
        channel_type: ChannelType = ChannelType.non_positional,
    ) -> str:
        """Like join(), but the user enters the channel muted."""
        return self._issue(
            Action.join_muted,
            user_id=user_id,
            channel_id=channel_id,
            channel_type=channel_type,
        )

    def kick(
        self,
        user_id: str,
        channel_id: str,
        channel_type: ChannelType = ChannelType.non_positional,
    ) -> str:
        """Token, signed as the admin user, removing `user_id` from `channel_id`."""
        return self._issue(
            Action.kick, user_id=user_id, channel_id=channel_id, channel_type=channel_type
        )

    # ------------------------
    # Internals
    # ------------------------

    def _issue(
        self,
        action: Action,
        *,
        user_id: str,
        channel_id: str | None = None,
        channel_type: ChannelType = ChannelType.non_positional,
    ) -> str:
        if not user_id:
            raise TokenGenerationError("user_id must be a non-empty string")
        needs_channel = action is not Action.login
        if needs_channel and not channel_id:
            raise TokenGenerationError("channel_id must be a non-empty string")

        cfg = self._config
        try:
            subject = user_uri(issuer=cfg.issuer, user_id=user_id, domain=cfg.domain)
            claims = AccessTokenClaims(
                iss=cfg.issuer,
                exp=int(self._clock()) + cfg.ttl_seconds,
                vxa=action,
                vxi=new_serial(),
                f=subject,
            )
            if needs_channel:
                claims.t = channel_uri(
                    issuer=cfg.issuer,
                    channel_id=channel_id,
                    domain=cfg.domain,
                    channel_type=channel_type,
                )
            if action is Action.kick:
                claims.f = user_uri(
                    issuer=cfg.issuer, user_id=cfg.admin_user_id, domain=cfg.domain
                )
                claims.sub = subject
            token = encode_access_token(claims, secret_key=cfg.secret_key)
        except ValueError as e:  # pydantic ValidationError is a ValueError
            raise TokenGenerationError(f"Could not sign {action.value} token: {e}") from e

        logger.info(
            "token.issued",
            extra={
                "event": "token_issued",
                "action": action.value,
                "user_id": user_id,
                "channel_id": channel_id,
                "vxi": claims.vxi,
            },
        )
        return token
