from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response, status
from pydantic import ValidationError

from ..domain.channels import ChannelType
from ..errors import UnsupportedRequestTypeError
from ..logging_conf import get_logger
from ..service.token_service import VivoxTokenService
from .models import (
    REQUEST_TYPES,
    JoinMutedRequest,
    JoinRequest,
    KickRequest,
    LoginRequest,
    token_request_adapter,
)

router = APIRouter()
logger = get_logger("api")

TOKEN_HEADER = "token"


def _malformed(message: str) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"error_code": "malformed_request", "error_message": message},
    )


def get_token_service(request: Request) -> VivoxTokenService:
    return request.app.state.token_service


def issue_token(service: VivoxTokenService, req: Any) -> str:
    """Dispatch a validated request to the matching service call."""
    if isinstance(req, LoginRequest):
        return service.login(req.user_id)
    if isinstance(req, JoinRequest):
        return service.join(req.user_id, req.channel_id, ChannelType.non_positional)
    if isinstance(req, JoinMutedRequest):
        return service.join_muted(req.user_id, req.channel_id, ChannelType.non_positional)
    if isinstance(req, KickRequest):
        return service.kick(req.user_id, req.channel_id, ChannelType.non_positional)
    raise UnsupportedRequestTypeError(getattr(req, "type", None))


async def parse_token_request(request: Request) -> Any:
    """Read the body and validate it into one of the TokenRequest variants.

    Raises:
        UnsupportedRequestTypeError: if `type` names no known request kind.
        HTTPException(422): for any other malformed body.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise _malformed("Request body must be valid JSON")

    if not isinstance(body, dict):
        raise _malformed("Request body must be a JSON object")
    if "type" in body and body["type"] not in REQUEST_TYPES:
        raise UnsupportedRequestTypeError(body["type"])

    try:
        return token_request_adapter.validate_python(body)
    except ValidationError as e:
        raise _malformed(
            "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
        )


@router.post(
    "/createToken",
    status_code=status.HTTP_200_OK,
    summary="Issue a Vivox access token in the `token` response header",
)
async def create_token(request: Request) -> Response:
    """Issue a token for a login, join, join_muted or kick request."""
    try:
        req = await parse_token_request(request)
    except UnsupportedRequestTypeError as e:
        logger.warning(
            "token.unsupported",
            extra={"event": "token_unsupported", "request_type": str(e.request_type)},
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error_code": e.code, "error_message": str(e)},
        )

    try:
        token = issue_token(get_token_service(request), req)
    except Exception:
        logger.exception(
            "token.failed",
            extra={"event": "token_failed", "request_type": req.type, "user_id": req.user_id},
        )
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(
        status_code=status.HTTP_200_OK,
        headers={TOKEN_HEADER: token, "Access-Control-Expose-Headers": TOKEN_HEADER},
    )
