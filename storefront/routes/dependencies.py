"""Shared route dependencies"""

from typing import Optional

from fastapi import Header, Request, Response

from ..core.session import CartSession, CartSessionManager

SESSION_HEADER = "X-Session-Id"


def get_session_manager(request: Request) -> CartSessionManager:
    """Session manager built at application startup"""
    return request.app.state.session_manager


async def get_cart_session(
    request: Request,
    response: Response,
    x_session_id: Optional[str] = Header(None),
) -> CartSession:
    """Resolve the caller's cart session, minting one if no session header was sent"""
    manager = get_session_manager(request)
    session = await manager.get_session(x_session_id)
    response.headers[SESSION_HEADER] = session.session_id
    return session
