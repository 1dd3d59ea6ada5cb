from __future__ import annotations

import ipaddress
import logging
from typing import Optional

from .contracts import ActorContext, RequestContext
from .events import SYSTEM_ACTOR

logger = logging.getLogger(__name__)

ORIGIN_ADDRESS_MAX_LENGTH = 45
USER_AGENT_MAX_LENGTH = 500


def resolve_actor(actor: Optional[ActorContext]) -> tuple[Optional[str], str]:
    """Return ``(actor_id, actor_name)`` for the current principal.

    Unauthenticated and anonymous principals are attributed to the system
    actor. The actor id is never filled in; only the display name is known
    at this point.
    """
    if actor is None or not actor.is_authenticated or actor.is_anonymous:
        return None, SYSTEM_ACTOR
    if not actor.username:
        return None, SYSTEM_ACTOR
    return None, actor.username


def _valid_address(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip()
    # Scoped IPv6 addresses can exceed the column width.
    if not value or len(value) > ORIGIN_ADDRESS_MAX_LENGTH:
        return None
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return None
    return value


def client_ip(request_context: RequestContext) -> Optional[str]:
    """First ``X-Forwarded-For`` hop when it is a valid address, else the peer address."""
    xff = request_context.forwarded_for
    if xff:
        forwarded = _valid_address(xff.split(",")[0])
        if forwarded:
            return forwarded
        logger.debug("Ignoring malformed X-Forwarded-For value")
    return _valid_address(request_context.remote_addr)


def resolve_origin(request_context: Optional[RequestContext]) -> tuple[Optional[str], Optional[str]]:
    """Return ``(origin_address, origin_agent)``; both absent outside a request."""
    if request_context is None:
        return None, None
    try:
        address = client_ip(request_context)
        agent = request_context.user_agent or None
        if agent:
            agent = agent[:USER_AGENT_MAX_LENGTH]
    except Exception as exc:
        logger.debug("Could not extract request details: %s", exc)
        return None, None
    return address, agent
