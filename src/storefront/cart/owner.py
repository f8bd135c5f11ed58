"""Who a cart belongs to: a signed-in user or an anonymous browser session."""

import secrets
import time

from protean.exceptions import ValidationError
from protean.fields import Identifier

from storefront.domain import storefront


@storefront.value_object
class Authenticated:
    """A shopper whose identity was verified upstream. Their cart lives on the server."""

    user_id: Identifier(required=True)

    @property
    def is_guest(self) -> bool:
        return False


@storefront.value_object
class Anonymous:
    """A browser session without a signed-in user."""

    session_id: Identifier(required=True)

    @property
    def is_guest(self) -> bool:
        return True


CartOwner = Authenticated | Anonymous


def owner_from(user_id=None, session_id=None) -> CartOwner:
    """Resolve the owner from request parameters. A user id wins over a session id."""
    if user_id:
        return Authenticated(user_id=user_id)
    if session_id:
        return Anonymous(session_id=session_id)
    raise ValidationError({"owner": ["Either user_id or session_id is required"]})


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(6)}"
