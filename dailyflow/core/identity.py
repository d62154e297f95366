"""
Caller identity.

The mobile number travels in the `X-User-Mobile` header. It is resolved
here, once, into an explicit `Identity`; routers depend on
`current_identity` and never read the header themselves.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from dailyflow.core.config import IDENTITY_HEADER
from dailyflow.core.errors import MissingIdentityError


@dataclass(frozen=True)
class Identity:
    mobile: str


def current_identity(
    x_user_mobile: Optional[str] = Header(
        default=None,
        description="Mobile number of the signed-in user.",
    ),
) -> Identity:
    mobile = (x_user_mobile or "").strip()
    if not mobile:
        raise MissingIdentityError(header=IDENTITY_HEADER)
    return Identity(mobile=mobile)
