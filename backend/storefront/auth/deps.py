"""FastAPI dependencies for the BFF routes.

Dependencies:
  require_authorization_header  → raw Authorization header (or 401)

The BFF never validates tokens itself; it only checks one is present and
relays it to the storefront API, which is authoritative.
"""

from fastapi import HTTPException, Request, status


def require_authorization_header(request: Request) -> str:
    authorization = request.headers.get("authorization")
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return authorization

