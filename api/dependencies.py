"""
FastAPI dependencies: bearer token extraction and capability gates.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from services import Capability, ImageStore, Principal, authorize, get_image_store

bearer_scheme = HTTPBearer(auto_error=False)


def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Return the bearer token of the request, if any."""
    return credentials.credentials if credentials else None


def require(capability: Capability):
    """
    Build a dependency that authorizes the request for a capability.

    The dependency resolves to the authenticated Principal.
    """
    def dependency(token: Optional[str] = Depends(get_token)) -> Optional[Principal]:
        return authorize(token, capability)

    dependency.__name__ = f"require_{Capability(capability).value}"
    return dependency


def get_images() -> ImageStore:
    """Image store dependency (overridable in tests)."""
    return get_image_store()
