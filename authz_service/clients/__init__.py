"""
Clients for sibling services.
"""

from authz_service.clients.directory import (
    ServiceDirectory,
    UserDirectory,
    RpcClient,
    HttpServiceDirectory,
    HttpUserDirectory,
)

__all__ = [
    "ServiceDirectory",
    "UserDirectory",
    "RpcClient",
    "HttpServiceDirectory",
    "HttpUserDirectory",
]
