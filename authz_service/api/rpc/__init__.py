"""
Inbound message-pattern handlers.

Importing this package registers every pattern with RpcRegistry.
"""

from authz_service.api.rpc import authorization, entities, relations  # noqa: F401
