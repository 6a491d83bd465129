"""
Identity claims supplied by the upstream auth layer.

Tokens are verified before requests reach this service; the gateway forwards
the verified claims as headers. This module only reads them.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from .errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    tenant_id: str
    user_id: Optional[str] = None

    def require_tenant(self, tenant_id: str) -> None:
        """Raise Forbidden unless the caller belongs to `tenant_id`"""
        if self.tenant_id != tenant_id:
            logger.warning(
                f"⚠️ User {self.user_id or 'unknown'} (tenant {self.tenant_id}) "
                f"denied access to tenant {tenant_id}"
            )
            raise Forbidden()


def get_identity(
    x_tenant_id: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
) -> Identity:
    """FastAPI dependency returning the caller's identity claims"""
    if not x_tenant_id or not x_tenant_id.strip():
        raise Unauthorized("Tenant ID not found")
    return Identity(tenant_id=x_tenant_id.strip(), user_id=x_user_id)
