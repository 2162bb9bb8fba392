"""SQLAlchemy ORM models for the identity bounded context.

These models map to database tables and are used by repository implementations.
"""

from identity.infrastructure.models.access_key import AccessKeyModel
from identity.infrastructure.models.tenant import TenantModel
from identity.infrastructure.models.tenant_api_key import TenantApiKeyModel
from identity.infrastructure.models.user import UserModel

__all__ = [
    "AccessKeyModel",
    "TenantApiKeyModel",
    "TenantModel",
    "UserModel",
]
