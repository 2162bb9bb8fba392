"""Domain-Oriented Observability for identity infrastructure."""

from identity.infrastructure.observability.repository_probe import (
    DefaultKeyRepositoryProbe,
    DefaultTenantRepositoryProbe,
    KeyRepositoryProbe,
    TenantRepositoryProbe,
)

__all__ = [
    "DefaultKeyRepositoryProbe",
    "DefaultTenantRepositoryProbe",
    "KeyRepositoryProbe",
    "TenantRepositoryProbe",
]
