"""Domain-Oriented Observability for the identity application layer."""

from identity.application.observability.resolution_probe import (
    DefaultResolutionProbe,
    ResolutionProbe,
)
from identity.application.observability.theme_binding_probe import (
    DefaultThemeBindingProbe,
    ThemeBindingProbe,
)

__all__ = [
    "DefaultResolutionProbe",
    "DefaultThemeBindingProbe",
    "ResolutionProbe",
    "ThemeBindingProbe",
]
