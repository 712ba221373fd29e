"""
Domain models — Pydantic types for the bootstrap.

    from hmbootstrap.core.models import BootstrapSettings, CommandResult
"""

from hmbootstrap.core.models.result import CommandResult
from hmbootstrap.core.models.settings import BootstrapSettings

__all__ = [
    "BootstrapSettings",
    "CommandResult",
]
