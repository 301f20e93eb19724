"""Resolution entry points used by assertion helpers."""

from diagnose.exclusions import ExclusionSet
from diagnose.resolver import Resolver

__all__ = ["ExclusionSet", "Resolver"]
