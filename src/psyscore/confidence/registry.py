"""Registry for confidence policies.

A policy turns a domain's score, item count and item spread into a
``ConfidenceInterval``. Domains name their policy in ``item_domains.yaml``
(or inherit the default of their domain class), so new policies can be
added without touching the pipeline.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from psyscore.domain.exceptions import UnknownPolicyError

if TYPE_CHECKING:
    from psyscore.domain.value_objects import ConfidenceInterval
    from psyscore.tables.models import ConfidenceTable


@dataclass(frozen=True, slots=True)
class ConfidenceInputs:
    """Everything a policy may look at for one domain."""

    domain: str
    score: int
    """Normalized 0-100 domain score."""

    item_count: int
    """Items counted toward confidence (imputed values may be excluded)."""

    item_ordinals: tuple[float, ...] = ()
    """Per-item ordinal scores used for spread statistics."""

    scale_size: int = 5


PolicyFunc: TypeAlias = Callable[[ConfidenceInputs, "ConfidenceTable"], "ConfidenceInterval"]


@dataclass(slots=True)
class ConfidencePolicyRegistry:
    """In-memory registry for confidence policies."""

    funcs: dict[str, PolicyFunc] = field(default_factory=dict)

    def register(self, name: str) -> Callable[[PolicyFunc], PolicyFunc]:
        """Decorator to register a policy under `name`."""

        def wrapper(func: PolicyFunc) -> PolicyFunc:
            if name in self.funcs:
                raise ValueError(f"Confidence policy '{name}' is already registered")
            self.funcs[name] = func
            return func

        return wrapper

    def get(self, name: str) -> PolicyFunc:
        """Get a policy by name."""
        try:
            return self.funcs[name]
        except KeyError as exc:
            available = ", ".join(sorted(self.funcs))
            raise UnknownPolicyError(
                f"Unknown confidence policy: {name}. Available: [{available}]"
            ) from exc

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self.funcs))


DEFAULT_REGISTRY = ConfidencePolicyRegistry()


def register_policy(name: str) -> Callable[[PolicyFunc], PolicyFunc]:
    return DEFAULT_REGISTRY.register(name)


def get_policy(name: str) -> PolicyFunc:
    return DEFAULT_REGISTRY.get(name)
