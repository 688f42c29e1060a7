"""Randomized, overridable payload generation.

Usage:
    generator = DataGenerator()
    user = generator.generate("user", {"name": "Leanne"})
    assert user["name"] == "Leanne"
"""

from collections.abc import Mapping
from typing import Any

import factory
import structlog

from apiharness.core.exceptions import UnknownEntityKindError
from apiharness.data.factories import CommentFactory, PostFactory, TodoFactory, UserFactory

log = structlog.get_logger(__name__)

DEFAULT_FACTORIES: dict[str, type[factory.Factory]] = {
    "user": UserFactory,
    "post": PostFactory,
    "comment": CommentFactory,
    "todo": TodoFactory,
}


class DataGenerator:
    """Build entities by kind from registered factories.

    Generated values are random on every call. Overrides are merged
    shallowly after generation, so an overridden field holds exactly the
    value supplied (nested dicts are replaced, not merged).

    Attributes:
        registry: Kind name to factory class. Each instance owns its copy.
    """

    def __init__(self, registry: Mapping[str, type[factory.Factory]] | None = None) -> None:
        self.registry: dict[str, type[factory.Factory]] = dict(
            DEFAULT_FACTORIES if registry is None else registry
        )

    def kinds(self) -> list[str]:
        return sorted(self.registry)

    def register(self, kind: str, factory_class: type[factory.Factory]) -> None:
        """Add or replace the factory for a kind."""
        self.registry[kind] = factory_class
        log.debug("data_kind_registered", kind=kind, factory=factory_class.__name__)

    def generate(self, kind: str, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Generate one entity.

        Args:
            kind: Registered kind, e.g. "user" or "post".
            overrides: Fields that replace generated values verbatim.

        Raises:
            UnknownEntityKindError: If no factory is registered for kind.
        """
        factory_class = self.registry.get(kind)
        if factory_class is None:
            raise UnknownEntityKindError(kind, self.kinds())

        generated = dict(factory_class.build())
        return {**generated, **(overrides or {})}

    def generate_many(
        self, kind: str, count: int, overrides: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Generate count independent entities sharing the same overrides."""
        if count < 0:
            raise ValueError("count must be >= 0")
        return [self.generate(kind, overrides) for _ in range(count)]
