"""Emitter registry — discovers and registers all BaseEmitter subclasses."""

import importlib
import pkgutil
from pathlib import Path
from typing import TYPE_CHECKING

from clairreporter.core.errors import ConfigError
from clairreporter.core.logging import get_logger

if TYPE_CHECKING:
    from clairreporter.emitters.base import BaseEmitter

logger = get_logger(__name__)


class EmitterRegistry:
    """Registry of emitter classes keyed by ``metadata.name``.

    Built once at startup and only read afterwards.

    Usage:
        registry = EmitterRegistry()
        registry.discover()
        emitter_cls = registry.get("jira")
    """

    def __init__(self) -> None:
        self._emitters: dict[str, type["BaseEmitter"]] = {}
        self._discovered = False

    def discover(self, package: str = "clairreporter.emitters") -> None:
        """Scan the emitters package and register all concrete BaseEmitter subclasses."""
        from clairreporter.emitters.base import BaseEmitter  # avoid circular import

        emitters_path = Path(__file__).parent.parent / "emitters"

        for module_info in pkgutil.iter_modules([str(emitters_path)]):
            if module_info.name == "base":
                continue  # skip the abstract base

            full_name = f"{package}.{module_info.name}"
            try:
                mod = importlib.import_module(full_name)
            except Exception as exc:
                logger.warning("Failed to import emitter module", name=full_name, error=str(exc))
                continue

            for attr_name in dir(mod):
                obj = getattr(mod, attr_name)
                if (
                    isinstance(obj, type)
                    and issubclass(obj, BaseEmitter)
                    and obj is not BaseEmitter
                    and not getattr(obj, "__abstractmethods__", None)
                ):
                    self.register(obj)

        self._discovered = True
        logger.debug("Emitter discovery complete", count=len(self._emitters))

    def register(self, emitter_cls: type["BaseEmitter"]) -> None:
        slug = emitter_cls.metadata.name
        existing = self._emitters.get(slug)
        if existing is emitter_cls:
            return
        if existing is not None:
            logger.warning(
                "Duplicate emitter name; skipping",
                name=slug,
                existing=existing.__name__,
                new=emitter_cls.__name__,
            )
            return
        self._emitters[slug] = emitter_cls
        logger.debug("Registered emitter", name=slug, cls=emitter_cls.__name__)

    def get(self, name: str) -> type["BaseEmitter"] | None:
        return self._emitters.get(name)

    def select(self, names: list[str]) -> dict[str, type["BaseEmitter"]]:
        """Resolve requested emitter names, failing on any unknown one."""
        unknown = [n for n in names if n not in self._emitters]
        if unknown:
            raise ConfigError(
                f"cannot find emitter(s) {unknown}; available are {self.names()}"
            )
        return {n: self._emitters[n] for n in names}

    def all(self) -> dict[str, type["BaseEmitter"]]:
        return dict(self._emitters)

    def names(self) -> list[str]:
        return list(self._emitters.keys())

    @property
    def is_discovered(self) -> bool:
        return self._discovered
