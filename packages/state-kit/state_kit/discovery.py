"""Discovery strategies that supply the initial states of a machine.

A strategy is any zero-argument callable returning ``(key, state)`` pairs.
The machine calls it exactly once, from ``initialize()``.
"""
from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Any, Callable, Iterable, Iterator

from state_kit.state import State, StateLike, is_discoverable, state_key
from state_kit.types import StateKey

logger = logging.getLogger(__name__)

DiscoveryStrategy = Callable[[], Iterable[tuple[StateKey, StateLike]]]


class ExplicitDiscovery:
    """Supplies a fixed list of pre-constructed states.

    Each item is either a state instance, keyed by ``state_key()``, or an
    explicit ``(key, state)`` pair.
    """

    def __init__(self, *states: StateLike | tuple[StateKey, StateLike]) -> None:
        self._pairs: list[tuple[StateKey, StateLike]] = []
        for item in states:
            if isinstance(item, tuple):
                key, state = item
                self._pairs.append((key, state))
            else:
                self._pairs.append((state_key(item), item))

    def __call__(self) -> list[tuple[StateKey, StateLike]]:
        return list(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)


class ScanDiscovery:
    """Instantiates every marked state class found in the given modules.

    Args:
        *targets: Modules or dotted module names. Packages are walked.
        require_marker: Only pick classes decorated with ``@discoverable``.
        recursive: Walk subpackages of package targets.
    """

    def __init__(
        self,
        *targets: ModuleType | str,
        require_marker: bool = True,
        recursive: bool = True,
    ) -> None:
        if not targets:
            raise ValueError("ScanDiscovery requires at least one module")
        self._targets = targets
        self._require_marker = require_marker
        self._recursive = recursive

    def __call__(self) -> list[tuple[StateKey, StateLike]]:
        pairs: list[tuple[StateKey, StateLike]] = []
        seen: set[type] = set()
        for module in self._modules():
            for cls in _candidate_classes(module):
                if cls in seen or not self._accepts(cls):
                    continue
                seen.add(cls)
                state = cls()
                pairs.append((state_key(cls), state))
                logger.debug(f"Discovered state {cls.__qualname__} in {module.__name__}")
        return pairs

    def _modules(self) -> Iterator[ModuleType]:
        for target in self._targets:
            module = importlib.import_module(target) if isinstance(target, str) else target
            yield module
            path = getattr(module, "__path__", None)
            if path is None:
                continue
            if self._recursive:
                infos = pkgutil.walk_packages(path, module.__name__ + ".")
            else:
                infos = pkgutil.iter_modules(path, module.__name__ + ".")
            for info in infos:
                yield importlib.import_module(info.name)

    def _accepts(self, cls: type) -> bool:
        if self._require_marker and not is_discoverable(cls):
            return False
        if inspect.isabstract(cls) or cls is State:
            return False
        if not (issubclass(cls, State) or _has_capabilities(cls)):
            return False
        if not _zero_arg_constructible(cls):
            logger.debug(f"Skipping {cls.__qualname__}: constructor needs arguments")
            return False
        return True


def as_discovery(source: Any) -> DiscoveryStrategy:
    """Normalize None, a strategy, or an iterable of states into a strategy."""
    if source is None:
        return ExplicitDiscovery()
    if callable(source) and not isinstance(source, type):
        return source
    return ExplicitDiscovery(*source)


def _candidate_classes(module: ModuleType) -> Iterator[type]:
    for value in list(vars(module).values()):
        if isinstance(value, type) and value.__module__ == module.__name__:
            yield value


def _has_capabilities(cls: type) -> bool:
    return callable(getattr(cls, "on_enter", None)) and callable(
        getattr(cls, "on_update", None)
    )


def _zero_arg_constructible(cls: type) -> bool:
    if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
        return True
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.default is param.empty:
            return False
    return True
