"""Import generated protobuf modules from a build output directory."""

from __future__ import annotations

import contextlib
import importlib
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import Iterable

from google.protobuf import descriptor_pool, message, message_factory

from protofixture.errors import RegistryConfigurationError


LOGGER = logging.getLogger("protofixture.toolchain.loader")


@contextlib.contextmanager
def _prepended_sys_path(paths: Iterable[Path]) -> Iterator[None]:
    entries = [str(Path(path).resolve()) for path in paths]
    sys.path[:0] = entries
    importlib.invalidate_caches()
    try:
        yield
    finally:
        for entry in entries:
            with contextlib.suppress(ValueError):
                sys.path.remove(entry)


class GeneratedModules:
    """Generated bindings from one output directory.

    ``search_paths`` are the output directories of the source sets this one
    imports from; generated code imports them by bare module name.
    """

    def __init__(
        self,
        output_dir: Path,
        module_names: Iterable[str],
        *,
        search_paths: Iterable[Path] = (),
    ) -> None:
        self.output_dir = Path(output_dir)
        self.module_names = tuple(module_names)
        self._search_paths = tuple(Path(path) for path in search_paths)
        self._modules: dict[str, ModuleType] | None = None

    def load(self) -> dict[str, ModuleType]:
        """Import every generated module once and return them by name.

        A module of the same name already imported from another directory is
        re-imported from ``output_dir``. The default descriptor pool accepts
        that only when both copies describe the same schema; otherwise
        :class:`RegistryConfigurationError` is raised and the earlier module
        stays in place.
        """
        if self._modules is None:
            modules: dict[str, ModuleType] = {}
            with _prepended_sys_path((self.output_dir, *self._search_paths)):
                for name in self.module_names:
                    modules[name] = self._import_from_output_dir(name)
            LOGGER.debug("Loaded %d generated module(s) from %s", len(modules), self.output_dir)
            self._modules = modules
        return dict(self._modules)

    def _import_from_output_dir(self, name: str) -> ModuleType:
        cached = sys.modules.get(name)
        origin = getattr(cached, "__file__", None) if cached is not None else None
        if cached is not None:
            if origin and Path(origin).resolve().is_relative_to(self.output_dir.resolve()):
                return cached
            LOGGER.debug("Re-importing %s from %s (was %s)", name, self.output_dir, origin)
            del sys.modules[name]
        try:
            return importlib.import_module(name)
        except TypeError as exc:
            # Raised by the descriptor pool for a same-named file with different contents.
            if cached is not None:
                sys.modules[name] = cached
            raise RegistryConfigurationError(
                f"Generated module '{name}' in {self.output_dir} conflicts with the schema "
                f"already loaded from {origin}"
            ) from exc

    def module(self, name: str) -> ModuleType:
        return self.load()[name]

    def message_class(self, full_name: str) -> type[message.Message]:
        """Resolve a fully-qualified message name to its generated class."""
        self.load()
        try:
            descriptor = descriptor_pool.Default().FindMessageTypeByName(full_name)
        except KeyError as exc:
            raise RegistryConfigurationError(
                f"Message type '{full_name}' is not defined by any loaded schema"
            ) from exc
        return message_factory.GetMessageClass(descriptor)


__all__ = ["GeneratedModules"]
