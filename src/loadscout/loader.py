"""
Load scenario modules from filesystem paths.

Supported inputs:
- a Python source file (``scenarios.py``)
- a byte-compiled file (``scenarios.pyc``)
- a compiled extension module (``scenarios.cpython-312-x86_64-linux-gnu.so``, ``.pyd``)
- a package directory containing ``__init__.py``

Every failure is reported as ModuleLoadError carrying the original cause, so
callers can log it and move on to the next path.
"""

import importlib.machinery
import importlib.util
import itertools
import logging
import os
import re
import sys
from pathlib import Path
from types import ModuleType

from .errors import ModuleLoadError

logger = logging.getLogger(__name__)

MODULE_NAME_PREFIX = "loadscout_ext"

_NON_IDENTIFIER = re.compile(r"\W")


def _is_extension(path: Path) -> bool:
    return any(path.name.endswith(suffix) for suffix in importlib.machinery.EXTENSION_SUFFIXES)


def _module_stem(path: Path) -> str:
    # foo.cpython-312-x86_64-linux-gnu.so -> foo
    return path.name.split(".", 1)[0]


class ModuleLoader:
    """Load modules from paths under unique names in ``sys.modules``."""

    def __init__(self, add_to_sys_path: bool = True, name_prefix: str = MODULE_NAME_PREFIX):
        """
        Args:
            add_to_sys_path: Put the module's parent directory on ``sys.path`` so it
                can import sibling helper modules. The entry is left in place because
                setups often import lazily, after loading has finished.
            name_prefix: Prefix for the synthetic ``sys.modules`` names.
        """
        self.add_to_sys_path = add_to_sys_path
        self.name_prefix = name_prefix
        self._counter = itertools.count(1)

    def _module_name(self, path: Path) -> str:
        stem = _module_stem(path)
        if _is_extension(path):
            # The interpreter looks up PyInit_<last name component>.
            return stem
        ident = _NON_IDENTIFIER.sub("_", stem) or "module"
        return f"{self.name_prefix}_{ident}_{next(self._counter)}"

    def _spec_for(self, raw: str, path: Path) -> importlib.machinery.ModuleSpec:
        if path.is_dir():
            init = path / "__init__.py"
            if not init.is_file():
                raise ModuleLoadError(raw, "directory is not a package (no __init__.py)")
            spec = importlib.util.spec_from_file_location(
                self._module_name(path), init, submodule_search_locations=[str(path)]
            )
        elif path.is_file():
            spec = importlib.util.spec_from_file_location(self._module_name(path), path)
        else:
            raise ModuleLoadError(raw, FileNotFoundError(f"No such file or directory: {raw!r}"))
        if spec is None or spec.loader is None:
            raise ModuleLoadError(
                raw, f"unsupported module type {path.suffix or '(no suffix)'!r}"
            )
        return spec

    def load(self, path: str | os.PathLike) -> ModuleType:
        """
        Load and execute the module at ``path``.

        Loading runs the module's top-level code, including any marker
        declarations, which validate their providers at that point.

        Raises:
            ModuleLoadError: if the path is missing, is not a loadable module, or
                its top-level code raised.
        """
        raw = os.fspath(path)
        try:
            resolved = Path(raw).expanduser().resolve()
        except (OSError, RuntimeError, ValueError) as exc:
            raise ModuleLoadError(raw, exc) from exc

        try:
            spec = self._spec_for(raw, resolved)
        except (OSError, ValueError) as exc:
            # Unstattable paths: name too long, permission denied, embedded NUL.
            raise ModuleLoadError(raw, exc) from exc
        name = spec.name
        if self.add_to_sys_path:
            parent = str(resolved.parent)
            if parent not in sys.path:
                sys.path.insert(0, parent)

        previous = sys.modules.get(name)
        existing = set(sys.modules)
        try:
            module = importlib.util.module_from_spec(spec)
            sys.modules[name] = module
            spec.loader.exec_module(module)  # type: ignore[union-attr]
        except (Exception, SystemExit) as exc:
            self._forget(name, existing, previous)
            raise ModuleLoadError(raw, exc) from exc

        logger.debug("Loaded module %s from %s", name, resolved)
        return module

    @staticmethod
    def _forget(name: str, existing: set[str], previous: ModuleType | None) -> None:
        # Only drop what this load added; modules imported earlier stay put.
        for key in [k for k in sys.modules if k == name or k.startswith(name + ".")]:
            if key not in existing or key == name:
                del sys.modules[key]
        if previous is not None:
            sys.modules[name] = previous


def load_module(path: str | os.PathLike) -> ModuleType:
    """Load a single module with a default ModuleLoader."""
    return ModuleLoader().load(path)
