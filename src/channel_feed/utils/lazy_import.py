from collections.abc import Callable
from functools import cache
from importlib import import_module


def lazy_import(
    module_name: str,
    name: str | None = None,
    *,
    package: str | None = None,
) -> Callable[[], object]:
    """Defer importing a driver module until the first call.

    Args:
        module_name: Module to import
        name: Attribute of the module to return, the module itself if None
        package: Distribution to name in the error when the import fails
    """

    @cache
    def _load() -> object:
        try:
            mod = import_module(module_name)
        except ImportError as e:
            hint = package or module_name.split(".")[0]
            raise ImportError(f"{module_name} is required: pip install {hint}") from e
        return getattr(mod, name) if name else mod

    return _load
