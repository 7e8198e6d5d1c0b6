"""regbridge — one API for any service registry.

Namespaces, services and endpoints are handled the same way regardless of
the service registry behind them::

    from regbridge import ANY, ServiceRegistry
    from regbridge.options.register import with_kv

    sr = ServiceRegistry.from_memory()
    sr.namespace("sales").register(with_kv("env", "prod"))
"""

from importlib.metadata import PackageNotFoundError, version

from regbridge.core import ANY, ServiceRegistry

try:
    __version__ = version("regbridge")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = ["ANY", "ServiceRegistry", "__version__"]
