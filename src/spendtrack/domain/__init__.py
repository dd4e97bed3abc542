"""Domain layer for spendtrack application."""

# Services are imported lazily: the persistence layer imports domain
# entities, and the services import the persistence mappers.
_SERVICES = {
    "TransactionStore": "spendtrack.domain.store",
    "DataTransferService": "spendtrack.domain.transfer",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
