# docresolver/file_access/registry.py
"""
Service registry.

Factory functions to instantiate the document provider service named in
configuration.
"""
from typing import Any, Dict, Optional

from docresolver.file_access.base import DocumentProviderService
from docresolver.file_access.localfs_provider import LocalDocumentProvider
from docresolver.monitoring.logger import log


# Registry of available services
SERVICE_REGISTRY: Dict[str, type] = {
    "local": LocalDocumentProvider,
}


def register_service(name: str, service_class: type) -> None:
    """
    Register a new document provider service.

    This allows platform bindings to be added at runtime.

    Args:
        name: Service identifier (e.g., "android")
        service_class: Class implementing DocumentProviderService

    Raises:
        ValueError: If service_class doesn't implement DocumentProviderService
    """
    if not isinstance(service_class, type) or not issubclass(service_class, DocumentProviderService):
        raise ValueError(
            f"Service class must inherit from DocumentProviderService, "
            f"got {service_class}"
        )

    SERVICE_REGISTRY[name] = service_class
    log("INFO", f"Registered document provider service: {name}", module="registry")


def get_document_service(
    name: str,
    config: Optional[Dict[str, Any]] = None
) -> DocumentProviderService:
    """
    Get document provider service by name and config.

    Args:
        name: Service identifier (e.g., "local")
        config: Service-specific configuration dict

    Returns:
        Initialized DocumentProviderService instance

    Raises:
        ValueError: If service is unknown or configuration is invalid
    """
    name = name.lower().strip()

    service_class = SERVICE_REGISTRY.get(name)

    if not service_class:
        raise ValueError(
            f"Unknown document provider service: '{name}'. "
            f"Available services: {list(SERVICE_REGISTRY.keys())}"
        )

    try:
        service = service_class(config or {})
        log("INFO", f"Initialized {name} document provider service", module="registry")
        return service
    except Exception as exc:
        raise ValueError(
            f"Failed to initialize {name} service: {exc}"
        ) from exc


def list_services() -> list[str]:
    return list(SERVICE_REGISTRY.keys())
