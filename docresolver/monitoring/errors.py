# docresolver/monitoring/errors.py
from typing import Optional

from docresolver.monitoring.logger import log


def record_error(component: str, function: str, message: str, details: Optional[dict] = None, stacktrace: Optional[str] = None, request_id: str = None, severity: str = "ERROR") -> None:
    payload = dict(details or {})
    payload["function"] = function
    if stacktrace:
        payload["stacktrace"] = stacktrace
    log(severity, message, component=component, request_id=request_id, details=payload)
