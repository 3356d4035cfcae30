# docresolver/monitoring/context.py
"""
Context helpers using contextvars for request/operation propagation.
"""
import contextvars

request_id_var = contextvars.ContextVar("request_id", default=None)
operation_var = contextvars.ContextVar("operation", default=None)

def set_request_context(request_id=None, operation=None):
    if request_id is not None:
        request_id_var.set(request_id)
    if operation is not None:
        operation_var.set(operation)

def get_request_context():
    return {
        "request_id": request_id_var.get(),
        "operation": operation_var.get(),
    }
