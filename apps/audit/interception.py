from __future__ import annotations

import functools
import inspect
import logging
from typing import Any, Callable, Optional

from .bindings import AUDIT_BINDINGS, AuditBinding, Extractor, Invocation
from .contracts import AuditContext
from .exceptions import AuditError, AuditExtractionError
from .services import AuditRecordBuilder, AuditService

logger = logging.getLogger(__name__)

CONTEXT_ARGUMENT = "context"


def _extract(extractor: Optional[Extractor], invocation: Invocation) -> Any:
    if extractor is None:
        return None
    try:
        return extractor(invocation)
    except AuditError:
        raise
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise AuditExtractionError(f"{invocation.operation}: {exc!r}") from exc


class AuditInterceptor:
    """
    Runs after an audited operation has returned normally.
    Never raises: every failure is logged and dropped.
    """

    def __init__(self, service_factory: Callable[[], AuditService] = AuditService) -> None:
        self.service_factory = service_factory

    def after_returning(
        self,
        binding: AuditBinding,
        args: tuple,
        result: Any,
        context: Optional[AuditContext],
    ) -> None:
        try:
            invocation = Invocation(operation=binding.operation, args=args, result=result)
            record = AuditRecordBuilder.build(
                entity_type=binding.entity_type,
                entity_id=_extract(binding.entity_id, invocation),
                action=binding.action,
                description=_extract(binding.description, invocation),
                previous_state=_extract(binding.previous_state, invocation),
                new_state=_extract(binding.new_state, invocation),
                context=context,
            )
            self.service_factory().write(record)
        except Exception as exc:
            logger.exception("Failed to log %s: %s", binding.operation, exc)


default_interceptor = AuditInterceptor()


def _positional_arguments(signature: inspect.Signature, args, kwargs) -> tuple[tuple, Optional[AuditContext]]:
    bound = signature.bind(*args, **kwargs)
    positional = bound.args
    params = list(signature.parameters)
    if params and params[0] in ("self", "cls"):
        positional = positional[1:]
    return positional, bound.arguments.get(CONTEXT_ARGUMENT)


def audited(operation: str, interceptor: Optional[AuditInterceptor] = None):
    """
    Record an audit entry after ``operation`` returns normally.

    Positional indexes in the binding count from the first parameter after
    ``self``/``cls``. The audit context is read from the ``context`` argument
    when the wrapped function declares one.
    """
    binding = AUDIT_BINDINGS[operation]

    def decorator(func):
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            result = func(*args, **kwargs)
            active = interceptor or default_interceptor
            try:
                positional, context = _positional_arguments(signature, args, kwargs)
            except TypeError as exc:
                logger.exception("Failed to log %s: %s", operation, exc)
                return result
            active.after_returning(binding, positional, result, context)
            return result

        wrapper.audit_binding = binding
        return wrapper

    return decorator
