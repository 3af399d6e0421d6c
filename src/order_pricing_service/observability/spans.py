"""Span helpers for recording operation outcomes."""

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from opentelemetry import trace

OUTCOME_ATTRIBUTE = "outcome"


class Outcome(str, Enum):
    """Outcome of a traced operation."""

    SUCCESS = "success"
    FAILURE = "failure"


def record_outcome(span: trace.Span, outcome: Outcome) -> None:
    """Record the outcome of an operation on its span.

    Args:
        span: The span of the operation
        outcome: Whether the operation succeeded or failed
    """
    span.set_attribute(OUTCOME_ATTRIBUTE, outcome.value)


@contextmanager
def start_span(
    tracer: trace.Tracer,
    name: str,
    parent: trace.Span | None = None,
) -> Iterator[trace.Span]:
    """Start a span, optionally as a child of an explicit parent span.

    Without a parent the span joins the ambient context (for example the
    span of an incoming HTTP request). Exceptions leaving the block are
    recorded on the span and set its status to ERROR.

    Args:
        tracer: Tracer used to create the span
        name: Span name
        parent: Optional parent span

    Yields:
        The started span
    """
    context = trace.set_span_in_context(parent) if parent is not None else None

    with tracer.start_as_current_span(name, context=context) as span:
        yield span
