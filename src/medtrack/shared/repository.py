"""Repository helpers shared by command handlers and read operations."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from medtrack.errors import NotFound


def load(aggregate_cls, identifier):
    """Fetch an aggregate by id, raising ``NotFound`` when it is absent."""
    try:
        return current_domain.repository_for(aggregate_cls).get(str(identifier))
    except ObjectNotFoundError:
        raise NotFound(aggregate_cls.__name__, identifier) from None
