"""Flavor-independent pieces of the client: accessors, resource binding, query builder.

Everything here is shared by :mod:`~hubuum_client.client.sync_client` and
:mod:`~hubuum_client.client.async_client`. The concrete classes only add
the methods that touch the transport, and those are one-liners around
:func:`~hubuum_client.protocol.execute` or
:func:`~hubuum_client.protocol.execute_async`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, Mapping, Optional, TypeVar

from pydantic import BaseModel

from hubuum_client import resources
from hubuum_client.codec import Payload
from hubuum_client.endpoints import fill_path
from hubuum_client.exceptions import InvalidUsageError
from hubuum_client.filters import FilterClause, FilterOperator
from hubuum_client.protocol import (
    Operation,
    create_operation,
    delete_operation,
    one_or_err,
    search_operation,
    update_operation,
)
from hubuum_client.resources import ResourceModel, ResourceType
from hubuum_client.session import Session
from hubuum_client.transport import Request

ResourceT = TypeVar("ResourceT")
BuilderT = TypeVar("BuilderT", bound="BaseQueryBuilder")


class ResourceAccessors(ABC, Generic[ResourceT]):
    """Accessor methods of an authenticated client.

    Subclasses implement :meth:`_bind` to return their flavor's resource
    class. Accessors do no I/O and may be called as often as convenient.
    """

    @abstractmethod
    def _bind(self, resource_type: ResourceType, url_params: Mapping[str, Any]) -> ResourceT:
        ...

    def resource(self, resource_type: ResourceType, **url_params: Any) -> ResourceT:
        """Bind an arbitrary :class:`~hubuum_client.resources.ResourceType`."""
        return self._bind(resource_type, url_params)

    def classes(self) -> ResourceT:
        return self._bind(resources.CLASSES, {})

    def class_relation(self) -> ResourceT:
        return self._bind(resources.CLASS_RELATIONS, {})

    def objects(self, class_id: int) -> ResourceT:
        """Objects belonging to the class with id *class_id*."""
        return self._bind(resources.OBJECTS, {"class_id": class_id})

    def object_relation(self) -> ResourceT:
        return self._bind(resources.OBJECT_RELATIONS, {})

    def namespaces(self) -> ResourceT:
        return self._bind(resources.NAMESPACES, {})

    def users(self) -> ResourceT:
        return self._bind(resources.USERS, {})

    def groups(self) -> ResourceT:
        return self._bind(resources.GROUPS, {})


class BaseResource:
    """A session bound to one collection path.

    Args:
        session: An authenticated session.
        resource_type: The collection's descriptor.
        url_params: Values for the path template's placeholders.

    Raises:
        InvalidUsageError: If the session has no token or a url parameter
            is missing.
    """

    def __init__(
        self,
        session: Session,
        resource_type: ResourceType,
        url_params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if not session.is_authenticated:
            raise InvalidUsageError("Resource accessors require an authenticated session")
        self._session = session
        self._type = resource_type
        self._url_params = dict(url_params or {})
        self._path = fill_path(resource_type.path, self._url_params)

    @property
    def resource_type(self) -> ResourceType:
        return self._type

    @property
    def path(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._type.name!r}, path={self._path!r})"

    def _create_op(self, payload: Payload) -> Operation[Any]:
        return create_operation(self._session, self._path, payload, self._type.model)

    def _update_op(self, resource_id: int, payload: Payload) -> Operation[Any]:
        return update_operation(
            self._session, self._path, resource_id, payload, self._type.model
        )

    def _delete_op(self, resource_id: int) -> Operation[None]:
        return delete_operation(self._session, self._path, resource_id)

    def _clauses_from(
        self, params: Optional[BaseModel], fields: Mapping[str, Any]
    ) -> tuple[FilterClause, ...]:
        """Equals-clauses for every non-``None`` field of *params*, then *fields*."""
        values: dict[str, Any] = {}
        if params is not None:
            values.update(params.model_dump(exclude_none=True))
        values.update({key: value for key, value in fields.items() if value is not None})
        return tuple(
            FilterClause.build(key, FilterOperator.EQUALS, value)
            for key, value in values.items()
        )


class BaseQueryBuilder:
    """Immutable accumulator of filter clauses for one resource.

    Every ``add_filter*`` method returns a new builder with one more
    clause; the original builder is left unchanged. Clauses are combined
    with logical AND and sent in the order they were added.
    """

    def __init__(
        self,
        resource: BaseResource,
        clauses: tuple[FilterClause, ...] = (),
    ) -> None:
        self._resource = resource
        self._clauses = clauses

    @property
    def clauses(self) -> tuple[FilterClause, ...]:
        return self._clauses

    def __repr__(self) -> str:
        keys = ", ".join(f"{c.key}={c.value}" for c in self._clauses)
        return f"{type(self).__name__}({self._resource.resource_type.name!r}, [{keys}])"

    def _with(self: BuilderT, clause: FilterClause) -> BuilderT:
        return type(self)(self._resource, self._clauses + (clause,))

    def add_clauses(self: BuilderT, clauses: Iterable[FilterClause]) -> BuilderT:
        """Return a builder with the prebuilt *clauses* appended in order."""
        return type(self)(self._resource, self._clauses + tuple(clauses))

    def add_filter(
        self: BuilderT,
        field: str,
        operator: FilterOperator,
        value: Any,
        negated: bool = False,
    ) -> BuilderT:
        """Add ``field <operator> value``; ``negated`` inverts the comparison.

        Raises:
            InvalidFilterError: If *value* cannot be encoded.
        """
        return self._with(FilterClause.build(field, operator, value, negated))

    def add_filter_equals(self: BuilderT, field: str, value: Any) -> BuilderT:
        return self.add_filter(field, FilterOperator.EQUALS, value)

    def add_filter_not_equals(self: BuilderT, field: str, value: Any) -> BuilderT:
        return self.add_filter(field, FilterOperator.EQUALS, value, negated=True)

    def add_filter_contains(self: BuilderT, field: str, value: Any) -> BuilderT:
        return self.add_filter(field, FilterOperator.CONTAINS, value)

    def add_filter_id(self: BuilderT, value: Any) -> BuilderT:
        return self.add_filter_equals("id", value)

    def add_filter_name_exact(self: BuilderT, value: Any) -> BuilderT:
        """Exact match on the resource's name field.

        This is ``name`` for most resources, ``username`` for users and
        ``groupname`` for groups.
        """
        return self.add_filter_equals(self._resource.resource_type.name_field, value)

    def _search_op(self) -> Operation[list[Any]]:
        resource = self._resource
        return search_operation(
            resource._session, resource.path, self._clauses, resource.resource_type.model
        )

    def build_request(self) -> Request:
        """Return the request the terminal methods would send. No I/O."""
        return self._search_op().request

    def _single(self, items: list[ResourceModel]) -> Any:
        return one_or_err(items, self._resource.resource_type.model.__name__)
