"""Endpoint paths of the Hubuum API.

Paths are relative to the server's :class:`~hubuum_client.types.BaseUrl`.
Collection paths end with ``/`` so that an id can be appended directly
for update and delete requests. ``{name}`` placeholders are filled from
the url parameters bound to a resource accessor.
"""

from __future__ import annotations

import enum
import string
from typing import Mapping

from hubuum_client.exceptions import InvalidUsageError


class Endpoint(str, enum.Enum):
    LOGIN = "/api/v0/auth/login"
    VALIDATE = "/api/v0/auth/validate"
    USERS = "/api/v1/iam/users/"
    GROUPS = "/api/v1/iam/groups/"
    NAMESPACES = "/api/v1/namespaces/"
    CLASSES = "/api/v1/classes/"
    OBJECTS = "/api/v1/classes/{class_id}/"
    CLASS_RELATIONS = "/api/v1/relations/classes/"
    OBJECT_RELATIONS = "/api/v1/relations/objects/"

    @property
    def path(self) -> str:
        return self.value

    @property
    def placeholders(self) -> tuple[str, ...]:
        return template_placeholders(self.value)


def template_placeholders(template: str) -> tuple[str, ...]:
    """Return the ``{name}`` placeholders of a path template, in order."""
    return tuple(
        name for _, name, _, _ in string.Formatter().parse(template) if name
    )


def fill_path(template: str, url_params: Mapping[str, object]) -> str:
    """Substitute url parameters into a path template.

    Raises:
        InvalidUsageError: If a placeholder has no matching parameter.
    """
    missing = [name for name in template_placeholders(template) if name not in url_params]
    if missing:
        raise InvalidUsageError(
            f"Missing url parameter(s) {', '.join(missing)} for path '{template}'"
        )
    return template.format(**{key: str(value) for key, value in url_params.items()})
