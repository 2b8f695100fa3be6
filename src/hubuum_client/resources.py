"""Resource types and their Pydantic models.

Every Hubuum collection is described by a :class:`ResourceType`: where it
lives, which model a response decodes into, which models create and
update payloads use, and which field holds the resource's name. The
client's accessor methods (``classes()``, ``users()``, ...) are thin
bindings of these descriptors.

For each resource there are up to four models:

- ``<Name>`` -- the full representation returned by the server.
- ``<Name>Post`` -- the create payload (server-assigned fields omitted).
- ``<Name>Patch`` -- the update payload (every field optional).
- ``<Name>Get`` -- search parameters (every field optional), usable with
  :meth:`~hubuum_client.client.Resource.filter`.

The models mirror the server's current representations but ignore
unknown fields, so a newer server does not break decoding.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from hubuum_client.endpoints import Endpoint, template_placeholders


class ResourceModel(BaseModel):
    """Base for server representations."""

    model_config = ConfigDict(extra="ignore")

    id: int


class PayloadModel(BaseModel):
    """Base for create/update payloads and search parameters."""

    model_config = ConfigDict(extra="forbid")


# --- Classes ---


class Class(ResourceModel):
    name: str
    description: str
    namespace_id: int
    json_schema: Optional[Any] = None
    validate_schema: Optional[bool] = None
    created_at: datetime
    updated_at: datetime


class ClassPost(PayloadModel):
    name: str
    description: str
    namespace_id: int
    json_schema: Optional[Any] = None
    validate_schema: Optional[bool] = None


class ClassPatch(PayloadModel):
    name: Optional[str] = None
    description: Optional[str] = None
    namespace_id: Optional[int] = None
    json_schema: Optional[Any] = None
    validate_schema: Optional[bool] = None


class ClassGet(PayloadModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    namespace_id: Optional[int] = None
    validate_schema: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Class relations ---


class ClassRelation(ResourceModel):
    from_hubuum_class_id: int
    to_hubuum_class_id: int
    created_at: datetime
    updated_at: datetime


class ClassRelationPost(PayloadModel):
    from_hubuum_class_id: int
    to_hubuum_class_id: int


class ClassRelationPatch(PayloadModel):
    from_hubuum_class_id: Optional[int] = None
    to_hubuum_class_id: Optional[int] = None


class ClassRelationGet(PayloadModel):
    id: Optional[int] = None
    from_hubuum_class_id: Optional[int] = None
    to_hubuum_class_id: Optional[int] = None


# --- Objects ---


class Object(ResourceModel):
    name: str
    namespace_id: int
    hubuum_class_id: int
    description: str
    data: Optional[Any] = None
    created_at: datetime
    updated_at: datetime


class ObjectPost(PayloadModel):
    name: str
    namespace_id: int
    hubuum_class_id: int
    description: str
    data: Optional[Any] = None


class ObjectPatch(PayloadModel):
    name: Optional[str] = None
    namespace_id: Optional[int] = None
    hubuum_class_id: Optional[int] = None
    description: Optional[str] = None
    data: Optional[Any] = None


class ObjectGet(PayloadModel):
    id: Optional[int] = None
    name: Optional[str] = None
    namespace_id: Optional[int] = None
    hubuum_class_id: Optional[int] = None
    description: Optional[str] = None


# --- Object relations ---


class ObjectRelation(ResourceModel):
    from_hubuum_object_id: int
    to_hubuum_object_id: int
    class_relation_id: int
    created_at: datetime
    updated_at: datetime


class ObjectRelationPost(PayloadModel):
    from_hubuum_object_id: int
    to_hubuum_object_id: int
    class_relation_id: int


class ObjectRelationPatch(PayloadModel):
    from_hubuum_object_id: Optional[int] = None
    to_hubuum_object_id: Optional[int] = None
    class_relation_id: Optional[int] = None


class ObjectRelationGet(PayloadModel):
    id: Optional[int] = None
    from_hubuum_object_id: Optional[int] = None
    to_hubuum_object_id: Optional[int] = None
    class_relation_id: Optional[int] = None


# --- Namespaces ---


class Namespace(ResourceModel):
    name: str
    description: str
    created_at: datetime
    updated_at: datetime


class NamespacePost(PayloadModel):
    name: str
    description: str
    group_id: int  # owning group, only settable on creation


class NamespacePatch(PayloadModel):
    name: Optional[str] = None
    description: Optional[str] = None


class NamespaceGet(PayloadModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None


# --- Users ---


class User(ResourceModel):
    username: str
    email: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserPost(PayloadModel):
    username: str
    password: str
    email: Optional[str] = None


class UserPatch(PayloadModel):
    username: Optional[str] = None
    email: Optional[str] = None


class UserGet(PayloadModel):
    id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None


# --- Groups ---


class Group(ResourceModel):
    groupname: str
    description: str
    created_at: datetime
    updated_at: datetime


class GroupPost(PayloadModel):
    groupname: str
    description: str


class GroupPatch(PayloadModel):
    groupname: Optional[str] = None
    description: Optional[str] = None


class GroupGet(PayloadModel):
    id: Optional[int] = None
    groupname: Optional[str] = None
    description: Optional[str] = None


# --- Descriptors ---


@dataclass(frozen=True)
class ResourceType:
    """Static description of one API collection.

    Attributes:
        name: Short name used in messages and on the command line.
        path: Collection path template, see :mod:`hubuum_client.endpoints`.
        model: Server representation returned by searches, create and update.
        post_model: Create payload model.
        patch_model: Update payload model.
        get_model: Search-parameter model.
        name_field: Field matched by ``add_filter_name_exact``.
    """

    name: str
    path: str
    model: type[ResourceModel]
    post_model: type[PayloadModel]
    patch_model: type[PayloadModel]
    get_model: type[PayloadModel]
    name_field: str = "name"

    @property
    def url_params(self) -> tuple[str, ...]:
        return template_placeholders(self.path)


CLASSES = ResourceType(
    "classes", Endpoint.CLASSES.path, Class, ClassPost, ClassPatch, ClassGet
)
CLASS_RELATIONS = ResourceType(
    "class_relations",
    Endpoint.CLASS_RELATIONS.path,
    ClassRelation,
    ClassRelationPost,
    ClassRelationPatch,
    ClassRelationGet,
)
OBJECTS = ResourceType(
    "objects", Endpoint.OBJECTS.path, Object, ObjectPost, ObjectPatch, ObjectGet
)
OBJECT_RELATIONS = ResourceType(
    "object_relations",
    Endpoint.OBJECT_RELATIONS.path,
    ObjectRelation,
    ObjectRelationPost,
    ObjectRelationPatch,
    ObjectRelationGet,
)
NAMESPACES = ResourceType(
    "namespaces",
    Endpoint.NAMESPACES.path,
    Namespace,
    NamespacePost,
    NamespacePatch,
    NamespaceGet,
)
USERS = ResourceType(
    "users", Endpoint.USERS.path, User, UserPost, UserPatch, UserGet,
    name_field="username",
)
GROUPS = ResourceType(
    "groups", Endpoint.GROUPS.path, Group, GroupPost, GroupPatch, GroupGet,
    name_field="groupname",
)

RESOURCE_TYPES: dict[str, ResourceType] = {
    rt.name: rt
    for rt in (
        CLASSES,
        CLASS_RELATIONS,
        OBJECTS,
        OBJECT_RELATIONS,
        NAMESPACES,
        USERS,
        GROUPS,
    )
}
