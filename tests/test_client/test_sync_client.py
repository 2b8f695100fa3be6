"""Tests for the blocking client: state machine, resources, query builder."""

from __future__ import annotations

import copy
import threading

import httpx
import pytest

from hubuum_client import Credentials, SyncClient
from hubuum_client.client import AuthenticatedSyncClient, QueryBuilder, Resource
from hubuum_client.exceptions import (
    AmbiguousResultError,
    AuthNetworkError,
    ClientStateError,
    DecodeError,
    InvalidCredentialsError,
    InvalidFilterError,
    InvalidTokenError,
    InvalidUsageError,
    NetworkError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from hubuum_client.client.base import ResourceAccessors
from hubuum_client.filters import FilterClause, FilterOperator
from hubuum_client.models import Profile, RequestConfig
from hubuum_client.resources import Class, ClassGet, ClassPatch, ClassPost, Group, Object, User

from conftest import (
    BASE_URL,
    TOKEN,
    FakeHubuum,
    body_json,
    class_json,
    group_json,
    json_reply,
    object_json,
    query_pairs,
    user_json,
)

CREDS = Credentials(username="admin", password="secret")

ACCESSORS = (
    "classes",
    "class_relation",
    "objects",
    "object_relation",
    "namespaces",
    "users",
    "groups",
    "resource",
)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


class TestStateMachine:
    @pytest.mark.parametrize("name", ACCESSORS)
    def test_unauthenticated_client_has_no_accessors(self, name: str) -> None:
        client = SyncClient(BASE_URL)
        assert not hasattr(client, name)
        assert hasattr(AuthenticatedSyncClient, name)

    def test_login_returns_authenticated_client(self, server: FakeHubuum) -> None:
        authed = SyncClient(BASE_URL, transport=server.transport).login(CREDS)
        assert isinstance(authed, AuthenticatedSyncClient)
        assert authed.token == TOKEN

    def test_login_consumes_handle(self, server: FakeHubuum) -> None:
        client = SyncClient(BASE_URL, transport=server.transport)
        client.login(CREDS)
        with pytest.raises(ClientStateError):
            client.login(CREDS)
        with pytest.raises(ClientStateError):
            client.login_with_token(TOKEN)
        with pytest.raises(ClientStateError):
            client.clone()

    def test_failed_login_leaves_handle_usable(self, server: FakeHubuum) -> None:
        server.route("POST", "/api/v0/auth/login", json_reply({"message": "nope"}, 401))
        client = SyncClient(BASE_URL, transport=server.transport)
        with pytest.raises(InvalidCredentialsError):
            client.login(CREDS)
        server.route("POST", "/api/v0/auth/login", json_reply({"token": TOKEN}))
        assert client.login(CREDS).token == TOKEN

    def test_login_with_token_string(self, server: FakeHubuum) -> None:
        authed = SyncClient(BASE_URL, transport=server.transport).login_with_token(TOKEN)
        assert authed.token == TOKEN

    def test_rejected_token_fails_at_login(self, server: FakeHubuum) -> None:
        with pytest.raises(InvalidTokenError):
            SyncClient(BASE_URL, transport=server.transport).login_with_token("expired")

    def test_token_revoked_after_login(self, server: FakeHubuum) -> None:
        authed = SyncClient(BASE_URL, transport=server.transport).login_with_token(TOKEN)
        server.route("GET", "/api/v1/classes/", json_reply({"message": "Token expired"}, 401))
        with pytest.raises(UnauthorizedError, match="Token expired"):
            authed.classes().find().execute()

    def test_invalid_base_url(self) -> None:
        with pytest.raises(InvalidUsageError):
            SyncClient("ftp://hubuum.example.com")

    def test_authenticated_client_requires_token(self) -> None:
        client = SyncClient(BASE_URL)
        with pytest.raises(ClientStateError):
            AuthenticatedSyncClient(client._session)

    def test_from_profile(self, server: FakeHubuum) -> None:
        profile = Profile(
            name="p", base_url=BASE_URL, request=RequestConfig(timeout=5, verify_ssl=False)
        )
        client = SyncClient.from_profile(profile, transport=server.transport)
        assert str(client.base_url) == BASE_URL + "/"
        assert client.login(CREDS).token == TOKEN


class TestCloneAndClose:
    def test_clone_shares_session_without_io(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        before = len(server.requests)
        clone = hubuum.clone()
        assert clone is not hubuum
        assert clone._session is hubuum._session
        assert copy.copy(hubuum)._session is hubuum._session
        assert len(server.requests) == before

    def test_unauthenticated_clone(self) -> None:
        client = SyncClient(BASE_URL)
        assert client.clone()._session is client._session

    def test_context_manager_closes_transport(self, server: FakeHubuum) -> None:
        with SyncClient(BASE_URL, transport=server.transport).login(CREDS) as authed:
            transport = authed._session.transport
            assert not transport.is_closed
        assert transport.is_closed

    def test_close_affects_clones(self, hubuum: AuthenticatedSyncClient) -> None:
        clone = hubuum.clone()
        hubuum.close()
        assert clone._session.transport.is_closed

    def test_request_on_clone_after_close(self, hubuum: AuthenticatedSyncClient) -> None:
        clone = hubuum.clone()
        hubuum.close()
        with pytest.raises(NetworkError, match="transport is closed"):
            clone.classes().find().execute()

    def test_login_after_close(self) -> None:
        client = SyncClient(BASE_URL)
        client.close()
        with pytest.raises(AuthNetworkError):
            client.login(CREDS)

    def test_concurrent_clones(self, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", json_reply([class_json(1)]))
        authed = SyncClient(BASE_URL, transport=server.transport).login(CREDS)
        results: list[list[Class]] = []
        errors: list[Exception] = []

        def worker() -> None:
            try:
                results.append(authed.clone().classes().find().execute())
            except Exception as exc:  # collected for the assertion below
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []
        assert len(results) == 8
        assert all(r[0].id == 1 for r in results)
        assert all(
            r.headers["Authorization"] == f"Bearer {TOKEN}" for r in server.resource_requests()
        )


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class TestAccessors:
    def test_paths(self, hubuum: AuthenticatedSyncClient) -> None:
        assert hubuum.classes().path == "/api/v1/classes/"
        assert hubuum.class_relation().path == "/api/v1/relations/classes/"
        assert hubuum.objects(7).path == "/api/v1/classes/7/"
        assert hubuum.object_relation().path == "/api/v1/relations/objects/"
        assert hubuum.namespaces().path == "/api/v1/namespaces/"
        assert hubuum.users().path == "/api/v1/iam/users/"
        assert hubuum.groups().path == "/api/v1/iam/groups/"

    def test_accessor_returns_resource(self, hubuum: AuthenticatedSyncClient) -> None:
        assert isinstance(hubuum.classes(), Resource)
        assert isinstance(hubuum.classes().find(), QueryBuilder)

    def test_accessors_do_no_io(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        before = len(server.requests)
        hubuum.classes().find().add_filter_id(1).add_filter_name_exact("x")
        assert len(server.requests) == before

    def test_accessor_base_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            ResourceAccessors()  # type: ignore[abstract]


class TestCreate:
    def test_create_returns_model(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("POST", "/api/v1/classes/", json_reply(class_json(9, "switch"), 201))
        created = hubuum.classes().create(ClassPost(name="switch", description="", namespace_id=1))
        assert isinstance(created, Class)
        assert created.id == 9
        assert body_json(server.last) == {"name": "switch", "description": "", "namespace_id": 1}
        assert server.last.headers["Content-Type"] == "application/json"

    def test_create_from_dict(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("POST", "/api/v1/iam/groups/", json_reply(group_json(2, "ops"), 201))
        created = hubuum.groups().create({"groupname": "ops", "description": "ops group"})
        assert isinstance(created, Group)

    def test_create_rejected(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("POST", "/api/v1/classes/", json_reply({"message": "name already exists"}, 409))
        with pytest.raises(ValidationError, match="name already exists"):
            hubuum.classes().create(ClassPost(name="dup", description="", namespace_id=1))

    def test_create_object_under_class(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("POST", "/api/v1/classes/3/", json_reply(object_json(5, 3), 201))
        created = hubuum.objects(3).create(
            {"name": "web01", "namespace_id": 1, "hubuum_class_id": 3, "description": ""}
        )
        assert isinstance(created, Object)
        assert created.hubuum_class_id == 3


class TestUpdateDelete:
    def test_update(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("PATCH", "/api/v1/classes/4", json_reply(class_json(4, "renamed")))
        updated = hubuum.classes().update(4, ClassPatch(name="renamed"))
        assert updated.name == "renamed"
        assert body_json(server.last) == {"name": "renamed"}

    def test_delete(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("DELETE", "/api/v1/classes/4", httpx.Response(204))
        assert hubuum.classes().delete(4) is None
        assert server.last.method == "DELETE"

    def test_delete_with_body(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("DELETE", "/api/v1/classes/4", json_reply({"ok": True}))
        with pytest.raises(DecodeError):
            hubuum.classes().delete(4)

    def test_delete_missing(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("DELETE", "/api/v1/classes/4", json_reply({"message": "no such class"}, 404))
        with pytest.raises(NotFoundError, match="no such class"):
            hubuum.classes().delete(4)

    def test_network_failure(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("DELETE", "/api/v1/classes/4", httpx.ConnectError("reset"))
        with pytest.raises(NetworkError) as exc_info:
            hubuum.classes().delete(4)
        assert exc_info.value.cause is not None


# ---------------------------------------------------------------------------
# Query builder
# ---------------------------------------------------------------------------


class TestQueryBuilder:
    def test_filters_sent_in_order(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", json_reply([]))
        hubuum.classes().find() \
            .add_filter_equals("namespace_id", 3) \
            .add_filter_contains("name", "rout") \
            .add_filter_not_equals("id", 9) \
            .add_filter("created_at", FilterOperator.GTE, "2024-01-01") \
            .execute()
        assert query_pairs(server.last) == [
            ("namespace_id__equals", "3"),
            ("name__contains", "rout"),
            ("id__not_equals", "9"),
            ("created_at__gte", "2024-01-01"),
        ]
        assert server.last.headers["Authorization"] == f"Bearer {TOKEN}"

    def test_empty_result_is_success(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", json_reply([]))
        assert hubuum.classes().find().execute() == []

    def test_builder_is_immutable(self, hubuum: AuthenticatedSyncClient) -> None:
        base = hubuum.classes().find().add_filter_equals("a", 1)
        narrowed = base.add_filter_equals("b", 2)
        assert len(base.clauses) == 1
        assert len(narrowed.clauses) == 2
        assert base.build_request().params == (("a__equals", "1"),)

    def test_add_clauses_appends_in_order(self, hubuum: AuthenticatedSyncClient) -> None:
        base = hubuum.classes().find().add_filter_equals("namespace_id", 3)
        extended = base.add_clauses(
            iter([
                FilterClause.build("name", FilterOperator.ICONTAINS, "ro"),
                FilterClause.build("id", FilterOperator.GT, 2, negated=True),
            ])
        )
        assert extended is not base
        assert isinstance(extended, QueryBuilder)
        assert base.build_request().params == (("namespace_id__equals", "3"),)
        assert extended.build_request().params == (
            ("namespace_id__equals", "3"),
            ("name__icontains", "ro"),
            ("id__not_gt", "2"),
        )

    def test_re_execution_sends_identical_request(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", json_reply([class_json(1)]))
        builder = hubuum.classes().find().add_filter_name_exact("router")
        builder.execute()
        builder.execute()
        first, second = server.resource_requests()
        assert first.url == second.url
        assert first.headers["Authorization"] == second.headers["Authorization"]

    def test_bad_value_rejected_before_io(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        before = len(server.requests)
        with pytest.raises(InvalidFilterError):
            hubuum.classes().find().add_filter_equals("name", None)
        assert len(server.requests) == before

    def test_name_field_per_resource(self, hubuum: AuthenticatedSyncClient) -> None:
        assert hubuum.users().find().add_filter_name_exact("bob").build_request().params == (
            ("username__equals", "bob"),
        )
        assert hubuum.groups().find().add_filter_name_exact("ops").build_request().params == (
            ("groupname__equals", "ops"),
        )

    def test_single_result(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", json_reply([class_json(1)]))
        assert hubuum.classes().find().add_filter_id(1).execute_expecting_single_result().id == 1

    def test_single_result_none(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", json_reply([]))
        with pytest.raises(NotFoundError, match="Class not found"):
            hubuum.classes().find().execute_expecting_single_result()

    def test_single_result_many(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", json_reply([class_json(1), class_json(2)]))
        with pytest.raises(AmbiguousResultError) as exc_info:
            hubuum.classes().find().execute_expecting_single_result()
        assert exc_info.value.count == 2

    def test_undecodable_body(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", httpx.Response(200, text="<html>"))
        with pytest.raises(DecodeError):
            hubuum.classes().find().execute()


class TestConvenience:
    def test_get(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/iam/users/", json_reply([user_json(3)]))
        user = hubuum.users().get(3)
        assert isinstance(user, User)
        assert query_pairs(server.last) == [("id__equals", "3")]

    def test_select_by_name(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/iam/groups/", json_reply([group_json(1, "ops")]))
        assert hubuum.groups().select_by_name("ops").groupname == "ops"
        assert query_pairs(server.last) == [("groupname__equals", "ops")]

    def test_filter_with_params_model(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/classes/", json_reply([class_json(1)]))
        hubuum.classes().filter(ClassGet(name="router", namespace_id=2))
        assert query_pairs(server.last) == [("name__equals", "router"), ("namespace_id__equals", "2")]

    def test_filter_with_kwargs(self, hubuum: AuthenticatedSyncClient, server: FakeHubuum) -> None:
        server.route("GET", "/api/v1/iam/users/", json_reply([user_json(1)]))
        user = hubuum.users().filter_expecting_single_result(username="admin", email=None)
        assert user.username == "admin"
        assert query_pairs(server.last) == [("username__equals", "admin")]
