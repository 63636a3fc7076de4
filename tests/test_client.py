"""Tests for client.py - credential selection, environment-scoped calls,
queries and events. The dispatcher is replaced by a recording fake."""

import json
from unittest.mock import patch

import pytest

from apiary_cli.client import ApiaryClient
from apiary_cli.exceptions import ApiError, CliError, SetupError, TransportError, ValidationError
from apiary_cli.models import ApiResult, ClientConfig, Credential

MGMT = Credential.management("hcxmk_id", "secret")
CFG = Credential.configuration("hcaik_cfg")

ENVIRONMENTS = {
    "data": [
        {"id": "e1", "attributes": {"slug": "prod", "name": "Production"}},
        {"id": "e2", "attributes": {"slug": "dev", "name": "Development"}},
    ]
}


class Seq(list):
    """Responses consumed in order; the last one repeats."""


class FakeSender:
    """Stand-in for api.send: records every call, replays canned responses.

    ``routes`` maps (METHOD, path) to a JSON value, an ApiResult, an
    exception, or a Seq of those.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def __call__(self, spec, credential, *, base_url, timeout):
        self.calls.append((spec, credential))
        key = (spec.method, spec.path)
        if key not in self.routes:
            raise AssertionError(f"unexpected request {key}")
        value = self.routes[key]
        if isinstance(value, Seq):
            value = value.pop(0) if len(value) > 1 else value[0]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, ApiResult):
            return value
        return ApiResult(200, json.dumps(value).encode(), "application/json")

    @property
    def paths(self):
        return [(spec.method, spec.path) for spec, _ in self.calls]


def _client(routes=None, **settings):
    defaults = {"management": MGMT, "configuration": CFG, "team": "acme"}
    defaults.update(settings)
    sender = FakeSender(routes)
    return ApiaryClient(ClientConfig(**defaults), sender=sender), sender


class TestCredentialSelection:
    def test_v2_uses_management(self):
        client, sender = _client({("GET", "/2/auth"): {}})
        client.validate_auth()
        assert sender.calls[0][1] is MGMT

    def test_v1_uses_configuration(self):
        client, sender = _client({("GET", "/1/boards"): []})
        client.list_resource("boards")
        assert sender.calls[0][1] is CFG

    def test_missing_management_key(self):
        client, sender = _client(management=None)
        with pytest.raises(SetupError, match="Management API key required"):
            client.validate_auth()
        assert sender.calls == []

    def test_missing_configuration_key(self):
        client, sender = _client(configuration=None)
        with pytest.raises(SetupError, match="Configuration API key required"):
            client.list_resource("boards")
        assert sender.calls == []

    def test_settings_passed_to_sender(self):
        seen = {}

        def sender(spec, credential, *, base_url, timeout):
            seen.update(base_url=base_url, timeout=timeout)
            return ApiResult(200, b"[]")

        client = ApiaryClient(
            ClientConfig(configuration=CFG, base_url="https://h.test", timeout=7), sender=sender
        )
        client.list_resource("boards")
        assert seen == {"base_url": "https://h.test", "timeout": 7}


class TestTeamScoping:
    def test_team_path_is_team_scoped(self):
        client, sender = _client({("GET", "/2/teams/acme/environments"): ENVIRONMENTS})
        client.fetch_environments("acme")
        spec = sender.calls[0][0]
        assert spec.team == "acme"
        assert spec.team_scoped is True

    def test_v1_path_not_team_scoped(self):
        client, sender = _client({("GET", "/1/boards"): []})
        client.list_resource("boards")
        assert sender.calls[0][0].team_scoped is False

    def test_encoded_team_header_uses_raw_slug(self):
        client, sender = _client({("GET", "/2/teams/my%20team/environments"): ENVIRONMENTS})
        client.fetch_environments("my team")
        assert sender.calls[0][0].team == "my team"

    def test_team_required_for_team_resources(self):
        client, sender = _client(team=None)
        with pytest.raises(SetupError, match="Team is required"):
            client.list_resource("environments")
        assert sender.calls == []

    def test_team_flag_overrides_default(self):
        client, sender = _client({("GET", "/2/teams/other/api_keys"): {"data": []}})
        client.list_resource("api-keys", team="other")
        assert sender.paths == [("GET", "/2/teams/other/api_keys")]


class TestEnvironments:
    def test_fetch_environments_parses_envelope(self):
        client, _ = _client({("GET", "/2/teams/acme/environments"): ENVIRONMENTS})
        envs = client.fetch_environments("acme")
        assert [e.slug for e in envs] == ["prod", "dev"]

    def test_fetch_environments_bad_shape(self):
        client, _ = _client({("GET", "/2/teams/acme/environments"): {"data": "nope"}})
        with pytest.raises(CliError, match="Unexpected environments response shape"):
            client.fetch_environments("acme")

    def test_require_environment_by_name(self):
        client, _ = _client({("GET", "/2/teams/acme/environments"): ENVIRONMENTS})
        assert client.require_environment("Production").slug == "prod"


class TestEnvironmentScopedCalls:
    def test_validation_happens_before_dispatch(self):
        client, sender = _client(
            {
                ("GET", "/2/teams/acme/environments"): ENVIRONMENTS,
                ("GET", "/1/datasets"): [{"slug": "api"}],
            }
        )
        assert client.list_resource("datasets", environment="Production") == [{"slug": "api"}]
        assert sender.paths == [("GET", "/2/teams/acme/environments"), ("GET", "/1/datasets")]
        assert dict(sender.calls[1][0].query) == {"environment": "prod"}

    def test_failed_validation_means_no_dispatch(self):
        client, sender = _client({("GET", "/2/teams/acme/environments"): ENVIRONMENTS})
        with pytest.raises(ValidationError) as exc_info:
            client.create_resource("triggers", {"name": "t"}, dataset="api", environment="qa")
        assert "not found in team 'acme'" in str(exc_info.value)
        assert sender.paths == [("GET", "/2/teams/acme/environments")]

    def test_validation_fetch_error_propagates(self):
        client, sender = _client(
            {("GET", "/2/teams/acme/environments"): ApiError(401, '{"error":"unknown API key"}')}
        )
        with pytest.raises(ApiError):
            client.delete_resource("boards", "b1", environment="prod")
        assert len(sender.calls) == 1

    def test_datasets_require_environment(self):
        client, sender = _client()
        with pytest.raises(CliError, match="Environment is required"):
            client.list_resource("datasets")
        assert sender.calls == []

    def test_no_environment_no_validation(self):
        client, sender = _client({("GET", "/1/boards"): []})
        client.list_resource("boards")
        assert sender.paths == [("GET", "/1/boards")]
        assert dict(sender.calls[0][0].query) == {}


class TestResourceCrud:
    def test_dataset_required(self):
        client, sender = _client()
        with pytest.raises(CliError, match="--dataset is required"):
            client.list_resource("triggers")
        assert sender.calls == []

    def test_unknown_resource(self):
        client, _ = _client()
        with pytest.raises(CliError, match="Unknown resource 'widgets'"):
            client.list_resource("widgets")

    def test_unsupported_action(self):
        client, _ = _client()
        with pytest.raises(CliError, match="does not support 'list'"):
            client.list_resource("dataset-definitions", dataset="api")

    def test_get_item(self):
        client, sender = _client({("GET", "/1/triggers/api/t1"): {"id": "t1"}})
        assert client.get_resource("triggers", "t1", dataset="api") == {"id": "t1"}

    def test_get_requires_id_for_collections(self):
        client, _ = _client()
        with pytest.raises(CliError, match="An id is required"):
            client.get_resource("triggers", dataset="api")

    def test_get_singleton_without_id(self):
        client, sender = _client({("GET", "/1/dataset_definitions/api"): {"name": {}}})
        client.get_resource("dataset-definitions", dataset="api")
        assert sender.paths == [("GET", "/1/dataset_definitions/api")]

    def test_create_sends_json_body(self):
        client, sender = _client({("POST", "/1/markers/api"): {"id": "m1"}})
        client.create_resource("markers", {"message": "deploy"}, dataset="api")
        assert json.loads(sender.calls[0][0].body) == {"message": "deploy"}

    def test_update_uses_registry_method(self):
        client, sender = _client(
            {
                ("PUT", "/1/slos/api/s1"): {"id": "s1"},
                ("PATCH", "/1/dataset_definitions/api"): {},
            }
        )
        client.update_resource("slos", "s1", {"name": "x"}, dataset="api")
        client.update_resource("dataset-definitions", None, {"duration_ms": {}}, dataset="api")
        assert sender.paths == [("PUT", "/1/slos/api/s1"), ("PATCH", "/1/dataset_definitions/api")]

    def test_delete_returns_summary(self):
        client, _ = _client({("DELETE", "/1/boards/b1"): ApiResult(204, b"")})
        assert client.delete_resource("boards", "b1") == {
            "ok": True,
            "status": 204,
            "id": "b1",
            "resource": "boards",
        }

    def test_dataset_with_space_is_encoded(self):
        client, sender = _client({("GET", "/1/columns/my%20dataset"): []})
        client.list_resource("columns", dataset="my dataset")
        assert sender.paths == [("GET", "/1/columns/my%20dataset")]

    def test_id_cannot_inject_query_string(self):
        client, sender = _client({("GET", "/1/boards/abc%3Fenvironment%3Dprod"): {}})
        client.get_resource("boards", "abc?environment=prod")
        spec = sender.calls[0][0]
        assert spec.path == "/1/boards/abc%3Fenvironment%3Dprod"
        assert spec.query == {}

    def test_delete_id_is_encoded(self):
        client, sender = _client({("DELETE", "/1/boards/a%23b"): ApiResult(204, b"")})
        assert client.delete_resource("boards", "a#b")["id"] == "a#b"
        assert sender.paths == [("DELETE", "/1/boards/a%23b")]

    def test_api_error_propagates_unchanged(self):
        body = '{"error":"dataset not found"}'
        client, _ = _client({("GET", "/1/columns/nope"): ApiError(404, body)})
        with pytest.raises(ApiError) as exc_info:
            client.list_resource("columns", dataset="nope")
        assert exc_info.value.body == body


class TestAuth:
    def test_auth_info_is_local(self):
        client, sender = _client()
        info = client.auth_info()
        assert info["management"]["configured"] is True
        assert info["management"]["key"] == "hcxmk_id..."
        assert info["configuration"]["configured"] is True
        assert info["team"] == "acme"
        assert sender.calls == []

    def test_validate_keys(self):
        client, sender = _client(
            {
                ("GET", "/2/auth"): {},
                ("GET", "/1/auth"): ApiError(401, '{"error":"unknown API key"}'),
            }
        )
        rows = client.validate_keys()
        assert [r["status"] for r in rows] == ["valid", "invalid"]
        assert "unknown API key" in rows[1]["details"]
        assert sender.paths == [("GET", "/2/auth"), ("GET", "/1/auth")]

    def test_validate_keys_not_configured(self):
        client, sender = _client(management=None, configuration=None)
        rows = client.validate_keys()
        assert [r["status"] for r in rows] == ["not configured", "not configured"]
        assert sender.calls == []

    def test_validate_keys_unpaired_management_id(self):
        client, _ = _client(management=None, configuration=None, unpaired_management_id="hcxmk_x")
        row = client.validate_keys()[0]
        assert row["status"] == "invalid"
        assert row["details"] == "Missing management key secret"

    def test_validate_keys_transport_error(self):
        client, _ = _client(
            {("GET", "/2/auth"): TransportError("[ERROR] Connection failed: refused")},
            configuration=None,
        )
        assert client.validate_keys()[0]["status"] == "invalid"


class TestQueries:
    @patch("apiary_cli.client.time.sleep")
    def test_run_query_polls_until_complete(self, mock_sleep):
        client, sender = _client(
            {
                ("POST", "/1/queries/api"): {"id": "q1"},
                ("POST", "/1/query_results/api"): {"id": "r1"},
                ("GET", "/1/query_results/api/r1"): Seq(
                    [
                        {"complete": False},
                        {"complete": True, "data": {"results": []}},
                    ]
                ),
            }
        )
        result = client.run_query("api", {"calculations": [{"op": "COUNT"}]})
        assert result["complete"] is True
        assert json.loads(sender.calls[1][0].body) == {"query_id": "q1"}
        assert sender.paths.count(("GET", "/1/query_results/api/r1")) == 2
        mock_sleep.assert_called_once()

    def test_run_query_no_wait(self):
        client, sender = _client(
            {
                ("POST", "/1/queries/api"): {"id": "q1"},
                ("POST", "/1/query_results/api"): {"query_result_id": "r1"},
            }
        )
        assert client.run_query("api", {}, wait=False) == {
            "query_id": "q1",
            "query_result_id": "r1",
            "complete": False,
        }
        assert len(sender.calls) == 2

    @patch("apiary_cli.client.time.sleep")
    @patch("apiary_cli.client.time.monotonic")
    def test_run_query_times_out(self, mock_monotonic, mock_sleep):
        mock_monotonic.side_effect = [0.0, 1.0, 5.0]
        client, _ = _client(
            {
                ("POST", "/1/queries/api"): {"id": "q1"},
                ("POST", "/1/query_results/api"): {"id": "r1"},
                ("GET", "/1/query_results/api/r1"): {"complete": False},
            }
        )
        with pytest.raises(CliError, match="timed out after 2 seconds"):
            client.run_query("api", {}, timeout=2)

    def test_run_query_missing_id(self):
        client, _ = _client({("POST", "/1/queries/api"): {}})
        with pytest.raises(CliError, match="Failed to get query ID"):
            client.run_query("api", {})


class TestEvents:
    def test_send_single_event(self):
        client, sender = _client({("POST", "/1/events/api"): {}})
        assert client.send_events("api", {"a": 1}) == [{"index": 0, "status": 200}]
        assert len(sender.calls) == 1

    def test_send_events_sequentially(self):
        client, sender = _client({("POST", "/1/events/api"): {}})
        sent = client.send_events("api", [{"a": 1}, {"a": 2}])
        assert [s["index"] for s in sent] == [0, 1]
        assert [json.loads(spec.body) for spec, _ in sender.calls] == [{"a": 1}, {"a": 2}]

    def test_send_events_stops_at_first_failure(self):
        client, sender = _client(
            {("POST", "/1/events/api"): Seq([ApiResult(200, b""), ApiError(400, "bad event")])}
        )
        with pytest.raises(ApiError):
            client.send_events("api", [{"a": 1}, {"a": 2}, {"a": 3}])
        assert len(sender.calls) == 2

    def test_dataset_segment_encoded_for_events_and_queries(self):
        client, sender = _client(
            {
                ("POST", "/1/events/my%20ds"): {},
                ("POST", "/1/batch/my%20ds"): [],
                ("GET", "/1/query_results/my%20ds/r%2F1"): {"complete": True},
            }
        )
        client.send_events("my ds", {"a": 1})
        client.send_batch("my ds", [{"data": {}}])
        client.get_query_result("my ds", "r/1")
        assert len(sender.calls) == 3

    def test_send_events_rejects_non_objects(self):
        client, sender = _client()
        with pytest.raises(CliError, match="Events must be"):
            client.send_events("api", [])
        with pytest.raises(CliError, match="Event #0"):
            client.send_events("api", ["x"])
        assert sender.calls == []

    def test_send_batch(self):
        client, sender = _client({("POST", "/1/batch/api"): [{"status": 202}]})
        assert client.send_batch("api", [{"data": {"a": 1}}]) == [{"status": 202}]

    def test_send_batch_requires_array(self):
        client, _ = _client()
        with pytest.raises(CliError, match="JSON array"):
            client.send_batch("api", {"a": 1})
