"""Resource registry - single source of truth for API entity families.

Standalone module (no project imports). Adding a new resource means
appending one ResourceDefinition to RESOURCES.
"""

import urllib.parse
from dataclasses import dataclass

GLOBAL = "global"
DATASET = "dataset"
TEAM = "team"

CRUD = ("list", "get", "create", "update", "delete")


def quote_segment(value):
    """Percent-encode one URL path segment (/ ? # and spaces included)."""
    return urllib.parse.quote(str(value), safe="")


@dataclass(frozen=True)
class ResourceDefinition:
    """One CRUD endpoint family (e.g. triggers, slos, boards)."""

    name: str
    display_name: str
    path: str
    scope: str
    actions: tuple[str, ...]
    update_method: str
    columns: tuple[tuple[str, str, int], ...]
    requires_environment: bool = False
    cli_help: str = ""

    def collection_path(self, dataset=None, team=None):
        return self.path.format(
            dataset=quote_segment(dataset or ""), team=quote_segment(team or "")
        )

    def supports(self, action):
        return action in self.actions


RESOURCES: tuple[ResourceDefinition, ...] = (
    ResourceDefinition(
        name="environments",
        display_name="Environment",
        path="/2/teams/{team}/environments",
        scope=TEAM,
        actions=CRUD,
        update_method="PATCH",
        columns=(
            ("ID", "id", 35),
            ("Name", "attributes.name", 20),
            ("Slug", "attributes.slug", 25),
            ("Color", "attributes.color", 12),
            ("Created", "attributes.timestamps.created", 0),
        ),
        cli_help="Environment management (v2 Management API)",
    ),
    ResourceDefinition(
        name="api-keys",
        display_name="API key",
        path="/2/teams/{team}/api_keys",
        scope=TEAM,
        actions=CRUD,
        update_method="PATCH",
        columns=(
            ("ID", "id", 24),
            ("Name", "attributes.name", 30),
            ("Type", "attributes.key_type", 15),
            ("Disabled", "attributes.disabled", 10),
            ("Created", "attributes.timestamps.created", 0),
        ),
        cli_help="API key management (v2 Management API)",
    ),
    ResourceDefinition(
        name="datasets",
        display_name="Dataset",
        path="/1/datasets",
        scope=GLOBAL,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("Name", "name", 30),
            ("Slug", "slug", 25),
            ("Created", "created_at", 12),
            ("Last Written", "last_written_at", 0),
        ),
        requires_environment=True,
        cli_help="Dataset management and configuration",
    ),
    ResourceDefinition(
        name="columns",
        display_name="Column",
        path="/1/columns/{dataset}",
        scope=DATASET,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Key Name", "key_name", 30),
            ("Type", "type", 10),
            ("Hidden", "hidden", 8),
            ("Description", "description", 0),
        ),
        cli_help="Column definitions and metadata",
    ),
    ResourceDefinition(
        name="triggers",
        display_name="Trigger",
        path="/1/triggers/{dataset}",
        scope=DATASET,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Name", "name", 30),
            ("Disabled", "disabled", 10),
            ("Alert Type", "alert_type", 15),
            ("Created", "created_at", 12),
            ("Recipients", "#recipients", 0),
        ),
        cli_help="Alert trigger configuration",
    ),
    ResourceDefinition(
        name="boards",
        display_name="Board",
        path="/1/boards",
        scope=GLOBAL,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Name", "name", 35),
            ("Style", "style", 10),
            ("Queries", "#queries", 0),
        ),
        cli_help="Dashboard and board management",
    ),
    ResourceDefinition(
        name="markers",
        display_name="Marker",
        path="/1/markers/{dataset}",
        scope=DATASET,
        actions=("list", "create", "update", "delete"),
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Type", "type", 15),
            ("Message", "message", 40),
            ("Created", "created_at", 0),
        ),
        cli_help="Event marker management",
    ),
    ResourceDefinition(
        name="marker-settings",
        display_name="Marker setting",
        path="/1/marker_settings/{dataset}",
        scope=DATASET,
        actions=("list", "create", "update", "delete"),
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Type", "type", 25),
            ("Color", "color", 12),
            ("Created", "created_at", 0),
        ),
        cli_help="Marker display configuration",
    ),
    ResourceDefinition(
        name="recipients",
        display_name="Recipient",
        path="/1/recipients",
        scope=GLOBAL,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Type", "type", 12),
            ("Target", "details", 0),
        ),
        cli_help="Notification recipient management",
    ),
    ResourceDefinition(
        name="slos",
        display_name="SLO",
        path="/1/slos/{dataset}",
        scope=DATASET,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Name", "name", 30),
            ("Target", "target_per_million", 10),
            ("Period", "time_period_days", 8),
            ("SLI", "sli.alias", 0),
        ),
        cli_help="Service Level Objective management",
    ),
    ResourceDefinition(
        name="burn-alerts",
        display_name="Burn alert",
        path="/1/burn_alerts/{dataset}",
        scope=DATASET,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Alert Type", "alert_type", 20),
            ("SLO", "slo.id", 15),
            ("Recipients", "#recipients", 0),
        ),
        cli_help="SLO burn alert configuration",
    ),
    ResourceDefinition(
        name="calculated-fields",
        display_name="Calculated field",
        path="/1/derived_columns/{dataset}",
        scope=DATASET,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Alias", "alias", 30),
            ("Expression", "expression", 0),
        ),
        cli_help="Derived column calculations",
    ),
    ResourceDefinition(
        name="query-annotations",
        display_name="Query annotation",
        path="/1/query_annotations/{dataset}",
        scope=DATASET,
        actions=CRUD,
        update_method="PUT",
        columns=(
            ("ID", "id", 15),
            ("Name", "name", 30),
            ("Query ID", "query_id", 0),
        ),
        cli_help="Saved query annotations",
    ),
    ResourceDefinition(
        name="dataset-definitions",
        display_name="Dataset definition",
        path="/1/dataset_definitions/{dataset}",
        scope=DATASET,
        actions=("get", "update"),
        update_method="PATCH",
        columns=(),
        cli_help="Dataset schema definitions",
    ),
)

_BY_NAME = {r.name: r for r in RESOURCES}


def resource_names() -> list[str]:
    """Return resource names in registry order."""
    return [r.name for r in RESOURCES]


def get_resource(name: str) -> ResourceDefinition:
    """Look up a resource definition by name. Raises KeyError if unknown."""
    return _BY_NAME[name]
