# normalizer.py
"""
Turns the loosely-typed YAML configuration into the frozen tree in config.py.

Shape is checked by the pydantic models: missing required keys, wrong types,
unknown keys and closed enums (status, schema compatibility/type, network
default action). Whatever pydantic rejects surfaces as MalformedConfig.
Whether a value is allowed for the chosen SKU is the validator's business,
so `sku`, `minimum_tls_version` and capture `encoding` pass through as plain
strings.
"""

from typing import Any, Optional, Tuple, Union

import pulumi
from pydantic import ValidationError

from config import NamespaceConfig, NamespaceSettings, NetworkRuleSet, SchemaGroup
from exceptions import MalformedConfig

AZURE_LOCATION_ABBREVIATIONS = {
    "eastus": "eus",
    "eastus2": "eus2",
    "westus": "wus",
    "westus2": "wus2",
    "westus3": "wus3",
    "centralus": "cus",
    "northcentralus": "ncus",
    "southcentralus": "scus",
    "canadacentral": "ccc",
    "canadaeast": "cce",
    "brazilsouth": "brs",
    "northeurope": "ne",
    "westeurope": "we",
    "uksouth": "uks",
    "ukwest": "ukw",
    "francecentral": "frc",
    "germanywestcentral": "gwc",
    "norwayeast": "nwe",
    "swedencentral": "swc",
    "switzerlandnorth": "swn",
    "uaenorth": "uaen",
    "australiaeast": "aue",
    "australiasoutheast": "ause",
    "japaneast": "jpe",
    "japanwest": "jpw",
    "koreacentral": "kc",
    "southeastasia": "sea",
    "eastasia": "ea",
    "centralindia": "ci",
    "southafricanorth": "san",
    "qatarcentral": "qc",
    "polandcentral": "plc",
}

# Options of the full module that drive features this program does not build.
SIDE_FEATURE_FLAGS = (
    "enable_private_endpoint",
    "enable_diagnostic_settings",
    "enable_policy_assignments",
    "enable_custom_policies",
    "enable_policy_initiative",
    "enable_resource_lock",
)


def canonical_location(location: str) -> str:
    # "East US" -> "eastus"
    return location.replace(" ", "").lower()


def get_abbreviation(location: str) -> str:
    # If the location is recognized, use abbreviation; else fallback to first 3 letters
    canonical = canonical_location(location)
    return AZURE_LOCATION_ABBREVIATIONS.get(canonical, canonical[:3])


def generate_namespace_name(
    environment: str, location_short: str, custom_name: Optional[str] = None
) -> str:
    suffix = custom_name or location_short
    return f"eh-{environment}-{suffix}".lower()


def error_path(loc: Tuple[Union[int, str], ...]) -> str:
    # ("eventhubs", 0, "status") -> "eventhubs[0].status"
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "configuration"


def malformed(error: ValidationError) -> MalformedConfig:
    """Report the first problem pydantic found, with a YAML-style path."""
    first = error.errors()[0]
    field = error_path(first["loc"])
    if first["type"] == "missing":
        return MalformedConfig(field, "is required")
    return MalformedConfig(field, first["msg"], first["input"])


def parse_settings(raw: Any) -> NamespaceSettings:
    try:
        return NamespaceSettings.model_validate(raw)
    except ValidationError as e:
        raise malformed(e) from e


def _requested_side_features(settings: NamespaceSettings) -> Tuple[str, ...]:
    requested = []
    for flag in SIDE_FEATURE_FLAGS:
        if getattr(settings, flag):
            requested.append(flag)
        elif flag in settings.model_fields_set:
            pulumi.log.warn(f"Option '{flag}' is disabled and has no effect; ignoring it")
    return tuple(requested)


def normalize(raw: Any) -> NamespaceConfig:
    """Build a fully-defaulted NamespaceConfig from the raw configuration."""
    settings = parse_settings(raw)

    location_short = settings.location_short or get_abbreviation(settings.location)
    name = settings.name or generate_namespace_name(
        settings.environment, location_short, settings.custom_name
    )

    network_rule_set = None
    if settings.enable_network_rules:
        network_rule_set = settings.network_rulesets or NetworkRuleSet()
    elif settings.network_rulesets is not None:
        pulumi.log.warn("'network_rulesets' is set but 'enable_network_rules' is false; ignoring it")

    return NamespaceConfig(
        name=name,
        resource_group_name=settings.resource_group_name,
        location=settings.location,
        location_short=location_short,
        environment=settings.environment,
        sku=settings.sku,
        capacity=settings.capacity,
        cluster_arm_id=settings.cluster_arm_id,
        auto_inflate_enabled=settings.auto_inflate_enabled,
        maximum_throughput_units=settings.maximum_throughput_units,
        zone_redundant=settings.zone_redundant,
        minimum_tls_version=settings.minimum_tls_version,
        public_network_access_enabled=settings.public_network_access_enabled,
        local_auth_enabled=settings.local_auth_enabled,
        managed_identity_enabled=settings.enable_managed_identity,
        tags=settings.tags,
        eventhubs=settings.eventhubs,
        schema_groups=tuple(
            SchemaGroup(name=group_name, **group.model_dump())
            for group_name, group in settings.schema_groups.items()
        ),
        namespace_authorization_rules=settings.namespace_authorization_rules,
        network_rule_set=network_rule_set,
        requested_side_features=_requested_side_features(settings),
    )
