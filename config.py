# config.py
"""
This module defines the data structures for our configuration.

The models are strict: nothing is coerced, unknown keys are rejected and a
validated tree is frozen. NamespaceSettings mirrors the YAML document;
normalizer.py turns it into the NamespaceConfig the rest of the program reads.
SKU-dependent rules are not checked here, see validator.py.
"""

from typing import Annotated, Any, Dict, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from exceptions import MalformedConfig

EventHubStatus = Literal["Active", "Disabled", "SendDisabled"]
SchemaCompatibility = Literal["None", "Backward", "Forward"]
SchemaType = Literal["Avro", "Json", "CSharp"]
NetworkDefaultAction = Literal["Allow", "Deny"]

# Letters, digits, '.', '_', '-' ('$' for the built-in consumer group); never '/'.
EntityName = Annotated[str, Field(min_length=1, max_length=256, pattern=r"^[\w$][\w.$-]*$")]

REQUIRED_KEYS = ("resource_group_name", "location", "environment")


class ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def drop_null_values(cls, data: Any) -> Any:
        # An empty YAML value means "not set", the same as leaving the key out.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


def _as_tuple(value: Any) -> Any:
    # YAML sequences arrive as lists; anything else is left for strict validation to reject.
    if isinstance(value, list):
        return tuple(value)
    return value


class AuthorizationRule(ConfigModel):
    name: EntityName
    listen: bool = False
    send: bool = False
    manage: bool = False

    @property
    def rights(self) -> Tuple[str, ...]:
        granted = (("Listen", self.listen), ("Send", self.send), ("Manage", self.manage))
        return tuple(right for right, enabled in granted if enabled)


class ConsumerGroup(ConfigModel):
    name: EntityName
    user_metadata: Optional[str] = None


class CaptureDestination(ConfigModel):
    name: str
    archive_name_format: str
    blob_container_name: str
    storage_account_id: str


class CaptureDescription(ConfigModel):
    enabled: bool
    encoding: str
    interval_in_seconds: int = 300
    size_limit_in_bytes: int = 314572800
    skip_empty_archives: bool = False
    destination: CaptureDestination


class EventHub(ConfigModel):
    name: EntityName
    partition_count: int = 2
    message_retention: int = 1
    status: EventHubStatus = "Active"
    capture_description: Optional[CaptureDescription] = None
    authorization_rules: Tuple[AuthorizationRule, ...] = ()
    consumer_groups: Tuple[ConsumerGroup, ...] = ()

    @field_validator("authorization_rules", "consumer_groups", mode="before")
    @classmethod
    def sequences_as_tuples(cls, value: Any) -> Any:
        return _as_tuple(value)


class SchemaGroupSettings(ConfigModel):
    schema_compatibility: SchemaCompatibility = "None"
    schema_type: SchemaType = "Avro"
    group_properties: Dict[str, str] = Field(default_factory=dict)


class SchemaGroup(SchemaGroupSettings):
    name: EntityName


class VirtualNetworkRule(ConfigModel):
    subnet_id: str
    ignore_missing_virtual_network_service_endpoint: bool = False


class NetworkRuleSet(ConfigModel):
    default_action: NetworkDefaultAction = "Deny"
    trusted_service_access_enabled: bool = False
    ip_rules: Tuple[str, ...] = ()
    virtual_network_rules: Tuple[VirtualNetworkRule, ...] = ()

    @field_validator("ip_rules", "virtual_network_rules", mode="before")
    @classmethod
    def sequences_as_tuples(cls, value: Any) -> Any:
        return _as_tuple(value)


class NamespaceSettings(ConfigModel):
    """The YAML document as written by the user."""

    resource_group_name: str
    location: str
    location_short: Optional[str] = None
    environment: str
    custom_name: Optional[str] = None
    name: Optional[str] = None
    tags: Dict[str, str] = Field(default_factory=dict)
    sku: str = "Standard"
    capacity: int = 1
    cluster_arm_id: Optional[str] = None
    auto_inflate_enabled: bool = False
    maximum_throughput_units: Optional[int] = None
    zone_redundant: bool = False
    minimum_tls_version: str = "1.2"
    public_network_access_enabled: bool = True
    local_auth_enabled: bool = True
    enable_managed_identity: bool = False
    eventhubs: Tuple[EventHub, ...] = ()
    schema_groups: Dict[EntityName, SchemaGroupSettings] = Field(default_factory=dict)
    namespace_authorization_rules: Tuple[AuthorizationRule, ...] = ()
    enable_network_rules: bool = False
    network_rulesets: Optional[NetworkRuleSet] = None
    enable_private_endpoint: bool = False
    enable_diagnostic_settings: bool = False
    enable_policy_assignments: bool = False
    enable_custom_policies: bool = False
    enable_policy_initiative: bool = False
    enable_resource_lock: bool = False

    @field_validator("eventhubs", "namespace_authorization_rules", mode="before")
    @classmethod
    def sequences_as_tuples(cls, value: Any) -> Any:
        return _as_tuple(value)

    @field_validator("schema_groups", mode="before")
    @classmethod
    def empty_schema_groups(cls, value: Any) -> Any:
        # `my-group:` with nothing under it takes every default.
        if isinstance(value, dict):
            return {name: {} if settings is None else settings for name, settings in value.items()}
        return value


class NamespaceConfig(ConfigModel):
    name: str
    resource_group_name: str
    location: str
    location_short: str
    environment: str
    sku: str = "Standard"
    capacity: int = 1
    cluster_arm_id: Optional[str] = None
    auto_inflate_enabled: bool = False
    maximum_throughput_units: Optional[int] = None
    zone_redundant: bool = False
    minimum_tls_version: str = "1.2"
    public_network_access_enabled: bool = True
    local_auth_enabled: bool = True
    managed_identity_enabled: bool = False
    tags: Dict[str, str] = Field(default_factory=dict)
    eventhubs: Tuple[EventHub, ...] = ()
    schema_groups: Tuple[SchemaGroup, ...] = ()
    namespace_authorization_rules: Tuple[AuthorizationRule, ...] = ()
    network_rule_set: Optional[NetworkRuleSet] = None
    # Side features (private endpoint, policies, locks...) the caller switched on.
    requested_side_features: Tuple[str, ...] = ()


def load_config(file_path: str) -> Dict[str, Any]:
    """Load the raw YAML configuration and check the deployment keys exist."""
    with open(file_path, "r") as file:
        config_data = yaml.safe_load(file)

    if not isinstance(config_data, dict):
        raise MalformedConfig(file_path, "must contain a mapping at the top level")

    for key in REQUIRED_KEYS:
        if key not in config_data:
            raise MalformedConfig(key, "is a required configuration key")

    return config_data
