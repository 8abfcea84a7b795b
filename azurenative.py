import inspect
from typing import Any, Callable, Dict, Optional

import pulumi
import pulumi_azure_native as azure_native

import constraints
from config import NamespaceConfig
from resource_graph import (
    CONSUMER_GROUP,
    EVENTHUB,
    EVENTHUB_AUTHORIZATION_RULE,
    NAMESPACE,
    NAMESPACE_AUTHORIZATION_RULE,
    NETWORK_RULE_SET,
    SCHEMA_GROUP,
    Address,
    ProvisionedResource,
    ResourceGraph,
    ResourceNode,
)

RESOURCE_TYPES = {
    NAMESPACE: "eventhub.Namespace",
    NETWORK_RULE_SET: "eventhub.NamespaceNetworkRuleSet",
    NAMESPACE_AUTHORIZATION_RULE: "eventhub.NamespaceAuthorizationRule",
    SCHEMA_GROUP: "eventhub.SchemaRegistry",
    EVENTHUB: "eventhub.EventHub",
    EVENTHUB_AUTHORIZATION_RULE: "eventhub.EventHubAuthorizationRule",
    CONSUMER_GROUP: "eventhub.ConsumerGroup",
}


class EventHubsResourceBuilder:
    """Registers the resources of a ResourceGraph with Pulumi, parents first."""

    def __init__(self, graph: ResourceGraph):
        self.graph = graph
        self.config: NamespaceConfig = graph.root.config
        self.resources: Dict[Address, pulumi.CustomResource] = {}
        self._args_builders: Dict[str, Callable[[ResourceNode], Dict[str, Any]]] = {
            NAMESPACE: self.namespace_args,
            NETWORK_RULE_SET: self.network_rule_set_args,
            NAMESPACE_AUTHORIZATION_RULE: self.namespace_rule_args,
            SCHEMA_GROUP: self.schema_group_args,
            EVENTHUB: self.eventhub_args,
            EVENTHUB_AUTHORIZATION_RULE: self.eventhub_rule_args,
            CONSUMER_GROUP: self.consumer_group_args,
        }

    def generate_resource_name(self, node: ResourceNode) -> str:
        if node.kind == NAMESPACE:
            return self.config.name
        # Entity names never contain "/", so every address maps to its own name.
        kind = node.kind.replace("_", "-")
        return "/".join((self.config.name, kind, *node.address[1:])).lower()

    def resolve_class(self, kind: str) -> type:
        module_name, class_name = RESOURCE_TYPES[kind].rsplit(".", 1)
        module = getattr(azure_native, module_name, None)
        if not module:
            raise ValueError(f"Azure module '{module_name}' not found for '{kind}'.")
        try:
            return getattr(module, class_name)
        except AttributeError:
            raise ValueError(
                f"Resource class '{class_name}' not found in module '{module_name}'."
            ) from None

    def _namespace_output(self) -> pulumi.Output:
        return self.resources[(NAMESPACE,)].name

    def _eventhub_output(self, node: ResourceNode) -> pulumi.Output:
        return self.resources[(EVENTHUB, node.eventhub_name)].name

    def namespace_args(self, node: ResourceNode) -> Dict[str, Any]:
        config = self.config
        sku = constraints.provider_sku(config.sku)
        args: Dict[str, Any] = {
            "resource_group_name": config.resource_group_name,
            "namespace_name": config.name,
            "sku": azure_native.eventhub.SkuArgs(name=sku, tier=sku, capacity=config.capacity),
            "zone_redundant": config.zone_redundant,
            "minimum_tls_version": config.minimum_tls_version,
            "public_network_access": "Enabled" if config.public_network_access_enabled else "Disabled",
            "disable_local_auth": not config.local_auth_enabled,
        }
        if config.auto_inflate_enabled:
            args["is_auto_inflate_enabled"] = True
            args["maximum_throughput_units"] = config.maximum_throughput_units
        if config.cluster_arm_id is not None:
            args["cluster_arm_id"] = config.cluster_arm_id
        if config.managed_identity_enabled:
            args["identity"] = azure_native.eventhub.IdentityArgs(type="SystemAssigned")
        return args

    def network_rule_set_args(self, node: ResourceNode) -> Dict[str, Any]:
        rules = node.config
        return {
            "resource_group_name": self.config.resource_group_name,
            "namespace_name": self._namespace_output(),
            "default_action": rules.default_action,
            "trusted_service_access_enabled": rules.trusted_service_access_enabled,
            "public_network_access": "Enabled"
            if self.config.public_network_access_enabled
            else "Disabled",
            "ip_rules": [
                azure_native.eventhub.NWRuleSetIpRulesArgs(ip_mask=ip_mask, action="Allow")
                for ip_mask in rules.ip_rules
            ],
            "virtual_network_rules": [
                azure_native.eventhub.NWRuleSetVirtualNetworkRulesArgs(
                    subnet=azure_native.eventhub.SubnetArgs(id=vnet_rule.subnet_id),
                    ignore_missing_vnet_service_endpoint=(
                        vnet_rule.ignore_missing_virtual_network_service_endpoint
                    ),
                )
                for vnet_rule in rules.virtual_network_rules
            ],
        }

    def namespace_rule_args(self, node: ResourceNode) -> Dict[str, Any]:
        return {
            "resource_group_name": self.config.resource_group_name,
            "namespace_name": self._namespace_output(),
            "authorization_rule_name": node.config.name,
            "rights": list(node.config.rights),
        }

    def schema_group_args(self, node: ResourceNode) -> Dict[str, Any]:
        group = node.config
        return {
            "resource_group_name": self.config.resource_group_name,
            "namespace_name": self._namespace_output(),
            "schema_group_name": group.name,
            "schema_compatibility": group.schema_compatibility,
            "schema_type": group.schema_type,
            "group_properties": dict(group.group_properties),
        }

    def eventhub_args(self, node: ResourceNode) -> Dict[str, Any]:
        eventhub = node.config
        args: Dict[str, Any] = {
            "resource_group_name": self.config.resource_group_name,
            "namespace_name": self._namespace_output(),
            "event_hub_name": eventhub.name,
            "partition_count": eventhub.partition_count,
            "message_retention_in_days": eventhub.message_retention,
            "status": eventhub.status,
        }
        capture = eventhub.capture_description
        if capture is not None:
            destination = capture.destination
            args["capture_description"] = azure_native.eventhub.CaptureDescriptionArgs(
                enabled=capture.enabled,
                encoding=capture.encoding,
                interval_in_seconds=capture.interval_in_seconds,
                size_limit_in_bytes=capture.size_limit_in_bytes,
                skip_empty_archives=capture.skip_empty_archives,
                destination=azure_native.eventhub.DestinationArgs(
                    name=destination.name,
                    archive_name_format=destination.archive_name_format,
                    blob_container=destination.blob_container_name,
                    storage_account_resource_id=destination.storage_account_id,
                ),
            )
        return args

    def eventhub_rule_args(self, node: ResourceNode) -> Dict[str, Any]:
        return {
            "resource_group_name": self.config.resource_group_name,
            "namespace_name": self._namespace_output(),
            "event_hub_name": self._eventhub_output(node),
            "authorization_rule_name": node.config.name,
            "rights": list(node.config.rights),
        }

    def consumer_group_args(self, node: ResourceNode) -> Dict[str, Any]:
        args = {
            "resource_group_name": self.config.resource_group_name,
            "namespace_name": self._namespace_output(),
            "event_hub_name": self._eventhub_output(node),
            "consumer_group_name": node.config.name,
        }
        if node.config.user_metadata is not None:
            args["user_metadata"] = node.config.user_metadata
        return args

    def resolve_args(self, node: ResourceNode, resource_class: type) -> Dict[str, Any]:
        args = self._args_builders[node.kind](node)

        # The resource classes only expose *args/**kwargs; the *Args input type
        # carries the real parameter list.
        args_class = getattr(
            inspect.getmodule(resource_class), f"{resource_class.__name__}Args", None
        )
        parameters = inspect.signature(args_class.__init__).parameters if args_class else {}

        if "tags" in parameters and self.config.tags:
            args.setdefault("tags", dict(self.config.tags))
        if "location" in parameters:
            args.setdefault("location", self.config.location)
        return args

    def build(self) -> Dict[Address, ProvisionedResource]:
        for node in self.graph.creation_order():
            resource_class = self.resolve_class(node.kind)
            resolved_args = self.resolve_args(node, resource_class)

            opts: Optional[pulumi.ResourceOptions] = None
            if node.parent is not None:
                opts = pulumi.ResourceOptions(depends_on=[self.resources[node.parent]])

            pulumi_name = self.generate_resource_name(node)
            pulumi.log.debug(f"DEBUG for '{pulumi_name}': final resolved_args => {resolved_args}")

            resource_instance = resource_class(pulumi_name, opts=opts, **resolved_args)
            self.resources[node.address] = resource_instance
            pulumi.log.info(f"Created resource: {pulumi_name} ({RESOURCE_TYPES[node.kind]})")

        return self.provisioned()

    def provisioned(self) -> Dict[Address, ProvisionedResource]:
        provisioned = {}
        for address, resource in self.resources.items():
            identity = resource.identity if address == (NAMESPACE,) else None
            provisioned[address] = ProvisionedResource(
                id=resource.id, name=resource.name, identity=identity
            )
        return provisioned
