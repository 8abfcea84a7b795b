# outputs.py
"""
Builds the stack outputs from the graph and what the provider assigned.

Maps are keyed by the logical name declared in the configuration. Consumer
groups and event hub authorization rules are flattened across event hubs;
every entry records its event hub. The first declaration of a leaf name is
keyed by that name; a later event hub reusing it gets "<eventhub>/<name>".
So adding an event hub never renames the keys of the ones declared before it.
"""

from typing import Any, Dict, List, Mapping

from resource_graph import (
    CONSUMER_GROUP,
    EVENTHUB,
    EVENTHUB_AUTHORIZATION_RULE,
    NAMESPACE_AUTHORIZATION_RULE,
    SCHEMA_GROUP,
    Address,
    ProvisionedResource,
    ResourceGraph,
    ResourceNode,
)


def _flattened_keys(nodes: List[ResourceNode]) -> Dict[Address, str]:
    keys: Dict[Address, str] = {}
    taken = set()
    for node in nodes:
        key = node.key if node.key not in taken else f"{node.eventhub_name}/{node.key}"
        taken.add(node.key)
        keys[node.address] = key
    return keys


def _entry(node: ResourceNode, provisioned: Mapping[Address, ProvisionedResource]) -> Dict[str, Any]:
    resource = provisioned[node.address]
    return {"id": resource.id, "name": resource.name}


def project_outputs(
    graph: ResourceGraph, provisioned: Mapping[Address, ProvisionedResource]
) -> Dict[str, Any]:
    config = graph.root.config
    namespace = provisioned[graph.root.address]

    eventhubs = {}
    for node in graph.of_kind(EVENTHUB):
        eventhub = node.config
        capture = eventhub.capture_description
        eventhubs[node.key] = {
            **_entry(node, provisioned),
            "partition_count": eventhub.partition_count,
            "message_retention": eventhub.message_retention,
            "status": eventhub.status,
            "capture_enabled": bool(capture and capture.enabled),
        }

    consumer_group_nodes = graph.of_kind(CONSUMER_GROUP)
    consumer_group_keys = _flattened_keys(consumer_group_nodes)
    consumer_groups = {
        consumer_group_keys[node.address]: {
            **_entry(node, provisioned),
            "eventhub_name": node.eventhub_name,
            "user_metadata": node.config.user_metadata,
        }
        for node in consumer_group_nodes
    }

    rule_nodes = graph.of_kind(EVENTHUB_AUTHORIZATION_RULE)
    rule_keys = _flattened_keys(rule_nodes)
    eventhub_rules = {
        rule_keys[node.address]: {
            **_entry(node, provisioned),
            "eventhub_name": node.eventhub_name,
            "rights": list(node.config.rights),
        }
        for node in rule_nodes
    }

    namespace_rules = {
        node.key: {**_entry(node, provisioned), "rights": list(node.config.rights)}
        for node in graph.of_kind(NAMESPACE_AUTHORIZATION_RULE)
    }

    schema_groups = {
        node.key: {
            **_entry(node, provisioned),
            "schema_compatibility": node.config.schema_compatibility,
            "schema_type": node.config.schema_type,
        }
        for node in graph.of_kind(SCHEMA_GROUP)
    }

    return {
        "eventhubs_namespace_id": namespace.id,
        "eventhubs_namespace_name": namespace.name,
        "eventhubs_sku": config.sku,
        # Reported as text, matching how the provider echoes it back.
        "eventhubs_capacity": str(config.capacity),
        "eventhubs_identity": namespace.identity if config.managed_identity_enabled else None,
        "eventhubs_managed_identity_enabled": config.managed_identity_enabled,
        "eventhubs": eventhubs,
        "consumer_groups": consumer_groups,
        "schema_groups": schema_groups,
        "eventhubs_namespace_auth_rules": namespace_rules,
        "eventhub_authorization_rules": eventhub_rules,
    }
