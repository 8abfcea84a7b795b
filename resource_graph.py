# resource_graph.py
"""
Expands a validated NamespaceConfig into resource nodes with parent edges.

The namespace is the only root. Event hubs, namespace-level authorization
rules, schema groups and the network rule set hang off it; consumer groups
and event-hub-level authorization rules hang off their event hub. Building
the graph is a pure transform, the same config always yields the same graph.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from config import NamespaceConfig

NAMESPACE = "namespace"
NETWORK_RULE_SET = "network_rule_set"
NAMESPACE_AUTHORIZATION_RULE = "namespace_authorization_rule"
SCHEMA_GROUP = "schema_group"
EVENTHUB = "eventhub"
EVENTHUB_AUTHORIZATION_RULE = "eventhub_authorization_rule"
CONSUMER_GROUP = "consumer_group"

Address = Tuple[str, ...]


@dataclass(frozen=True)
class ResourceNode:
    """One resource to provision.

    `address` is unique across the graph and, for resources that live under
    an event hub, keeps the event hub's name so leaf names may repeat across
    event hubs without clashing.
    """

    kind: str
    key: str
    address: Address
    config: Any
    parent: Optional[Address] = None

    @property
    def eventhub_name(self) -> Optional[str]:
        if self.kind in (EVENTHUB_AUTHORIZATION_RULE, CONSUMER_GROUP):
            return self.address[1]
        return None


@dataclass(frozen=True)
class ProvisionedResource:
    """What the provider assigned to one node; plain values or pulumi Outputs."""

    id: Any
    name: Any
    identity: Any = None


@dataclass
class ResourceGraph:
    nodes: Dict[Address, ResourceNode] = field(default_factory=dict)

    def add(self, node: ResourceNode) -> ResourceNode:
        if node.address in self.nodes:
            raise ValueError(f"Node '{'/'.join(node.address)}' already in graph")
        if node.parent is not None and node.parent not in self.nodes:
            raise ValueError(
                f"Parent '{'/'.join(node.parent)}' of '{'/'.join(node.address)}' not in graph"
            )
        self.nodes[node.address] = node
        return node

    @property
    def root(self) -> ResourceNode:
        return self.nodes[(NAMESPACE,)]

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    def of_kind(self, kind: str) -> List[ResourceNode]:
        return [node for node in self.nodes.values() if node.kind == kind]

    def children(self, address: Address) -> List[ResourceNode]:
        return [node for node in self.nodes.values() if node.parent == address]

    def edges(self) -> List[Tuple[Address, Address]]:
        return [
            (node.parent, node.address) for node in self.nodes.values() if node.parent is not None
        ]

    def depth(self, address: Address) -> int:
        depth = 0
        parent = self.nodes[address].parent
        while parent is not None:
            depth += 1
            parent = self.nodes[parent].parent
        return depth

    def waves(self) -> List[List[ResourceNode]]:
        """Group nodes into creation waves.

        Every node's parent sits in an earlier wave, so the nodes of one wave
        can be created in parallel. Order inside a wave follows declaration
        order.
        """
        waves: List[List[ResourceNode]] = []
        for node in self.nodes.values():
            depth = self.depth(node.address)
            while len(waves) <= depth:
                waves.append([])
            waves[depth].append(node)
        return waves

    def creation_order(self) -> List[ResourceNode]:
        return [node for wave in self.waves() for node in wave]

    def destruction_order(self) -> List[ResourceNode]:
        return list(reversed(self.creation_order()))


def build_graph(config: NamespaceConfig) -> ResourceGraph:
    """Expand an already validated configuration, no checks are repeated here."""
    graph = ResourceGraph()
    namespace = graph.add(
        ResourceNode(kind=NAMESPACE, key=config.name, address=(NAMESPACE,), config=config)
    )

    if config.network_rule_set is not None:
        graph.add(
            ResourceNode(
                kind=NETWORK_RULE_SET,
                key="default",
                address=(NETWORK_RULE_SET,),
                config=config.network_rule_set,
                parent=namespace.address,
            )
        )

    for rule in config.namespace_authorization_rules:
        graph.add(
            ResourceNode(
                kind=NAMESPACE_AUTHORIZATION_RULE,
                key=rule.name,
                address=(NAMESPACE_AUTHORIZATION_RULE, rule.name),
                config=rule,
                parent=namespace.address,
            )
        )

    for group in config.schema_groups:
        graph.add(
            ResourceNode(
                kind=SCHEMA_GROUP,
                key=group.name,
                address=(SCHEMA_GROUP, group.name),
                config=group,
                parent=namespace.address,
            )
        )

    for eventhub in config.eventhubs:
        hub = graph.add(
            ResourceNode(
                kind=EVENTHUB,
                key=eventhub.name,
                address=(EVENTHUB, eventhub.name),
                config=eventhub,
                parent=namespace.address,
            )
        )
        for rule in eventhub.authorization_rules:
            graph.add(
                ResourceNode(
                    kind=EVENTHUB_AUTHORIZATION_RULE,
                    key=rule.name,
                    address=(EVENTHUB_AUTHORIZATION_RULE, eventhub.name, rule.name),
                    config=rule,
                    parent=hub.address,
                )
            )
        for group in eventhub.consumer_groups:
            graph.add(
                ResourceNode(
                    kind=CONSUMER_GROUP,
                    key=group.name,
                    address=(CONSUMER_GROUP, eventhub.name, group.name),
                    config=group,
                    parent=hub.address,
                )
            )

    return graph
