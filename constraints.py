# constraints.py
"""
Tier-dependent limits for Event Hubs namespaces.

Every rule here is a pure function of the SKU name. Adding a tier means
adding one row to SKU_LIMITS and nothing else.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class SkuLimits:
    capacity: Tuple[int, int]
    partition_count: Tuple[int, int]
    message_retention: Tuple[int, int]
    auto_inflate: bool
    capture: bool
    zone_redundancy: bool
    schema_registry: bool
    network_rules: bool
    # SKU name the resource provider accepts on the namespace itself.
    provider_sku: str
    dedicated_cluster: bool = False


SKU_LIMITS = {
    "Basic": SkuLimits(
        capacity=(1, 1),
        partition_count=(1, 32),
        message_retention=(1, 1),
        auto_inflate=False,
        capture=False,
        zone_redundancy=False,
        schema_registry=False,
        network_rules=False,
        provider_sku="Basic",
    ),
    "Standard": SkuLimits(
        capacity=(1, 20),
        partition_count=(1, 32),
        message_retention=(1, 7),
        auto_inflate=True,
        capture=True,
        zone_redundancy=True,
        schema_registry=True,
        network_rules=True,
        provider_sku="Standard",
    ),
    "Premium": SkuLimits(
        capacity=(1, 16),
        partition_count=(1, 100),
        message_retention=(1, 90),
        auto_inflate=False,
        capture=True,
        zone_redundancy=True,
        schema_registry=True,
        network_rules=True,
        provider_sku="Premium",
    ),
    "Dedicated": SkuLimits(
        capacity=(1, 10),
        partition_count=(1, 1024),
        message_retention=(1, 90),
        auto_inflate=False,
        capture=True,
        zone_redundancy=True,
        schema_registry=True,
        network_rules=True,
        provider_sku="Standard",
        dedicated_cluster=True,
    ),
}

TLS_VERSIONS = frozenset({"1.0", "1.1", "1.2"})

CAPTURE_ENCODINGS = frozenset({"Avro", "AvroDeflate"})
CAPTURE_INTERVAL_SECONDS = (60, 900)
CAPTURE_SIZE_LIMIT_BYTES = (10 * 1024 * 1024, 500 * 1024 * 1024)
CAPTURE_DESTINATION_NAME = "EventHubArchive.AzureBlockBlob"
ARCHIVE_NAME_PLACEHOLDERS = (
    "{Namespace}",
    "{EventHub}",
    "{PartitionId}",
    "{Year}",
    "{Month}",
    "{Day}",
    "{Hour}",
    "{Minute}",
    "{Second}",
)

# Created by the service for every event hub.
DEFAULT_CONSUMER_GROUP = "$Default"


def allowed_skus() -> FrozenSet[str]:
    return frozenset(SKU_LIMITS)


def _limits(sku: str) -> Optional[SkuLimits]:
    # Exact match only, "standard" is not a SKU.
    return SKU_LIMITS.get(sku)


def capacity_range(sku: str) -> Tuple[int, int]:
    return SKU_LIMITS[sku].capacity


def partition_count_range(sku: str) -> Tuple[int, int]:
    return SKU_LIMITS[sku].partition_count


def message_retention_range(sku: str) -> Tuple[int, int]:
    return SKU_LIMITS[sku].message_retention


def supports_auto_inflate(sku: str) -> bool:
    limits = _limits(sku)
    return bool(limits and limits.auto_inflate)


def supports_capture(sku: str) -> bool:
    limits = _limits(sku)
    return bool(limits and limits.capture)


def supports_zone_redundancy(sku: str) -> bool:
    limits = _limits(sku)
    return bool(limits and limits.zone_redundancy)


def supports_schema_registry(sku: str) -> bool:
    limits = _limits(sku)
    return bool(limits and limits.schema_registry)


def supports_network_rules(sku: str) -> bool:
    limits = _limits(sku)
    return bool(limits and limits.network_rules)


def requires_dedicated_cluster(sku: str) -> bool:
    limits = _limits(sku)
    return bool(limits and limits.dedicated_cluster)


def provider_sku(sku: str) -> str:
    # Dedicated is a cluster, the namespaces inside it are Standard.
    return SKU_LIMITS[sku].provider_sku


def allowed_tls_versions() -> FrozenSet[str]:
    return TLS_VERSIONS


def in_range(value: int, bounds: Tuple[int, int]) -> bool:
    low, high = bounds
    return low <= value <= high
