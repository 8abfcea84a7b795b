"""Shared configuration fixtures for the Event Hubs tests."""

import copy

import pytest

from normalizer import normalize

STORAGE_ACCOUNT_ID = (
    "/subscriptions/test/resourceGroups/test/providers/"
    "Microsoft.Storage/storageAccounts/teststorage"
)

ARCHIVE_NAME_FORMAT = (
    "{Namespace}/{EventHub}/{PartitionId}/{Year}/{Month}/{Day}/{Hour}/{Minute}/{Second}"
)

STANDARD_CONFIG = {
    "resource_group_name": "rg-eh-test-abc123",
    "location": "East US",
    "location_short": "eus",
    "environment": "test",
    "custom_name": "abc123",
    "sku": "Standard",
    "capacity": 1,
    "minimum_tls_version": "1.2",
    "public_network_access_enabled": True,
    "local_auth_enabled": True,
    "enable_managed_identity": True,
    "eventhubs": [
        {
            "name": "test-eventhub",
            "authorization_rules": [
                {"name": "test-eh-rule", "listen": True, "send": True, "manage": False},
            ],
            "consumer_groups": [
                {"name": "test-consumer-group", "user_metadata": "test metadata"},
            ],
            "partition_count": 2,
            "message_retention": 1,
            "status": "Active",
        }
    ],
    "schema_groups": {
        "test-schema-group": {
            "schema_compatibility": "Forward",
            "schema_type": "Avro",
            "group_properties": {"serdes.format": "avro"},
        }
    },
    "namespace_authorization_rules": [
        {"name": "test-namespace-rule", "listen": True, "send": True, "manage": False},
    ],
    "enable_network_rules": False,
    "enable_private_endpoint": False,
    "enable_diagnostic_settings": False,
    "enable_policy_assignments": False,
    "enable_custom_policies": False,
    "enable_policy_initiative": False,
    "enable_resource_lock": False,
}

PREMIUM_CONFIG = {
    "resource_group_name": "rg-eh-premium-test-abc123",
    "location": "East US",
    "location_short": "eus",
    "environment": "test",
    "custom_name": "premium-abc123",
    "sku": "Premium",
    "capacity": 2,
    "zone_redundant": False,
    "minimum_tls_version": "1.2",
    "enable_managed_identity": True,
    "eventhubs": [
        {
            "name": "premium-eventhub",
            "partition_count": 4,
            "message_retention": 7,
            "capture_description": {
                "enabled": True,
                "encoding": "Avro",
                "interval_in_seconds": 300,
                "size_limit_in_bytes": 314572800,
                "skip_empty_archives": True,
                "destination": {
                    "name": "EventHubArchive.AzureBlockBlob",
                    "archive_name_format": ARCHIVE_NAME_FORMAT,
                    "blob_container_name": "eventhub-capture",
                    "storage_account_id": STORAGE_ACCOUNT_ID,
                },
            },
        }
    ],
}


@pytest.fixture
def standard_raw():
    """Raw configuration of the Standard tier scenario, safe to mutate."""
    return copy.deepcopy(STANDARD_CONFIG)


@pytest.fixture
def premium_raw():
    """Raw configuration of the Premium tier scenario with capture, safe to mutate."""
    return copy.deepcopy(PREMIUM_CONFIG)


@pytest.fixture
def minimal_raw():
    return {
        "resource_group_name": "rg-test",
        "location": "East US",
        "location_short": "eus",
        "environment": "test",
        "custom_name": "test",
    }


@pytest.fixture
def standard_config(standard_raw):
    return normalize(standard_raw)


@pytest.fixture
def premium_config(premium_raw):
    return normalize(premium_raw)
