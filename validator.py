# validator.py
"""
Checks a normalized NamespaceConfig against the SKU constraint tables.

Checks run in a fixed order and the first violation wins; callers only ever
act on one error class per run. Nothing here touches Pulumi resources, so a
bad configuration fails `pulumi preview` before anything is registered.
"""

from itertools import chain
from typing import Callable, Iterable, Iterator, Optional, Sequence

import pulumi

import constraints
from config import AuthorizationRule, EventHub, NamespaceConfig
from exceptions import (
    DuplicateName,
    EventHubsConfigError,
    InvalidAuthorizationRule,
    InvalidCapacity,
    InvalidCaptureConfig,
    InvalidEventHubConfig,
    InvalidSku,
    InvalidTlsVersion,
    UnsupportedFeature,
)

Violations = Iterator[EventHubsConfigError]


def check_sku(config: NamespaceConfig) -> Violations:
    if config.sku not in constraints.allowed_skus():
        yield InvalidSku(
            "sku", f"must be one of {sorted(constraints.allowed_skus())}", config.sku
        )


def check_capacity(config: NamespaceConfig) -> Violations:
    low, high = constraints.capacity_range(config.sku)
    if not constraints.in_range(config.capacity, (low, high)):
        yield InvalidCapacity(
            "capacity", f"must be between {low} and {high} for sku {config.sku}", config.capacity
        )


def check_tls_version(config: NamespaceConfig) -> Violations:
    allowed = constraints.allowed_tls_versions()
    if config.minimum_tls_version not in allowed:
        yield InvalidTlsVersion(
            "minimum_tls_version", f"must be one of {sorted(allowed)}", config.minimum_tls_version
        )


def check_auto_inflate(config: NamespaceConfig) -> Violations:
    maximum = config.maximum_throughput_units
    if not config.auto_inflate_enabled:
        if maximum is not None:
            yield UnsupportedFeature(
                "maximum_throughput_units", "requires auto_inflate_enabled", maximum
            )
        return

    if not constraints.supports_auto_inflate(config.sku):
        yield UnsupportedFeature("auto_inflate_enabled", "is not available", True, sku=config.sku)
        return

    if maximum is None:
        yield InvalidCapacity(
            "maximum_throughput_units", "is required when auto_inflate_enabled is true"
        )
        return

    low, high = constraints.capacity_range(config.sku)
    if not constraints.in_range(maximum, (max(low, config.capacity), high)):
        yield InvalidCapacity(
            "maximum_throughput_units",
            f"must be between capacity ({config.capacity}) and {high}",
            maximum,
        )


def check_zone_redundancy(config: NamespaceConfig) -> Violations:
    if config.zone_redundant and not constraints.supports_zone_redundancy(config.sku):
        yield UnsupportedFeature("zone_redundant", "is not available", True, sku=config.sku)


def check_namespace_features(config: NamespaceConfig) -> Violations:
    if constraints.requires_dedicated_cluster(config.sku):
        if config.cluster_arm_id is None:
            yield UnsupportedFeature(
                "cluster_arm_id", "is required to place the namespace on a cluster", sku=config.sku
            )
    elif config.cluster_arm_id is not None:
        yield UnsupportedFeature(
            "cluster_arm_id", "is only available", config.cluster_arm_id, sku=config.sku
        )

    if config.network_rule_set is not None and not constraints.supports_network_rules(config.sku):
        yield UnsupportedFeature("enable_network_rules", "is not available", True, sku=config.sku)

    if config.schema_groups and not constraints.supports_schema_registry(config.sku):
        yield UnsupportedFeature(
            "schema_groups",
            "are not available",
            [group.name for group in config.schema_groups],
            sku=config.sku,
        )

    for flag in config.requested_side_features:
        yield UnsupportedFeature(flag, "is not managed by this program", True)


def check_eventhub_limits(config: NamespaceConfig) -> Violations:
    partitions = constraints.partition_count_range(config.sku)
    retention = constraints.message_retention_range(config.sku)
    for eventhub in config.eventhubs:
        if not constraints.in_range(eventhub.partition_count, partitions):
            yield InvalidEventHubConfig(
                f"eventhubs.{eventhub.name}.partition_count",
                f"must be between {partitions[0]} and {partitions[1]} for sku {config.sku}",
                eventhub.partition_count,
            )
        if not constraints.in_range(eventhub.message_retention, retention):
            yield InvalidEventHubConfig(
                f"eventhubs.{eventhub.name}.message_retention",
                f"must be between {retention[0]} and {retention[1]} days for sku {config.sku}",
                eventhub.message_retention,
            )


def _capture_violations(config: NamespaceConfig, eventhub: EventHub) -> Violations:
    capture = eventhub.capture_description
    path = f"eventhubs.{eventhub.name}.capture_description"

    if not constraints.supports_capture(config.sku):
        yield UnsupportedFeature(f"{path}.enabled", "is not available", True, sku=config.sku)
        return

    if capture.encoding not in constraints.CAPTURE_ENCODINGS:
        yield InvalidCaptureConfig(
            f"{path}.encoding",
            f"must be one of {sorted(constraints.CAPTURE_ENCODINGS)}",
            capture.encoding,
        )

    low, high = constraints.CAPTURE_INTERVAL_SECONDS
    if not constraints.in_range(capture.interval_in_seconds, (low, high)):
        yield InvalidCaptureConfig(
            f"{path}.interval_in_seconds",
            f"must be between {low} and {high}",
            capture.interval_in_seconds,
        )

    low, high = constraints.CAPTURE_SIZE_LIMIT_BYTES
    if not constraints.in_range(capture.size_limit_in_bytes, (low, high)):
        yield InvalidCaptureConfig(
            f"{path}.size_limit_in_bytes",
            f"must be between {low} and {high}",
            capture.size_limit_in_bytes,
        )

    destination = capture.destination
    if destination.name != constraints.CAPTURE_DESTINATION_NAME:
        yield InvalidCaptureConfig(
            f"{path}.destination.name",
            f"must be '{constraints.CAPTURE_DESTINATION_NAME}'",
            destination.name,
        )

    missing = [
        placeholder
        for placeholder in constraints.ARCHIVE_NAME_PLACEHOLDERS
        if placeholder not in destination.archive_name_format
    ]
    if missing:
        yield InvalidCaptureConfig(
            f"{path}.destination.archive_name_format",
            f"is missing placeholders {missing}",
            destination.archive_name_format,
        )


def check_capture(config: NamespaceConfig) -> Violations:
    for eventhub in config.eventhubs:
        capture = eventhub.capture_description
        if capture is not None and capture.enabled:
            yield from _capture_violations(config, eventhub)


def _duplicates(names: Iterable[str]) -> Sequence[str]:
    # Event Hubs names are case-insensitive: "Orders" and "orders" are the same entity.
    seen = set()
    duplicates = []
    for name in names:
        folded = name.casefold()
        if folded in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(folded)
    return duplicates


def check_unique_names(config: NamespaceConfig) -> Violations:
    scopes = [
        ("eventhubs", [eventhub.name for eventhub in config.eventhubs]),
        ("schema_groups", [group.name for group in config.schema_groups]),
        (
            "namespace_authorization_rules",
            [rule.name for rule in config.namespace_authorization_rules],
        ),
    ]
    for eventhub in config.eventhubs:
        scopes.append(
            (
                f"eventhubs.{eventhub.name}.authorization_rules",
                [rule.name for rule in eventhub.authorization_rules],
            )
        )
        scopes.append(
            (
                f"eventhubs.{eventhub.name}.consumer_groups",
                [group.name for group in eventhub.consumer_groups],
            )
        )

    for scope, names in scopes:
        duplicates = _duplicates(names)
        if duplicates:
            yield DuplicateName(scope, "declares the same name more than once", duplicates[0])

    for eventhub in config.eventhubs:
        for group in eventhub.consumer_groups:
            if group.name.casefold() == constraints.DEFAULT_CONSUMER_GROUP.casefold():
                yield DuplicateName(
                    f"eventhubs.{eventhub.name}.consumer_groups",
                    "redeclares the consumer group every event hub already has",
                    group.name,
                )


def _rule_violations(rule: AuthorizationRule, scope: str) -> Violations:
    if not rule.rights:
        yield InvalidAuthorizationRule(
            f"{scope}.{rule.name}", "must grant at least one of listen, send or manage"
        )
    elif rule.manage and not (rule.listen and rule.send):
        yield InvalidAuthorizationRule(
            f"{scope}.{rule.name}", "grants manage, which also requires listen and send"
        )


def check_authorization_rules(config: NamespaceConfig) -> Violations:
    for rule in config.namespace_authorization_rules:
        yield from _rule_violations(rule, "namespace_authorization_rules")
    for eventhub in config.eventhubs:
        for rule in eventhub.authorization_rules:
            yield from _rule_violations(rule, f"eventhubs.{eventhub.name}.authorization_rules")


CHECKS: Sequence[Callable[[NamespaceConfig], Violations]] = (
    check_sku,
    check_capacity,
    check_tls_version,
    check_auto_inflate,
    check_zone_redundancy,
    check_namespace_features,
    check_eventhub_limits,
    check_capture,
    check_unique_names,
    check_authorization_rules,
)


def find_violation(config: NamespaceConfig) -> Optional[EventHubsConfigError]:
    """Return the first violation in check order, or None if the config is valid."""
    violations = chain.from_iterable(check(config) for check in CHECKS)
    violation = next(violations, None)
    if violation is not None:
        pulumi.log.debug(f"Configuration for '{config.name}' rejected: {violation}")
    return violation


def validate(config: NamespaceConfig) -> NamespaceConfig:
    violation = find_violation(config)
    if violation is not None:
        raise violation
    return config
