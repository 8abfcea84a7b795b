# exceptions.py
"""
Errors raised while turning a namespace configuration into resources.

All of them describe a defect in the caller's input, are raised before any
resource is registered with Pulumi, and are never worth retrying. Provider
errors are not wrapped here; Pulumi surfaces those itself.
"""

from typing import Any, Dict, Optional

_UNSET = object()


class EventHubsConfigError(ValueError):
    """Base class for configuration errors.

    The message always names the rejected field and, when known, the value,
    so callers can match on the text without parsing anything.
    """

    label = "invalid configuration"

    def __init__(self, field: str, reason: str, value: Any = _UNSET):
        self.field = field
        self.reason = reason
        self.value = None if value is _UNSET else value
        message = f"{self.label}: '{field}' {reason}"
        if value is not _UNSET:
            message += f" (got {value!r})"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "field": self.field,
            "reason": self.reason,
            "value": self.value,
        }


class MalformedConfig(EventHubsConfigError):
    label = "malformed configuration, invalid shape"


class InvalidSku(EventHubsConfigError):
    label = "invalid sku"


class InvalidCapacity(EventHubsConfigError):
    label = "invalid capacity"


class InvalidTlsVersion(EventHubsConfigError):
    label = "invalid minimum TLS version"


class UnsupportedFeature(EventHubsConfigError):
    label = "unsupported feature, invalid combination"

    def __init__(self, field: str, reason: str, value: Any = _UNSET, sku: Optional[str] = None):
        if sku is not None:
            reason = f"{reason} (sku {sku})"
        super().__init__(field, reason, value)
        self.sku = sku


class InvalidEventHubConfig(EventHubsConfigError):
    label = "invalid event hub configuration"


class InvalidCaptureConfig(EventHubsConfigError):
    label = "invalid capture configuration"


class DuplicateName(EventHubsConfigError):
    label = "duplicate name, invalid configuration"


class InvalidAuthorizationRule(EventHubsConfigError):
    label = "invalid authorization rule"
