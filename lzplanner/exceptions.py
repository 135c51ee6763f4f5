"""
Custom Exception Hierarchy for Landing Zone Planner

Every error raised while resolving scope, querying the existence inventory or
building the deployment graph derives from ``LandingZonePlannerError``. Each
error aborts the compilation of a single (account, region) pair only; sibling
pairs keep compiling.
"""

from typing import Any, Dict, List, Optional


class LandingZonePlannerError(Exception):
    """
    Base exception class for all Landing Zone Planner errors.

    Provides structured error information including context, error codes,
    and optional recovery suggestions.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recovery_suggestion: Optional[str] = None,
    ) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context
            cause: Optional underlying exception that caused this error
            recovery_suggestion: Optional suggestion for error recovery
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.recovery_suggestion = recovery_suggestion

    def __str__(self) -> str:
        """Return a formatted error message with context."""
        result = self.message
        if self.error_code:
            result = f"[{self.error_code}] {result}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            result += f" (context: {context_str})"
        if self.cause:
            result += f" (caused by: {self.cause})"
        if self.recovery_suggestion:
            result += f" (suggestion: {self.recovery_suggestion})"
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "recovery_suggestion": self.recovery_suggestion,
        }


class ConfigError(LandingZonePlannerError):
    """Configuration loading or validation error."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs: Any) -> None:
        context = kwargs.get("context", {})
        if path:
            context["path"] = path
        kwargs["context"] = context
        kwargs.setdefault("error_code", "CONFIG_ERROR")
        super().__init__(message, **kwargs)


# Scope resolution
class ScopeConfigurationError(LandingZonePlannerError):
    """Raised when a deployment target references an unknown account or OU."""

    def __init__(
        self,
        message: str,
        account: Optional[str] = None,
        organizational_unit: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if account:
            context["account"] = account
        if organizational_unit:
            context["organizational_unit"] = organizational_unit
        kwargs["context"] = context
        kwargs.setdefault("error_code", "SCOPE_CONFIGURATION_ERROR")
        kwargs.setdefault(
            "recovery_suggestion",
            "Check the names against accounts-config.yaml and organization-config.yaml",
        )
        super().__init__(message, **kwargs)


# Partitioning and graph construction
class ResourceOrphanError(LandingZonePlannerError):
    """Raised when a new resource belongs to a VPC that is not in scope."""

    def __init__(
        self,
        message: str,
        vpc_name: Optional[str] = None,
        resource_key: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if vpc_name:
            context["vpc_name"] = vpc_name
        if resource_key:
            context["resource_key"] = resource_key
        kwargs["context"] = context
        kwargs.setdefault("error_code", "RESOURCE_ORPHAN")
        super().__init__(message, **kwargs)


class CycleDetectedError(LandingZonePlannerError):
    """Raised when the deployment unit graph contains a cycle."""

    def __init__(self, message: str, cycle: Optional[List[str]] = None, **kwargs: Any) -> None:
        self.cycle = list(cycle or [])
        context = kwargs.get("context", {})
        if self.cycle:
            context["cycle"] = " -> ".join(self.cycle)
        kwargs["context"] = context
        kwargs.setdefault("error_code", "CYCLE_DETECTED")
        super().__init__(message, **kwargs)


class UnitReferenceError(LandingZonePlannerError):
    """Raised when a unit declares a dependency on a unit that does not exist."""

    def __init__(
        self,
        message: str,
        unit: Optional[str] = None,
        reference: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if unit:
            context["unit"] = unit
        if reference:
            context["reference"] = reference
        kwargs["context"] = context
        kwargs.setdefault("error_code", "UNIT_REFERENCE_UNKNOWN")
        super().__init__(message, **kwargs)


class UnitFrozenError(LandingZonePlannerError):
    """Raised when an emitted deployment unit is modified."""

    def __init__(self, message: str, unit: Optional[str] = None, **kwargs: Any) -> None:
        context = kwargs.get("context", {})
        if unit:
            context["unit"] = unit
        kwargs["context"] = context
        kwargs.setdefault("error_code", "UNIT_FROZEN")
        super().__init__(message, **kwargs)


# Existence inventory
class InventoryError(LandingZonePlannerError):
    """Base class for existence inventory errors."""

    pass


class InventoryLoadError(InventoryError):
    """Raised when an inventory snapshot cannot be read or parsed."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs: Any) -> None:
        context = kwargs.get("context", {})
        if path:
            context["path"] = path
        kwargs["context"] = context
        kwargs.setdefault("error_code", "INVENTORY_LOAD_FAILED")
        super().__init__(message, **kwargs)


class InventoryLookupError(InventoryError):
    """Raised when a lookup is missing the keys its resource kind requires."""

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        missing_keys: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if kind:
            context["kind"] = kind
        if missing_keys:
            context["missing_keys"] = ", ".join(missing_keys)
        kwargs["context"] = context
        kwargs.setdefault("error_code", "INVENTORY_LOOKUP_INVALID")
        super().__init__(message, **kwargs)


class InventoryLookupAmbiguity(InventoryError):
    """Raised when more than one inventory record matches a lookup."""

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        match_count: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if kind:
            context["kind"] = kind
        if match_count is not None:
            context["match_count"] = match_count
        kwargs["context"] = context
        kwargs.setdefault("error_code", "INVENTORY_LOOKUP_AMBIGUOUS")
        kwargs.setdefault(
            "recovery_suggestion",
            "Remove duplicate records from the inventory snapshot",
        )
        super().__init__(message, **kwargs)


class InventoryContextError(InventoryError):
    """Raised when an oracle bound to one environment is used for another."""

    def __init__(
        self,
        message: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if expected:
            context["expected"] = expected
        if actual:
            context["actual"] = actual
        kwargs["context"] = context
        kwargs.setdefault("error_code", "INVENTORY_CONTEXT_MISMATCH")
        super().__init__(message, **kwargs)
