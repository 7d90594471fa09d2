from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TypeGuard

# Values accepted in open-ended maps such as `with`, `env` and `secrets`
Value = str | int | float | bool | Sequence["Value"] | Mapping[str, "Value"]

SHELLS = ("bash", "pwsh", "python", "sh", "cmd", "powershell")

PERMISSION_SCOPES = (
    "actions",
    "checks",
    "contents",
    "deployments",
    "discussions",
    "id-token",
    "issues",
    "packages",
    "pages",
    "pull-requests",
    "repository-projects",
    "security-events",
    "statuses",
)
PERMISSION_LEVELS = ("read", "write", "none")
BLANKET_PERMISSIONS = ("read-all", "write-all")


class ValidationError(ValueError):
    """Raised when a workflow, job or step is structurally invalid"""


class PersistenceError(OSError):
    """Raised when a rendered workflow cannot be stored"""


def is_json_object(obj: object) -> TypeGuard[Mapping[str, object]]:
    """Checks if an object is a JSON object (YAML associative array)"""
    return isinstance(obj, Mapping)


def to_json_object(obj: object, location: str) -> Mapping[str, object]:
    """Checks if an object is a JSON object (YAML associative array)

    Args:
        obj: the object to check
        location: location of the object to use in exception message

    Returns:
        the same object

    Raises:
        ValidationError: if it's not a JSON object
    """
    if is_json_object(obj):
        return obj
    raise ValidationError(
        f"Expected an object at '{location}' but found {obj.__class__.__name__}"
    )


def is_json_array(obj: object) -> TypeGuard[Sequence[object]]:
    """Checks if an object is a JSON array

    Strings are sequences in Python but never arrays in YAML.
    """
    return isinstance(obj, Sequence) and not isinstance(obj, (str, bytes))


def to_json_array(obj: object, location: str) -> Sequence[object]:
    """Checks if an object is a JSON array

    Args:
        obj: the object to check
        location: location of the object to use in exception message

    Returns:
        the same object

    Raises:
        ValidationError: if it's not a JSON array
    """
    if is_json_array(obj):
        return obj
    raise ValidationError(
        f"Expected an array at '{location}' but found {obj.__class__.__name__}"
    )


def to_json_array_of_strings(obj: object, location: str) -> list[str]:
    """Checks if an object is a JSON array of strings

    Args:
        obj: the object to check
        location: location of the object to use in exception message

    Returns:
        the elements as a new list

    Raises:
        ValidationError: if it's not a JSON array of strings
    """
    array = to_json_array(obj, location)
    for i, element in enumerate(array):
        if not isinstance(element, str):
            raise ValidationError(
                f"Expected a string at '{location}[{i}]'"
                f" but found {element.__class__.__name__}"
            )

    return list(array)  # type: ignore


def to_string(obj: object, location: str) -> str:
    """Checks if an object is a JSON string

    Args:
        obj: the object to check
        location: location of the object to use in exception message

    Returns:
        the same object

    Raises:
        ValidationError: if it's not a JSON string
    """
    if isinstance(obj, str):
        return obj
    raise ValidationError(
        f"Expected a string at '{location}' but found {obj.__class__.__name__}"
    )


def check_shell(shell: str | None, location: str) -> None:
    """Checks that a shell, when given, is one GitHub Actions supports

    Raises:
        ValidationError: naming the offending value and the allowed shells
    """
    if shell and shell not in SHELLS:
        allowed = ", ".join(f"'{s}'" for s in SHELLS)
        raise ValidationError(
            f"Invalid shell specified at '{location}': {shell}."
            f" Allowed values are: {allowed}."
        )


def check_required(value: object, key: str, location: str) -> None:
    """Checks that a required property has a value

    Raises:
        ValidationError: if the value is missing or empty
    """
    if not value:
        raise ValidationError(f"The '{key}' property is required at '{location}'.")


def check_permissions(permissions: object, location: str) -> None:
    """Checks a job's permissions are a blanket shortcut or a scope map

    Raises:
        ValidationError: for unknown scopes or access levels
    """
    if isinstance(permissions, str):
        if permissions not in BLANKET_PERMISSIONS:
            raise ValidationError(
                f"Invalid permissions at '{location}': {permissions}."
                f" Expected one of {', '.join(BLANKET_PERMISSIONS)} or a map."
            )
        return

    for scope, level in to_json_object(permissions, location).items():
        if scope not in PERMISSION_SCOPES:
            raise ValidationError(
                f"Unknown permission scope at '{location}.{scope}'."
                f" Allowed scopes are: {', '.join(PERMISSION_SCOPES)}."
            )
        if level not in PERMISSION_LEVELS:
            raise ValidationError(
                f"Invalid access at '{location}.{scope}': {level}."
                f" Allowed values are: {', '.join(PERMISSION_LEVELS)}."
            )
