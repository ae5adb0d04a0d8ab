"""Template Resolver - path placeholder reconciliation.

Action paths may embed ``{{name}}`` placeholders. Values come from the
payload (shallow) and from explicit path variables, explicit winning.
Payload fields consumed by the path are removed from a copy of the
payload so the same value is not sent twice.

Known sharp edge: a present but falsy value (``0``, ``False``, ``""``)
counts as missing, both in the existence check and when folding payload
fields into the path variables.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from .errors import MissingVariableError
from .types import TemplateResolution

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def stringify_path_value(value: Any) -> str:
    """Render a path variable the way it appears in a URL."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def extract_placeholders(path: str) -> List[str]:
    """Return placeholder names in order of first appearance."""
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(path)))


def replace_path_variables(path: str, variables: Dict[str, Any]) -> str:
    """
    Substitute every placeholder in ``path``.

    Raises:
        MissingVariableError: Listing every placeholder without a value
    """
    missing = [name for name in extract_placeholders(path) if not variables.get(name)]
    if missing:
        raise MissingVariableError(missing)

    return PLACEHOLDER_PATTERN.sub(
        lambda match: stringify_path_value(variables[match.group(1)]),
        path,
    )


def resolve_template_variables(
    action_path: str,
    data: Any,
    path_variables: Optional[Dict[str, Any]] = None,
) -> TemplateResolution:
    """
    Resolve template variables in a path and prepare data for execution.

    Args:
        action_path: Path template, e.g. ``/api/users/{{userId}}``
        data: Request payload; only mappings contribute variables
        path_variables: Explicit values, taking precedence over the payload

    Returns:
        TemplateResolution with the final path, the cleaned payload copy and
        every variable used for substitution

    Raises:
        MissingVariableError: Before any substitution, if a placeholder has
            no value in the merged pool
    """
    explicit = dict(path_variables or {})
    required = extract_placeholders(action_path)

    if not required:
        return TemplateResolution(
            resolved_path=action_path,
            cleaned_data=data,
        )

    payload = data if isinstance(data, Mapping) else {}
    pool = {**payload, **explicit}

    missing = [name for name in required if not pool.get(name)]
    if missing:
        logger.warning(f"Unresolved path variables for '{action_path}': {missing}")
        raise MissingVariableError(missing)

    cleaned_data = data
    resolved = dict(explicit)
    if isinstance(data, Mapping):
        cleaned_data = dict(data)
        for name in required:
            if cleaned_data.get(name) and not explicit.get(name):
                resolved[name] = cleaned_data.pop(name)

    return TemplateResolution(
        resolved_path=replace_path_variables(action_path, resolved),
        cleaned_data=cleaned_data,
        resolved_path_variables=resolved,
    )


def replace_base_url_in_knowledge(
    knowledge: str,
    original_base_url: Optional[str],
    passthrough_url: str,
) -> str:
    """
    Point every mention of the downstream base URL at the passthrough URL.

    Handles http and https spellings, with and without a trailing slash.
    """
    if not knowledge or not original_base_url:
        return knowledge

    normalized = original_base_url.rstrip("/")
    http = re.sub(r"^https?://", "http://", normalized)
    https = re.sub(r"^https?://", "https://", normalized)

    patterns = [normalized, normalized + "/", http, http + "/", https, https + "/"]

    updated = knowledge
    for pattern in dict.fromkeys(patterns):
        if pattern:
            updated = re.sub(re.escape(pattern), lambda _: passthrough_url, updated)
    return updated
