from typing import Any, Dict, Iterable, List, Mapping

# Location segments FastAPI prefixes to field paths
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def flatten_validation_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic error entries into {field path: [messages]}."""
    issues: Dict[str, List[str]] = {}
    for error in errors:
        loc = list(error.get("loc") or ())
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "_root"
        message = str(error.get("msg", "Invalid value"))
        # pydantic prefixes messages from custom validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        issues.setdefault(field, []).append(message)
    return issues


def error_body(message: str, issues: Dict[str, List[str]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"message": message}
    if issues is not None:
        body["issues"] = issues
    return body
