"""Actionable error catalog for xtbuild."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "contradictory_modes": {
        "what": "Make up your mind: --client-only and --database-only cannot be combined.",
        "next": "Drop one of the two flags, or both to build client and database.",
    },
    "conflicting_sources": {
        "what": "You can build from a backup or from a source tree but not both.",
        "next": "Pass either `--backup` or `--source`.",
    },
    "malformed_initialize": {
        "what": "Initializing requires a single database, no extra extensions, "
        "and either a backup or a source argument.",
        "next": "Use `--initialize --database <name>` together with `--backup` or `--source`.",
    },
    "config_not_found": {
        "what": "Config file not found: {path}",
        "next": "Check the `--config` path or create {path}.",
    },
    "missing_builder": {
        "what": "No {name} command configured.",
        "next": "Add `builders.{name}` to the configuration file.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
