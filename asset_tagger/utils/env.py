import logging
from gettext import gettext as _
from typing import Any, Dict

from easydict import EasyDict as edict

logger = logging.getLogger(__name__)

ENV_PREFIX = "TAGGER_"
TRUE_VALUES = {"1", "true", "yes", "on"}


def coerce_value(current: Any, value: Any) -> Any:
    """
    Convert an environment string to the type of the entry it replaces.

    Lists are read as comma separated values. Entries without a current
    value, or values that are not strings, are kept as given.
    """
    if not isinstance(value, str) or current is None:
        return value
    if isinstance(current, bool):
        return value.strip().lower() in TRUE_VALUES
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    if isinstance(current, (list, tuple)):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def load_cfg_from_env(cfg: edict, env: Dict[str, Any]) -> edict:
    """
    Apply ``TAGGER_*`` variables to ``cfg`` in place.

    A double underscore separates nesting levels, so
    ``TAGGER_tags__colormap=Set3`` sets ``cfg.tags.colormap``.

    Raises:
        ValueError: a value does not parse as the entry's type
    """
    for key, value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = key[len(ENV_PREFIX):].split("__")
        *parents, last = path
        node = cfg
        for part in parents:
            if node.get(part) is None:
                node[part] = edict()
            node = node[part]
        logger.warning(
            _("Configuration entry {key} set from environment to {value}").format(
                key=".".join(path), value=value
            )
        )
        node[last] = coerce_value(node.get(last), value)
    return cfg
