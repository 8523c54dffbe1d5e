"""
Default configuration.

Every entry can be overridden from the environment, see
:func:`asset_tagger.utils.env.load_cfg_from_env`.
"""

import os
from typing import Dict, List, Optional

from easydict import EasyDict as edict

from .env import load_cfg_from_env


def default_config() -> edict:
    cfg = edict()

    cfg.tags = edict()
    cfg.tags.colormap = "tab20"
    cfg.tags.colors = []
    cfg.tags.palette_size = 20

    cfg.session = edict()
    cfg.session.default_mode = "select"

    return cfg


def load_config(env: Optional[Dict[str, str]] = None) -> edict:
    """Default configuration with ``TAGGER_*`` overrides applied."""
    return load_cfg_from_env(default_config(), os.environ if env is None else env)


def palette_from_config(cfg: edict) -> List[str]:
    from ..core.tags import build_palette

    return build_palette(
        colormap=cfg.tags.colormap,
        colors=cfg.tags.get("colors") or [],
        size=cfg.tags.palette_size,
    )
