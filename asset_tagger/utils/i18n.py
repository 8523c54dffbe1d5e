"""
Message catalog setup.

Importing this module binds the ``asset_tagger`` text domain, so that
``gettext.gettext`` looks up translations shipped in ``asset_tagger/locale``.
"""

import gettext
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DOMAIN = "asset_tagger"
LOCALE_DIR = Path(__file__).parent.parent / "locale"


def install_catalog(locale_dir: Path = LOCALE_DIR, domain: str = DOMAIN) -> str:
    """Bind ``domain`` to ``locale_dir`` and make it the default domain."""
    bound = gettext.bindtextdomain(domain, localedir=str(locale_dir))
    gettext.textdomain(domain)
    logger.debug("Message catalog %s bound to %s", domain, bound)
    return bound


install_catalog()
