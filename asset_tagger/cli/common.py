import logging
import uuid
from gettext import gettext as _
from pathlib import Path

from asset_tagger.core.annotation.state import Project
from asset_tagger.core.errors import NotFound
from asset_tagger.core.storage import LocalFileStorage

logger = logging.getLogger(__name__)


def storage_flags(subparser):
    subparser.add_argument("target", type=Path)
    subparser.add_argument(
        "-s",
        "--source",
        dest="source",
        type=Path,
        help=_("Folder with the media files, defaults to the target folder"),
    )
    subparser.add_argument(
        "-p", "--project", dest="project", default="project", help=_("Project name")
    )


async def open_project(args):
    """Storage for ``args`` and its project, created when missing."""
    storage = LocalFileStorage(args.target, args.source)
    try:
        project = await storage.load(args.project)
    except NotFound:
        logger.info(
            _("Creating project {name} in {target}").format(
                name=args.project, target=args.target
            )
        )
        project = Project(
            id=uuid.uuid4().hex,
            name=args.project,
            source_connection=str(storage.source),
        )
    return storage, project
