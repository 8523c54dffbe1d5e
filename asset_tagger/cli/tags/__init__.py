# flake8: noqa E501

import asyncio
from gettext import gettext as _

from asset_tagger.cli.common import open_project, storage_flags

COMMAND_DESCRIPTION = _("Add tags used in saved regions to the project vocabulary")


def command(subparser):
    storage_flags(subparser)
    subparser.add_argument(
        "-n",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help=_("Only print the tags that would be added"),
    )

    def handle(args):
        asyncio.run(run(args))

    return handle


async def run(args):
    from asset_tagger.core.tags import TagVocabulary
    from asset_tagger.utils.config import palette_from_config

    storage, project = await open_project(args)
    vocabulary = TagVocabulary(project, palette_from_config(args.config))

    added = []
    for metadata in storage.list_metadata():
        added.extend(vocabulary.merge_from(metadata))

    for tag in added:
        print(f"+ {tag.name} {tag.color}")
    if added and not args.dry_run:
        await storage.save(project)
    print(_("{count} new tags").format(count=len(added)))
