# flake8: noqa E501

import asyncio
from gettext import gettext as _

from asset_tagger.cli.common import open_project, storage_flags

COMMAND_DESCRIPTION = _("Reconcile project assets with the source folder and list them")


def command(subparser):
    storage_flags(subparser)
    subparser.add_argument(
        "--frames",
        dest="frames",
        action="store_true",
        help=_("Also list video frames"),
    )
    subparser.add_argument(
        "--save",
        dest="save",
        action="store_true",
        help=_("Store the merged asset list in the project"),
    )

    def handle(args):
        asyncio.run(run(args))

    return handle


async def run(args):
    from asset_tagger.core.assets import AssetCollection

    storage, project = await open_project(args)
    collection = AssetCollection()
    result = await collection.reconcile(project, storage)
    if result.warning is not None:
        print(_("warning: {message}").format(message=result.warning))

    for asset in result.visible:
        marker = "*" if result.selected is not None and asset.id == result.selected.id else " "
        print(f"{marker} {asset.state.name:<12} {asset.type.value:<10} {asset.name}")
        if args.frames:
            for frame in collection.children_of(asset.id):
                print(f"    {frame.state.name:<12} t={frame.timestamp}")
    print(_("{count} assets").format(count=len(result.visible)))

    if args.save:
        project.assets = dict(collection.assets)
        await storage.save(project)
