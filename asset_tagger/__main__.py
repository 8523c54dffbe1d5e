import sys

from asset_tagger.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
