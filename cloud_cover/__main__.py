import sys

from cloud_cover.cli import main

sys.exit(main())
