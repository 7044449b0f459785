import sys

from bagimages.cli import main

sys.exit(main())
