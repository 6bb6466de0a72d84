import sys

from hound.cli import main

sys.exit(main())
