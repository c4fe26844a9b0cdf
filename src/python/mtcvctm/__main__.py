import sys

from mtcvctm.cli import main

sys.exit(main())
