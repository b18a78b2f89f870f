import sys

from imgalloc.cli import main

sys.exit(main())
