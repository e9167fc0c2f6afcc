import sys

from mandelscope.cli import main

sys.exit(main())
