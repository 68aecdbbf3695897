import sys

from protofixture.cli import main

sys.exit(main())
