import sys

from taskboard.main import main

sys.exit(main())
