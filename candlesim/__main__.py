import sys

from candlesim.runner import main

sys.exit(main())
