import sys

from png_optimizer.main import main

sys.exit(main())
