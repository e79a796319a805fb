import sys

from stocksim.cli import main

sys.exit(main())
