import sys
from logicsim.CLI import main

sys.exit(main())
