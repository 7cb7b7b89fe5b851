import sys

from flightco2.main import main

sys.exit(main())
