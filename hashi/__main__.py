import sys

from hashi.main import main

sys.exit(main())
