import sys

from gallery_collector.main import main

sys.exit(main())
