import sys

from valuation_client.cli import main

sys.exit(main())
