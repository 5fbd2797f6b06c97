"""Allow ``python -m merchant_feed``."""
import sys

from merchant_feed.cli import main

sys.exit(main())
