"""Allow running bracesh with 'python -m bracesh'."""

import sys

from bracesh.main import main

sys.exit(main())
