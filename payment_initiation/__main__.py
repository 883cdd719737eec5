import sys

from payment_initiation.cli import main

sys.exit(main())
