"""Enable running c2hsc as a module: python -m c2hsc"""

import sys

from c2hsc import (
    cli,
)

if __name__ == "__main__":
    # pylint: disable=no-value-for-parameter
    sys.exit(cli())
