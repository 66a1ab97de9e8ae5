# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

import sys

from tunetint.cli import main

sys.exit(main())
