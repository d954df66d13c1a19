# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

from .cli import main

main()
