# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
from sal.parse.arguments import arguments
from sal.parse.binfmt_info import binfmt_info
import sal.parse.arch
import sal.parse.validate
