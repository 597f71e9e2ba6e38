# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later


class InputError(ValueError):
    """
    An action input has an invalid value. The title is used for the error
    annotation in the job summary.
    """

    def __init__(self, name, message):
        super().__init__(message)
        self.name = name
        self.title = f"Invalid input parameter: {name}"
