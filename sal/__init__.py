# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
# PYTHON_ARGCOMPLETE_OK
import sys
import logging
import os
import traceback

from . import parse
from .helpers import frontend
from .helpers import github
from .helpers import logging as sal_logging

# setup-alpine version
__version__ = "1.0.0"

# Python version check
version = sys.version_info
if version < (3, 9):
    print("You need at least Python 3.9 to run setup-alpine")
    print("(You are running it with Python " + str(version.major) +
          "." + str(version.minor) + ")")
    sys.exit()


def main():
    # Wrap everything to display nice error messages
    args = None
    try:
        # Parse arguments, set up logging
        args = parse.arguments()
        os.umask(0o22)

        # Run the function with the action's name (in sal/helpers/frontend.py)
        getattr(frontend, args.action)(args)

        github.endgroup()
        logging.info("DONE!")

    except KeyboardInterrupt:
        print("\nCaught KeyboardInterrupt, exiting …")
        sys.exit(130)  # SIGINT(2) + 128

    except Exception as e:
        # Dump log to stdout when args (and therefore logging) init failed
        if not args:
            logging.getLogger().setLevel(logging.DEBUG)

        title = getattr(e, "title", None) or github.current_group or "Error"
        github.endgroup()
        logging.info("ERROR: " + str(e))
        logging.debug(traceback.format_exc())
        github.error(title, f"{e} (see the job log for more information)")

        if args and not args.details_to_stdout and os.path.exists(args.log):
            print()
            print(f"Command output was written to: {args.log}")
            print("Alternatively you can use '--details-to-stdout' to get"
                  " more output.")
        return 1

    finally:
        sal_logging.close()


if __name__ == "__main__":
    sys.exit(main())
