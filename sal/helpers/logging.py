# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os
import sys

import sal.config
import sal.helpers.github

logfd = None

# Message prefixes that get colored on stdout
prefix_styles = {
    "NOTE:": "BLUE",
    "WARNING:": "YELLOW",
    "ERROR:": "RED",
    "DONE!": "GREEN",
}


def colorize(msg):
    """
    Color the first known prefix (see prefix_styles) found in msg.
    """
    styles = sal.config.styles
    for prefix, style in prefix_styles.items():
        if prefix in msg:
            return msg.replace(prefix,
                               f"{styles[style]}{prefix}{styles['END']}", 1)
    return msg


def annotation(msg):
    """
    Message for a "::warning::" workflow command, so warnings show up in the
    summary of the workflow run and not only in the collapsed log group.
    """
    if msg.startswith("WARNING:"):
        msg = msg[len("WARNING:"):]
    return msg.strip()


class log_handler(logging.StreamHandler):
    """
    Write to stdout and to the already opened log file. Warnings are also
    written as workflow commands.
    """
    _args = None

    def emit(self, record):
        try:
            msg = self.format(record)

            # INFO or higher: Write to stdout
            if (not self._args.details_to_stdout and
                not self._args.quiet and
                    record.levelno >= logging.INFO):
                self.stream.write(colorize(msg))
                self.stream.write(self.terminator)
                self.flush()

            if record.levelno == logging.WARNING and not self._args.quiet:
                sal.helpers.github.command("warning", annotation(msg))

            # Everything: Write to logfd
            if logfd:
                msg = "(" + str(os.getpid()).zfill(6) + ") " + msg
                logfd.write(msg + "\n")
                logfd.flush()

        except (KeyboardInterrupt, SystemExit):
            raise
        except BaseException:
            self.handleError(record)


def add_verbose_log_level():
    """
    Add a new log level "verbose", which is below "debug". Also monkeypatch
    logging, so it can be used with logging.verbose().

    This function is based on work by Voitek Zylinski and sleepycal:
    https://stackoverflow.com/a/20602183
    All stackoverflow user contributions are licensed as CC-BY-SA:
    https://creativecommons.org/licenses/by-sa/3.0/
    """
    logging.VERBOSE = 5
    logging.addLevelName(logging.VERBOSE, "VERBOSE")
    logging.Logger.verbose = lambda inst, msg, * \
        args, **kwargs: inst.log(logging.VERBOSE, msg, *args, **kwargs)
    logging.verbose = lambda msg, *args, **kwargs: logging.log(logging.VERBOSE,
                                                               msg, *args,
                                                               **kwargs)


def open_log(path):
    """
    Open the log file for appending. $RUNNER_TEMP exists on GitHub runners,
    but not necessarily when running locally, so create the folder.
    """
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    return open(path, "a+", encoding="utf-8")


def init(args):
    """
    Open the log file (or use stdout with --details-to-stdout), add the
    verbose log level and the custom log handler.
    """
    global logfd
    if args.details_to_stdout:
        logfd = sys.stdout
    else:
        logfd = open_log(args.log)

    root_logger = logging.getLogger()
    root_logger.handlers = []

    add_verbose_log_level()
    root_logger.setLevel(logging.VERBOSE if args.verbose else logging.DEBUG)

    # Workflow commands (::group:: etc.) are written to stdout, so log
    # messages must go there as well to keep the order intact.
    handler = log_handler(sys.stdout)
    log_handler._args = args
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)


def close():
    """
    Close the log file (if it is not stdout).
    """
    global logfd
    if logfd and logfd not in [sys.stdout, sys.stderr] and not logfd.closed:
        logfd.close()
    logfd = None
