# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os
import shutil
import urllib.error
import urllib.request

import sal.config
import sal.helpers.file


def parse_checksum_url(url):
    """
    Split a download URL with an appended checksum.

    :param url: e.g. "https://example.org/apk.static#!sha256!1c65115a..."
    :returns: ("https://example.org/apk.static", "1c65115a...")
    """
    separator = sal.config.checksum_separator
    if separator not in url:
        raise ValueError(f"URL does not end with '{separator}' followed by"
                         f" a SHA-256 checksum: {url}")
    return (url.rsplit("#", 1)[0], url.rsplit(separator, 1)[1].lower())


def fetch(url, path):
    """
    Download a file to disk, without any verification. Only use this for
    HTTPS URLs, or for files that get verified afterwards.

    :returns: path
    :raises RuntimeError: when the download failed
    """
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    logging.debug(f"Download {url} to {path}")
    try:
        with urllib.request.urlopen(
                url, timeout=sal.config.download_timeout) as response:
            with open(path, "wb") as handle:
                shutil.copyfileobj(response, handle)
    except urllib.error.HTTPError as e:
        raise RuntimeError(f"Download failed (HTTP {e.code}): {url}")
    except urllib.error.URLError as e:
        raise RuntimeError(f"Download failed ({e.reason}): {url}")
    return path


def download(args, url, path):
    """
    Download a file to disk and verify its SHA-256 checksum. When the file
    exists already and the checksum matches, it does not get downloaded
    again.

    :param url: the URL with appended checksum, see parse_checksum_url()
    :param path: where to save the file
    :returns: path
    :raises RuntimeError: when the download or the verification failed
    """
    url, sha256 = parse_checksum_url(url)

    if os.path.exists(path):
        if sal.helpers.file.sha256sum(path) == sha256:
            logging.verbose(f"Using cached download: {path}")
            return path
        logging.debug(f"Checksum mismatch, downloading again: {path}")

    fetch(url, path)

    sha256_real = sal.helpers.file.sha256sum(path)
    if sha256_real != sha256:
        os.unlink(path)
        raise RuntimeError(f"Checksum of {url} does not match! Expected"
                           f" SHA-256 {sha256}, but got {sha256_real}.")
    logging.verbose(f"{path}: OK")
    return path
