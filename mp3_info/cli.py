import argparse
import logging
import sys

import requests

from mp3_info.mp3_info import Mp3InfoError, format_duration, load


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("path", help="local mp3 file or remote mp3 url")
    parser.add_argument(
        "--hms", action="store_true", help="print the duration as HH:MM:SS"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    options = parser.parse_args()
    if options.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        metadata = load(options.path)
    except (Mp3InfoError, OSError, requests.RequestException) as e:
        sys.exit(f"{options.path}: {e}")

    for key, value in metadata._asdict().items():
        if key == "duration" and options.hms:
            value = format_duration(value)
        print(f"{key}: {value}")


if __name__ == "__main__":
    main()
