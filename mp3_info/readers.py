import logging
import os
import re

import requests

logger = logging.getLogger(__name__)


class FileDataReader:
    def __init__(self, path):
        self.path = path
        self.fp = open(path, "rb")

    def size(self):
        return os.fstat(self.fp.fileno()).st_size

    def read_at(self, offset, length):
        self.fp.seek(offset)
        return self.fp.read(length)

    def close(self):
        self.fp.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FetchDataReader:
    range_regex = re.compile(r"([^\s]+)\s((([\d]+)-([\d]+))|\*)/([\d]+|\*)")

    def __init__(self, url, session=None):
        self.url = url
        self.session = session or requests.Session()
        self.total_content_size = None
        self.body = None

    def size(self):
        if self.total_content_size is None:
            response = self.session.head(self.url, allow_redirects=True)
            response.raise_for_status()
            content_length = response.headers.get("content-length")
            if content_length is not None:
                self.total_content_size = int(content_length)
        return self.total_content_size

    def read_at(self, offset, length):
        if self.body is not None:
            return self.body[offset : offset + length]

        end = offset + length - 1
        headers = {"Range": f"bytes={offset}-{end}"}
        response = self.session.get(self.url, headers=headers)
        if response.status_code == 416:
            # range starts past the end of the file
            return b""
        response.raise_for_status()

        range_string = response.headers.get("content-range")
        if range_string:
            match = self.range_regex.match(range_string)
            if match and match.group(6) != "*":
                self.total_content_size = int(match.group(6))

        if response.status_code != 206:
            # server ignored the Range header and sent the whole body
            logger.debug("range not honoured by %s", self.url)
            self.body = response.content
            if self.total_content_size is None:
                self.total_content_size = len(self.body)
            return self.body[offset : offset + length]
        return response.content[:length]

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def open_reader(path):
    if path.startswith(("http://", "https://")):
        return FetchDataReader(path)
    return FileDataReader(path)
