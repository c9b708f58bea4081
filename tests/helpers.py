import struct

CBR_HEADER = bytes([0xFF, 0xFB, 0x90, 0x00])  # MPEG 1, Layer III, 128 kbps, 44100 Hz


class BytesReader:
    def __init__(self, data, size=None):
        self.data = bytes(data)
        self._size = len(self.data) if size is None else size

    def size(self):
        return self._size

    def read_at(self, offset, length):
        return self.data[offset : offset + length]


def synchsafe(value):
    return bytes((value >> shift) & 0x7F for shift in (21, 14, 7, 0))


def id3_tag(data_size):
    return b"ID3\x04\x00\x00" + synchsafe(data_size) + b"\x00" * data_size


def xing_header(frames=None, identifier=b"Xing", flags=None):
    if flags is None:
        flags = 0x01 if frames is not None else 0
    out = identifier + struct.pack(">I", flags)
    if flags & 0x01:
        out += struct.pack(">I", frames or 0)
    if flags & 0x02:
        out += struct.pack(">I", 123456)
    if flags & 0x04:
        out += bytes(range(100))
    if flags & 0x08:
        out += struct.pack(">I", 78)
    return out


def mp3_bytes(header=CBR_HEADER, xing=None, size=4096, tag=b""):
    # Xing sits 32 bytes after the header, like MPEG 1 stereo side info
    body = header + b"\x00" * 32
    if xing is not None:
        body += xing
    body = tag + body
    return body + b"\x00" * max(0, size - len(body))
