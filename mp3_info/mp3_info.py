import logging
from typing import NamedTuple, Optional, Union

from mp3_info.readers import open_reader

logger = logging.getLogger(__name__)

ID3_HEADER_SIZE = 10
FRAME_HEADER_SIZE = 4
SIDE_INFO_OFFSET = 10

XING_SEARCH_WINDOW = 40
XING_IDENTIFIERS = (b"Xing", b"Info")
XING_IDENTIFIER_SIZE = 4
XING_FLAGS_SIZE = 4
XING_FRAMES_FLAG = 0x01
XING_BYTES_FLAG = 0x02
XING_TOC_FLAG = 0x04
XING_VBR_SCALE_FLAG = 0x08
XING_FIELD_SIZES = (
    (XING_FRAMES_FLAG, 4),
    (XING_BYTES_FLAG, 4),
    (XING_TOC_FLAG, 100),
    (XING_VBR_SCALE_FLAG, 4),
)
XING_MAX_SIZE = XING_IDENTIFIER_SIZE + XING_FLAGS_SIZE + sum(
    size for _, size in XING_FIELD_SIZES
)

FREE = "free"


class Mp3InfoError(ValueError):
    pass


class InvalidFileError(Mp3InfoError):
    pass


class InvalidFieldError(Mp3InfoError):
    pass


# kbps, indexed by [MPEG 1 or not][layer bits][bitrate bits]; None is reserved
bitrates = [
    [
        # MPEG 2 and MPEG 2.5
        None,  # LayerReserved
        [FREE, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160, None],  # Layer3
        [FREE, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160, None],  # Layer2
        [FREE, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256, None],  # Layer1
    ],
    [
        # MPEG 1
        None,  # LayerReserved
        [FREE, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, None],  # Layer3
        [FREE, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384, None],  # Layer2
        [FREE, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448, None],  # Layer1
    ],
]

sampling_rates = [
    # MPEG 2.5
    [11025, 12000, 8000, None],
    # Reserved
    None,
    # MPEG 2
    [22050, 24000, 16000, None],
    # MPEG 1
    [44100, 48000, 32000, None],
]

samples_per_frame = [
    # MPEG 2 and MPEG 2.5
    [None, 576, 1152, 384],
    # MPEG 1
    [None, 1152, 1152, 384],
]

mpeg_versions = ["MPEG 2.5", "reserved", "MPEG 2", "MPEG 1"]
layers = ["reserved", "Layer III", "Layer II", "Layer I"]
channel_modes = ["Stereo", "Joint stereo", "Dual channel", "Single channel"]


class Metadata(NamedTuple):
    duration: float
    bitrate: Union[int, str]
    frequency: int
    layer: str
    version: str
    mode: str
    vbr: bool


class MP3FrameHeader:
    """Read-only view over the 4 bytes of an MPEG audio frame header."""

    def __init__(self, data: bytes):
        self.data = bytes(data)

    def mpeg_version_bits(self):
        return (self.data[1] & 0x18) >> 3

    def layer_bits(self):
        return (self.data[1] & 0x06) >> 1

    def protection_bits(self):
        return self.data[1] & 0x01

    def bitrate_bits(self):
        return (self.data[2] & 0xF0) >> 4

    def frequency_bits(self):
        return (self.data[2] & 0x0C) >> 2

    def padding_bits(self):
        return (self.data[2] & 0x02) >> 1

    def channel_mode_bits(self):
        return self.data[3] >> 6

    def protected(self) -> bool:
        # a cleared bit means a CRC follows the header
        return self.protection_bits() == 0

    def padded(self) -> bool:
        return self.padding_bits() == 1

    def mpeg_version(self) -> str:
        return mpeg_versions[self.mpeg_version_bits()]

    def layer(self) -> str:
        return layers[self.layer_bits()]

    def channel_mode(self) -> str:
        return channel_modes[self.channel_mode_bits()]

    def bitrate(self) -> Union[int, str]:
        """Bitrate in kbps, or ``FREE`` for free-format streams."""
        rows = bitrates[self.mpeg_version_bits() & 0x01]
        row = rows[self.layer_bits()]
        if row is None:
            raise InvalidFieldError(f"Reserved layer bits {self.layer_bits():#04b}")
        value = row[self.bitrate_bits()]
        if value is None:
            raise InvalidFieldError(
                f"Reserved bitrate index {self.bitrate_bits()} for {self.layer()}"
            )
        return value

    def frequency(self) -> int:
        """Sampling rate in Hz."""
        rates = sampling_rates[self.mpeg_version_bits()]
        if rates is None:
            raise InvalidFieldError("Reserved MPEG version, no sampling rate")
        value = rates[self.frequency_bits()]
        if value is None:
            raise InvalidFieldError(
                f"Reserved frequency index {self.frequency_bits()}"
            )
        return value

    def samples_per_frame(self) -> int:
        group = 1 if self.mpeg_version() == "MPEG 1" else 0
        value = samples_per_frame[group][self.layer_bits()]
        if value is None:
            raise InvalidFieldError("Reserved layer has no samples per frame")
        return value


class XingHeader:
    """Bytes of a Xing/Info header, starting at its identifier.

    Only the frame count is decoded, the byte count, TOC and VBR scale
    are kept as opaque bytes.
    """

    def __init__(self, data: bytes):
        self.data = bytes(data)

    @property
    def identifier(self) -> str:
        return self.data[:XING_IDENTIFIER_SIZE].decode("ascii")

    @property
    def flags(self) -> int:
        return int.from_bytes(self.data[4:8], "big")

    @property
    def is_vbr(self) -> bool:
        # LAME writes "Info" into CBR files
        return self.identifier == "Xing"

    @property
    def frame_count(self) -> Optional[int]:
        if not self.flags & XING_FRAMES_FLAG or len(self.data) < 12:
            return None
        return int.from_bytes(self.data[8:12], "big")

    def __len__(self):
        return len(self.data)


def read_synchsafe_integer(buffer, size, offset=0):
    mask = 0x7F
    out = 0

    for i in range(size):
        out = (out << 7) | (buffer[i + offset] & mask)
    return out


def id3_size(reader) -> int:
    """Byte length of a leading ID3v2 tag including its header, 0 if absent."""
    data = reader.read_at(0, ID3_HEADER_SIZE)
    if len(data) < ID3_HEADER_SIZE or data[:3] != b"ID3":
        return 0
    return read_synchsafe_integer(data, 4, 6) + ID3_HEADER_SIZE


def locate_frame_header(reader, offset) -> Optional[MP3FrameHeader]:
    data = reader.read_at(offset, FRAME_HEADER_SIZE)
    if len(data) < FRAME_HEADER_SIZE:
        return None
    if data[0] == 0xFF and data[1] & 0xC0 == 0xC0:
        return MP3FrameHeader(data)
    return None


def xing_header_size(flags) -> int:
    size = XING_IDENTIFIER_SIZE + XING_FLAGS_SIZE
    for flag, field_size in XING_FIELD_SIZES:
        if flags & flag:
            size += field_size
    return size


def locate_xing_header(reader, offset) -> Optional[XingHeader]:
    """Search for a Xing/Info identifier in the 40 bytes after ``offset``.

    The read extends past the search window so the largest header
    (all four flags set) fits when the file holds it.
    """
    buffer = reader.read_at(offset, XING_SEARCH_WINDOW + XING_MAX_SIZE)
    last = min(XING_SEARCH_WINDOW, len(buffer)) - XING_IDENTIFIER_SIZE
    for i in range(last):
        if buffer[i : i + XING_IDENTIFIER_SIZE] not in XING_IDENTIFIERS:
            continue
        flags_end = i + XING_IDENTIFIER_SIZE + XING_FLAGS_SIZE
        if flags_end > len(buffer):
            return None
        flags = int.from_bytes(buffer[i + XING_IDENTIFIER_SIZE : flags_end], "big")
        size = xing_header_size(flags)
        logger.debug("xing header at %d, flags %#x, size %d", offset + i, flags, size)
        return XingHeader(buffer[i : i + size])
    return None


def get_duration(frame_header, xing_header, file_size) -> float:
    """Duration in seconds.

    VBR: frames * samples per frame / sampling rate, from the Xing frame count.
    CBR: file size in bits / bitrate in bps, over the whole file.
    """
    if xing_header is not None and xing_header.frame_count is not None:
        return (
            xing_header.frame_count * frame_header.samples_per_frame()
        ) / frame_header.frequency()

    bitrate = frame_header.bitrate()
    if bitrate == FREE:
        raise InvalidFieldError("Free format bitrate, cannot compute CBR duration")
    if not file_size:
        raise InvalidFileError("Unknown file size, cannot compute CBR duration")
    return (file_size * 8) / (bitrate * 1000)


def format_duration(duration) -> str:
    hours = int(duration // 3600)
    minutes = int((duration % 3600) // 60)
    seconds = int(duration % 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def read_metadata(reader) -> Metadata:
    pos = id3_size(reader)
    logger.debug("first frame expected at %d", pos)
    frame_header = locate_frame_header(reader, pos)
    if frame_header is None:
        raise InvalidFileError(f"Not a valid MP3 file - frame not found at {pos}")

    xing_offset = pos + FRAME_HEADER_SIZE + SIDE_INFO_OFFSET
    xing_header = locate_xing_header(reader, xing_offset)

    version = frame_header.mpeg_version()
    layer = frame_header.layer()
    frequency = frame_header.frequency()
    bitrate = frame_header.bitrate()
    vbr = xing_header is not None and xing_header.is_vbr
    counted = xing_header is not None and xing_header.frame_count is not None
    file_size = None if counted else reader.size()
    logger.debug(
        "%s duration, file size %s", "frame count" if counted else "CBR", file_size
    )
    duration = get_duration(frame_header, xing_header, file_size)

    return Metadata(
        duration=duration,
        bitrate=bitrate,
        frequency=frequency,
        layer=layer,
        version=version,
        mode=frame_header.channel_mode(),
        vbr=vbr,
    )


def load(path) -> Metadata:
    """Loads the MP3 metadata of a local path or http(s) url (ID3 tags not included)."""
    with open_reader(path) as reader:
        return read_metadata(reader)
