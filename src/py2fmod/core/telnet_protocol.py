"""
Wire-level constants for the FMOD Studio console.

The console is a plain telnet-style text stream: commands are newline
terminated, replies are free-form text. The only negotiation performed is a
single IAC DO SGA sent right after the stream opens.
"""

import codecs
from enum import IntEnum


class TelnetVerb(IntEnum):
    """Telnet negotiation verbs (RFC 854)."""
    WILL = 251
    WONT = 252
    DO = 253
    DONT = 254
    IAC = 255


class TelnetOption(IntEnum):
    """Telnet options used by the client."""
    SGA = 3  # Suppress Go Ahead


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3663

CONNECT_TIMEOUT = 10.0
PROJECT_QUERY_TIMEOUT = 10.0

# Pacing used by the console client
READ_POLL_INTERVAL = 0.01
COMMAND_DELAY = 0.05
READ_CHUNK_SIZE = 1024

LINE_TERMINATOR = "\n"
ENCODING = "utf-8"

NEGOTIATION = bytes([TelnetVerb.IAC, TelnetVerb.DO, TelnetOption.SGA])


def encode_line(line: str) -> bytes:
    """Encode one console command, appending the line terminator."""
    return (line + LINE_TERMINATOR).encode(ENCODING)


def make_decoder():
    """Return an incremental decoder so multi-byte characters split across reads survive."""
    return codecs.getincrementaldecoder(ENCODING)(errors="replace")


def strip_negotiation(data: bytes) -> bytes:
    """Drop 3-byte IAC option sequences (IAC WILL/WONT/DO/DONT opt) from a reply chunk."""
    if TelnetVerb.IAC not in data:
        return data

    out = bytearray()
    i = 0
    while i < len(data):
        byte = data[i]
        if byte == TelnetVerb.IAC and i + 1 < len(data):
            verb = data[i + 1]
            if verb == TelnetVerb.IAC:
                # Escaped 0xFF data byte
                out.append(byte)
                i += 2
                continue
            if TelnetVerb.WILL <= verb <= TelnetVerb.DONT:
                i += 3
                continue
            i += 2
            continue
        out.append(byte)
        i += 1
    return bytes(out)
