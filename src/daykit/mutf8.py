"""
Modified UTF-8 codec, as written by DataOutput.writeUTF.

Text is encoded per UTF-16 code unit: U+0000 takes two bytes and characters
outside the BMP are written as two three-byte surrogates.
"""


class MalformedInput(ValueError):
    """Raised when bytes are not valid modified UTF-8."""

    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at byte {offset}")
        self.offset = offset


def _code_units(text: str):
    data = text.encode("utf-16-be", "surrogatepass")
    for i in range(0, len(data), 2):
        yield (data[i] << 8) | data[i + 1]


def encoded_length(text: str) -> int:
    """Return the number of bytes encode() would produce for text."""
    length = 0
    for unit in _code_units(text):
        if 0x0001 <= unit <= 0x007F:
            length += 1
        elif unit <= 0x07FF:
            length += 2
        else:
            length += 3
    return length


def encode(text: str) -> bytes:
    out = bytearray()
    for unit in _code_units(text):
        if 0x0001 <= unit <= 0x007F:
            out.append(unit)
        elif unit <= 0x07FF:
            out.append(0xC0 | (unit >> 6))
            out.append(0x80 | (unit & 0x3F))
        else:
            out.append(0xE0 | (unit >> 12))
            out.append(0x80 | ((unit >> 6) & 0x3F))
            out.append(0x80 | (unit & 0x3F))
    return bytes(out)


def decode(data: bytes) -> str:
    """
    Decode modified UTF-8 bytes back into text

    Raises:
        MalformedInput: On a truncated sequence or an invalid lead/continuation byte
    """
    units = bytearray()
    i = 0
    n = len(data)

    while i < n:
        b = data[i]
        if b < 0x80:
            unit = b
            i += 1
        elif b >> 5 == 0b110:
            if i + 1 >= n:
                raise MalformedInput("Partial character", i)
            b2 = data[i + 1]
            if b2 >> 6 != 0b10:
                raise MalformedInput("Invalid continuation byte", i + 1)
            unit = ((b & 0x1F) << 6) | (b2 & 0x3F)
            i += 2
        elif b >> 4 == 0b1110:
            if i + 2 >= n:
                raise MalformedInput("Partial character", i)
            b2, b3 = data[i + 1], data[i + 2]
            if b2 >> 6 != 0b10 or b3 >> 6 != 0b10:
                raise MalformedInput("Invalid continuation byte", i + 1)
            unit = ((b & 0x0F) << 12) | ((b2 & 0x3F) << 6) | (b3 & 0x3F)
            i += 3
        else:
            raise MalformedInput("Invalid lead byte", i)

        units += unit.to_bytes(2, "big")

    return units.decode("utf-16-be", "surrogatepass")
