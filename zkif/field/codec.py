"""
Conversion between the wire representation of field elements and field integers.

The wire format stores elements as little-endian byte strings of *at most* N bytes (trailing zero bytes may be
omitted, the empty string is zero), while the host always works with the canonical N byte form.
Decoding accepts the short form, encoding always emits exactly N bytes, so decode(encode(x)) == x but
encode(decode(b)) may be longer than b.
"""
from typing import List, Optional, Sequence

from zkif.errors.exceptions import EncodingError
from zkif.field.params import FieldParams


class FieldCodec:

    def __init__(self, params: FieldParams):
        self.params = params

    @property
    def byte_width(self) -> int:
        return self.params.byte_width

    @property
    def modulus(self) -> int:
        return self.params.modulus

    def decode(self, data: bytes) -> int:
        """
        Decode little-endian field bytes.

        :param data: 0 to N bytes, missing high bytes are treated as zero
        :raise EncodingError: if data is longer than N bytes or encodes a value >= p
        :return: the field element as integer
        """
        if len(data) > self.byte_width:
            raise EncodingError(f'Element is too big ({len(data)} > {self.byte_width} bytes)')
        val = int.from_bytes(bytes(data), byteorder='little')
        if val >= self.modulus:
            raise EncodingError(f'Non-canonical field element 0x{val:x} (not < field modulus)')
        return val

    def encode(self, val: int) -> bytes:
        """
        Encode a field element as exactly N little-endian bytes.

        :raise EncodingError: if val is not in [0, p)
        """
        if not 0 <= val < self.modulus:
            raise EncodingError(f'Value {val} is not a canonical field element')
        return val.to_bytes(self.byte_width, byteorder='little')

    def decode_values(self, blob: bytes, count: int) -> List[int]:
        """
        Split a concatenated value blob into count elements of equal width and decode each of them.

        :raise EncodingError: if the blob cannot be split evenly or an element is invalid
        """
        if count == 0:
            if blob:
                raise EncodingError(f'Got {len(blob)} value bytes for zero variables')
            return []
        width, rest = divmod(len(blob), count)
        if rest:
            raise EncodingError(f'Value blob of {len(blob)} bytes cannot be split into {count} elements')
        return [self.decode(blob[i * width:(i + 1) * width]) for i in range(count)]

    def encode_values(self, vals: Sequence[int]) -> bytes:
        return b''.join(self.encode(v) for v in vals)

    def maybe_decode_values(self, blob: Optional[bytes], count: int) -> List[Optional[int]]:
        if blob is None:
            return [None] * count
        return self.decode_values(blob, count)


def decode_scalar(data: bytes, params: Optional[FieldParams] = None) -> int:
    """Decode with the codec of params (or of the configured field)."""
    return get_codec(params).decode(data)


def encode_scalar(val: int, params: Optional[FieldParams] = None) -> bytes:
    """Encode with the codec of params (or of the configured field)."""
    return get_codec(params).encode(val)


def get_codec(params: Optional[FieldParams] = None) -> FieldCodec:
    if params is None:
        from zkif.config import cfg
        params = cfg.field_params
    return FieldCodec(params)
