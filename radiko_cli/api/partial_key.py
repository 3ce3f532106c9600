"""
Derives the partial key that proves client authenticity during auth phase 2.
"""

import base64

# Key material shipped with the radiko HTML5 player. It is an external,
# versioned constant: keep it byte-for-byte and never log it.
DEFAULT_AUTHKEY = "bcd151073c03b352e1ef2fd66c32209da9ca0afa"


def derive_partial_key(
    offset: int, length: int, authkey: bytes | str = DEFAULT_AUTHKEY
) -> str:
    """
    Base64-encodes the slice `[offset, offset + length)` of the key material.

    The slice is clipped to the key length, so an offset past the end yields
    the encoding of an empty byte string.

    Args:
        offset: Byte offset announced by auth phase 1.
        length: Byte length announced by auth phase 1.
        authkey: The key material, as bytes or UTF-8 text.

    Returns:
        The standard (padded) Base64 text of the selected bytes.
    """
    if offset < 0 or length < 0:
        raise ValueError(
            f"offset and length must not be negative (offset={offset}, length={length})"
        )
    src = authkey.encode("utf-8") if isinstance(authkey, str) else bytes(authkey)
    end = min(len(src), offset + length)
    return base64.standard_b64encode(src[offset:end]).decode("ascii")
