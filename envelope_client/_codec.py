"""AES-128-ECB codec shared with the legacy peer.

The peer derives its key the way Node's ``crypto.createCipher`` did: the MD5
digest of the UTF-8 passphrase is used directly as a 16-byte AES key. Bodies
are encrypted in ECB mode with PKCS#7 padding and exchanged as lowercase hex.

ECB leaks equal plaintext blocks as equal ciphertext blocks. The scheme is
kept bit-for-bit for interoperability and must not be relied on for
confidentiality against pattern analysis.

This is an internal module. Import from ``envelope_client`` instead.
"""

import binascii
import hashlib
import logging
import re

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from envelope_client.exceptions import DecodeFailure, EncodeFailure

logger = logging.getLogger(__name__)

# AES block size in bits, also the PKCS#7 padding width
BLOCK_SIZE = 128

_BLOCK_BYTES = BLOCK_SIZE // 8
_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def derive_key(passphrase: str) -> bytes:
    """Derive the 16-byte AES key for a passphrase.

    Args:
        passphrase: Shared secret agreed with the peer.

    Returns:
        The MD5 digest of the passphrase's UTF-8 bytes.

    Raises:
        EncodeFailure: If the passphrase is not encodable as UTF-8.
    """
    try:
        raw = passphrase.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodeFailure(f"Passphrase is not valid UTF-8: {exc}") from exc
    return hashlib.md5(raw, usedforsecurity=False).digest()


def _cipher(passphrase: str) -> Cipher:
    return Cipher(algorithms.AES(derive_key(passphrase)), modes.ECB())


def encrypt(plaintext: str, passphrase: str) -> str:
    """Encrypt text for the peer.

    Args:
        plaintext: Text to encrypt; its UTF-8 bytes are the cipher input.
        passphrase: Shared secret the key is derived from.

    Returns:
        The ciphertext as a lowercase hex string.

    Raises:
        EncodeFailure: If the text cannot be encoded as UTF-8.
    """
    try:
        data = plaintext.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodeFailure(f"Plaintext is not valid UTF-8: {exc}") from exc

    padder = padding.PKCS7(BLOCK_SIZE).padder()
    padded = padder.update(data) + padder.finalize()

    encryptor = _cipher(passphrase).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return ciphertext.hex()


def decrypt(hex_data: str, passphrase: str) -> str:
    """Decrypt a hex ciphertext produced by ``encrypt`` or the peer.

    Args:
        hex_data: Ciphertext as a hex string (either case).
        passphrase: Shared secret the key is derived from.

    Returns:
        The decrypted UTF-8 text.

    Raises:
        DecodeFailure: If the input is not even-length hex, is not a whole
            number of cipher blocks, has invalid padding, or does not
            decrypt to valid UTF-8.
    """
    if len(hex_data) % 2 != 0 or not _HEX_RE.fullmatch(hex_data):
        raise DecodeFailure("Ciphertext is not a valid hex string")

    try:
        ciphertext = binascii.unhexlify(hex_data)
    except binascii.Error as exc:
        raise DecodeFailure(f"Ciphertext is not a valid hex string: {exc}") from exc

    if not ciphertext or len(ciphertext) % _BLOCK_BYTES != 0:
        raise DecodeFailure(
            f"Ciphertext length {len(ciphertext)} is not a positive multiple of {_BLOCK_BYTES}"
        )

    try:
        decryptor = _cipher(passphrase).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
    except EncodeFailure as exc:
        raise DecodeFailure(exc.message) from exc
    except ValueError as exc:
        raise DecodeFailure("Invalid padding; wrong key or corrupted ciphertext") from exc

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.debug("Decrypted %d bytes that are not valid UTF-8", len(data))
        raise DecodeFailure("Decrypted data is not valid UTF-8") from exc
