import asyncio
import logging
import math
from typing import List
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from ..utils.quantum_helpers import bits_to_string

logger = logging.getLogger(__name__)

DIGEST_ALGORITHMS = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha3_256": hashes.SHA3_256,
    "sha3_512": hashes.SHA3_512,
}

class PrivacyAmplificationError(RuntimeError):
    """Raised when the privacy amplification digest cannot be computed"""

class CryptoService:
    def __init__(self, digest_algorithm: str = "sha256"):
        self.digest_algorithm = digest_algorithm.lower()

    def digest_hex(self, message: str) -> str:
        """Lowercase hex digest of `message` with the configured algorithm"""
        algorithm_cls = DIGEST_ALGORITHMS.get(self.digest_algorithm)
        if algorithm_cls is None:
            raise PrivacyAmplificationError(f"Unsupported digest algorithm: {self.digest_algorithm}")

        try:
            digest = hashes.Hash(algorithm_cls())
            digest.update(message.encode())
            return digest.finalize().hex()
        except UnsupportedAlgorithm as e:
            raise PrivacyAmplificationError(f"Digest {self.digest_algorithm} unavailable: {e}") from e

    async def amplify_privacy(self, key_bits: List[int], length_bits: int) -> str:
        """
        Compress a reconciled key into `length_bits` bits of hex.

        The key's '0101...' string is hashed and the hex digest truncated to
        ceil(length_bits / 4) characters. A request wider than the digest
        yields the whole digest.
        """
        if not key_bits:
            raise ValueError("Cannot amplify an empty key")

        hex_digest = await asyncio.to_thread(self.digest_hex, bits_to_string(key_bits))
        hex_length = math.ceil(length_bits / 4)
        if hex_length > len(hex_digest):
            logger.warning(f"Requested {length_bits} bits but {self.digest_algorithm} only yields "
                           f"{len(hex_digest) * 4}; returning the full digest")
        return hex_digest[:hex_length]
