"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/embeddings.py
Default ImageEmbeddingProvider built on perceptual hashing (pHash).

An image is decoded with Pillow, thumbnailed if large, and hashed with imagehash.phash.
The hash bits become a fixed-length 0/1 vector, and the distance between two
vectors is the fraction of differing bits (normalized Hamming distance).
"""

import io
from typing import Sequence, Tuple

import imagehash
from PIL import Image

from dupfinder.core.interfaces import ImageEmbeddingProvider

MAX_IMAGE_SIDE = 1024


class PerceptualHashEmbedder(ImageEmbeddingProvider):
    """
    Maps image bytes to hash_size * hash_size bits of pHash.
    Distances fall in [0, 1]; visually identical images are usually below 0.15.
    """

    default_threshold = 0.15

    def __init__(self, hash_size: int = 8):
        self.hash_size = int(hash_size)

    @property
    def dimension(self) -> int:
        return self.hash_size * self.hash_size

    def embed(self, data: bytes) -> Tuple[float, ...]:
        """
        Raises:
            OSError / PIL.UnidentifiedImageError: bytes are not a decodable image.
        """
        with Image.open(io.BytesIO(data)) as img:
            # Resize large images for faster processing
            if img.size[0] > MAX_IMAGE_SIDE or img.size[1] > MAX_IMAGE_SIDE:
                img.thumbnail((MAX_IMAGE_SIDE, MAX_IMAGE_SIDE))
            phash = imagehash.phash(img, hash_size=self.hash_size)
        return tuple(1.0 if bit else 0.0 for bit in phash.hash.flatten())

    def distance(self, a: Sequence[float], b: Sequence[float]) -> float:
        if len(a) != len(b):
            raise ValueError(f"Embedding length mismatch: {len(a)} != {len(b)}")
        if not a:
            return 0.0
        differing = sum(1 for x, y in zip(a, b) if x != y)
        return differing / len(a)
