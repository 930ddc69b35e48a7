"""
Optional pre-reduction quantizer.

Reduces an image's opaque pixels to approximately `k` representative colors
with MiniBatchKMeans. Its output is a candidate source only: centers may
coincide after rounding and carry no tolerance guarantee.
"""

from collections import Counter
from typing import Callable, List, Optional, Tuple

import numpy as np
from loguru import logger
from sklearn.cluster import MiniBatchKMeans

from epfi.config import config

from .pixels import Color

WeightedColors = List[Tuple[Color, float]]
Quantizer = Callable[[np.ndarray, int], WeightedColors]


class KMeansQuantizer:
    """MiniBatchKMeans-backed quantizer with a fixed seed for repeatable output."""

    def __init__(self, rng_seed: Optional[int] = None, max_iter: int = 100):
        self.rng_seed = config.QUANTIZER_SEED if rng_seed is None else rng_seed
        self.max_iter = max_iter

    def __call__(self, pixels_bgr: np.ndarray, k: int) -> WeightedColors:
        """
        Cluster pixels into `k` colors.

        Args:
            pixels_bgr: (N, 3) uint8 BGR rows
            k: Number of clusters, at most the number of distinct rows

        Returns:
            (Color, weight) pairs, weight being the share of pixels per cluster,
            heaviest first
        """
        if k <= 0:
            raise ValueError(f"Cluster count must be positive, got {k}")
        if len(pixels_bgr) < k:
            raise ValueError(f"Cannot form {k} clusters from {len(pixels_bgr)} pixels")

        logger.debug(f"Quantizing {len(pixels_bgr)} pixels into k={k}")

        kmeans = MiniBatchKMeans(
            n_clusters=k,
            random_state=self.rng_seed,
            batch_size=min(2048, len(pixels_bgr)),
            n_init="auto",
            max_iter=self.max_iter
        )
        labels = kmeans.fit_predict(pixels_bgr.astype(np.float32))
        centers = np.clip(np.rint(kmeans.cluster_centers_), 0, 255).astype(np.uint8)

        label_counts = Counter(labels.tolist())
        total = len(labels)

        weighted = []
        for i in range(k):
            b, g, r = (int(v) for v in centers[i])
            weighted.append((Color(r, g, b), label_counts.get(i, 0) / total))

        weighted.sort(key=lambda item: -item[1])
        return weighted
