"""
Embedding Projections & Clustering.

Simulated feature embeddings are projected to 2-D with PCA and clustered
with hierarchical (agglomerative) and K-Means clustering. Agreement with
the true labels is reported as ARI and NMI for each method.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
from dataclasses import dataclass
from typing import List, Sequence, Tuple

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import numpy as np
from sklearn.cluster import AgglomerativeClustering, KMeans
from sklearn.decomposition import PCA
from sklearn.metrics import adjusted_rand_score, normalized_mutual_info_score

CLUSTER_METHODS: Tuple[str, ...] = ("hierarchical", "kmeans")


@dataclass(frozen=True)
class ClusterPoint:
    x: float
    y: float
    cluster: int
    label: str


@dataclass(frozen=True)
class ClusterProjection:
    method: str
    points: Tuple[ClusterPoint, ...]
    ari: float
    nmi: float


@dataclass(frozen=True)
class AugmentedPoint:
    x: float
    y: float
    label: str
    is_augmented: bool
    source_index: int


def simulate_embeddings(
    labels: np.ndarray,
    num_classes: int,
    dim: int,
    rng: np.random.Generator,
    spread: float = 3.0,
) -> np.ndarray:
    """Gaussian blobs around one random center per class."""
    centers = rng.normal(0.0, spread, size=(num_classes, dim))
    noise = rng.normal(0.0, 1.0, size=(len(labels), dim))
    return centers[np.asarray(labels, dtype=int)] + noise


def project_2d(embeddings: np.ndarray, random_state: int) -> np.ndarray:
    """PCA to two components, zero-padded when fewer are available."""
    n_samples, n_features = embeddings.shape
    if n_samples < 2:
        return np.zeros((n_samples, 2))
    n_components = min(2, n_samples, n_features)
    coords = PCA(n_components=n_components, random_state=random_state).fit_transform(embeddings)
    if n_components < 2:
        coords = np.hstack([coords, np.zeros((n_samples, 2 - n_components))])
    return coords


def cluster_embeddings(
    embeddings: np.ndarray,
    labels: np.ndarray,
    class_names: Sequence[str],
    random_state: int,
) -> Tuple[ClusterProjection, ...]:
    """
    Clusters embeddings with every method in CLUSTER_METHODS.

    Args:
        embeddings: (n_samples, dim) feature matrix.
        labels: True class indices into ``class_names``.
        class_names: Ordered class list.
        random_state: Seed for PCA and K-Means.

    Returns:
        One ClusterProjection per method, in CLUSTER_METHODS order.
    """
    n_clusters = max(1, min(len(class_names), len(embeddings)))
    coords = project_2d(embeddings, random_state)

    if len(embeddings) < 2:
        single = np.zeros(len(embeddings), dtype=int)
        assignments = {method: single for method in CLUSTER_METHODS}
    else:
        assignments = {
            "hierarchical": AgglomerativeClustering(n_clusters=n_clusters).fit_predict(embeddings),
            "kmeans": KMeans(
                n_clusters=n_clusters, n_init=10, random_state=random_state
            ).fit_predict(embeddings),
        }

    projections: List[ClusterProjection] = []
    for method in CLUSTER_METHODS:
        clusters = assignments[method]
        points = tuple(
            ClusterPoint(
                x=float(coords[i, 0]),
                y=float(coords[i, 1]),
                cluster=int(clusters[i]),
                label=class_names[int(labels[i])],
            )
            for i in range(len(labels))
        )
        projections.append(
            ClusterProjection(
                method=method,
                points=points,
                ari=float(adjusted_rand_score(labels, clusters)),
                nmi=float(normalized_mutual_info_score(labels, clusters)),
            )
        )
    return tuple(projections)


def augment_embeddings(
    embeddings: np.ndarray,
    labels: np.ndarray,
    class_names: Sequence[str],
    augmentations_per_point: int,
    rng: np.random.Generator,
    random_state: int,
    jitter: float = 0.35,
) -> Tuple[AugmentedPoint, ...]:
    """
    Projects original embeddings together with jittered augmented copies.

    Originals come first, each followed by its augmented variants.
    """
    rows: List[np.ndarray] = []
    meta: List[Tuple[int, bool]] = []
    for idx, vector in enumerate(embeddings):
        rows.append(vector)
        meta.append((idx, False))
        for _ in range(augmentations_per_point):
            rows.append(vector + rng.normal(0.0, jitter, size=vector.shape))
            meta.append((idx, True))

    coords = project_2d(np.vstack(rows), random_state)
    return tuple(
        AugmentedPoint(
            x=float(coords[i, 0]),
            y=float(coords[i, 1]),
            label=class_names[int(labels[src])],
            is_augmented=augmented,
            source_index=src,
        )
        for i, (src, augmented) in enumerate(meta)
    )
