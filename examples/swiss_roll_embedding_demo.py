#!/usr/bin/env python

"""
Swiss Roll Embedding Demo - embedax.

This script unrolls a swiss roll with several manifold learning methods and
plots the two-dimensional embeddings side by side, colored by the position
along the roll.
"""

import logging
import os
import sys

# Ensure embedax can be imported in uv environment
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import matplotlib.pyplot as plt
import numpy as np

import embedax as ex

METHODS = [
    ("pca", {}),
    ("isomap", {"number_of_neighbors": 10}),
    ("klle", {"number_of_neighbors": 12}),
    ("hlle", {"number_of_neighbors": 12}),
    ("laplacian_eigenmaps", {"number_of_neighbors": 10, "gaussian_kernel_width": 20.0}),
    ("tsne", {"sne_perplexity": 30.0, "max_iteration": 750}),
]


def generate_swiss_roll(n_points=800, noise_level=0.05, seed=0):
    """Sample points on a swiss roll in R^3 together with their roll parameter."""
    rng = np.random.default_rng(seed)
    t = 1.5 * np.pi * (1.0 + 2.0 * rng.uniform(size=n_points))
    height = 21.0 * rng.uniform(size=n_points)
    X = np.column_stack([t * np.cos(t), height, t * np.sin(t)])
    return X + noise_level * rng.normal(size=X.shape), t


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    X, t = generate_swiss_roll()
    data, callbacks = ex.from_array(X)

    fig, axes = plt.subplots(2, 3, figsize=(15, 9))
    for ax, (method, parameters) in zip(axes.ravel(), METHODS):
        result = ex.embed(
            data,
            callbacks.kernel,
            callbacks.distance,
            callbacks.feature_vector,
            method=method,
            target_dimension=2,
            **parameters,
        )
        embedding = np.asarray(result.embedding)
        ax.scatter(embedding[:, 0], embedding[:, 1], c=t, cmap="Spectral", s=8)
        ax.set_title(ex.get_method_name(ex.Method(method)))
        ax.set_xticks([])
        ax.set_yticks([])

    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
