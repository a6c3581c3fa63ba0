#!/usr/bin/env python

"""
Custom Callbacks Demo - embedax.

The engine never looks at the data itself. This script embeds a list of words
using only a tagged edit-distance callback, then shows progress reporting,
cancellation and out-of-sample projection with a linear method.
"""

import os
import sys

# Ensure embedax can be imported in uv environment
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import numpy as np

import embedax as ex

WORDS = [
    "kitten", "sitting", "mitten", "fitting", "written", "bitten",
    "garden", "harden", "warden", "pardon", "burden", "border",
]


@ex.distance
def edit_distance(a, b):
    """Levenshtein distance between two strings."""
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + (ca != cb)))
        previous = current
    return previous[-1]


def main():
    # Embedding words through the distance callback only
    result = ex.embed(WORDS, distance_callback=edit_distance, method="mds", target_dimension=2)
    print("MDS embedding of words:")
    for word, (x, y) in zip(WORDS, np.asarray(result.embedding)):
        print(f"  {word:>8s}: ({x:+.3f}, {y:+.3f})")

    # Progress reporting
    progress = []
    ex.embed(
        WORDS,
        distance_callback=edit_distance,
        method="spe",
        max_iteration=200,
        progress_function=progress.append,
    )
    print(f"\nSPE reported progress {len(progress)} times, last value {progress[-1]:.2f}")

    # Cooperative cancellation
    try:
        ex.embed(WORDS, distance_callback=edit_distance, method="isomap", cancel_function=lambda: True)
    except ex.CancelledError as e:
        print(f"Isomap cancelled: {e}")

    # Out-of-sample projection with PCA
    rng = np.random.default_rng(0)
    X_train = rng.normal(size=(200, 6)) @ rng.normal(size=(6, 6))
    data, callbacks = ex.from_array(X_train)
    result = ex.embed(data, feature_vector_callback=callbacks.feature_vector, method="pca", target_dimension=2)
    new_sample = rng.normal(size=6)
    print(f"\nPCA eigenvalues: {np.asarray(result.eigenvalues)}")
    print(f"Projection of a new sample: {np.asarray(result.projecting_function(new_sample))}")


if __name__ == "__main__":
    main()
