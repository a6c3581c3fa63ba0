"""Tests for the embedding dispatcher."""

import logging

import numpy as np
import pytest

import embedax.core.eigen
import embedax.methods
from embedax import (
    CancelledError,
    EigendecompositionError,
    Method,
    MissingParameterError,
    NotEnoughMemoryError,
    ParameterKey,
    ParametersMap,
    UnsupportedMethodError,
    WrongParameterTypeError,
    WrongParameterValueError,
    embed,
    from_array,
)
from embedax.core.methods import EigenMethod


def embed_array(X, **parameters):
    data, callbacks = from_array(X)
    return embed(data, callbacks.kernel, callbacks.distance, callbacks.feature_vector, **parameters)


class TestMethodSelection:
    """Test how the dispatcher reads the method identifier."""

    def test_missing_method(self, blob_data):
        """Test that dispatch without a method fails with missing parameter."""
        with pytest.raises(MissingParameterError) as exc_info:
            embed_array(blob_data)
        assert exc_info.value.parameter_name == "method"

    @pytest.mark.parametrize("method", [3, 2.5, EigenMethod.DENSE, ["pca"]])
    def test_method_of_wrong_type(self, blob_data, method):
        """Test that a non-convertible identifier fails with wrong parameter type."""
        with pytest.raises(WrongParameterTypeError):
            embed_array(blob_data, method=method)

    def test_unknown_method_name(self, blob_data):
        """Test that an unrecognized identifier fails with wrong parameter value."""
        with pytest.raises(WrongParameterValueError):
            embed_array(blob_data, method="principal_curves")

    def test_method_without_implementation(self, blob_data, monkeypatch):
        """Test that a recognized method without implementation is unsupported."""
        monkeypatch.delitem(embedax.methods.IMPLEMENTATIONS, Method.PCA)
        with pytest.raises(UnsupportedMethodError):
            embed_array(blob_data, method=Method.PCA)

    def test_unavailable_backend(self, blob_data, monkeypatch):
        """Test that an explicitly requested but unavailable backend is unsupported."""
        monkeypatch.setattr(embedax.core.eigen, "available_eigen_methods", lambda: [EigenMethod.DENSE])
        with pytest.raises(UnsupportedMethodError):
            embed_array(blob_data, method="pca", eigen_method="arpack")

    def test_mismatched_callback(self, blob_data):
        """Test that a distance callback in the kernel slot is rejected."""
        data, callbacks = from_array(blob_data)
        with pytest.raises(WrongParameterTypeError):
            embed(data, kernel_callback=callbacks.distance, method="kernel_pca")

    def test_missing_callback(self, blob_data):
        """Test that a method needing an absent callback fails with missing parameter."""
        data, callbacks = from_array(blob_data)
        with pytest.raises(MissingParameterError):
            embed(data, distance_callback=callbacks.distance, method="pca")


class TestConfiguration:
    """Test parameter handling around dispatch."""

    def test_caller_map_is_not_mutated(self, blob_data):
        """Test that defaults are applied to a copy of the caller's map."""
        parameters = ParametersMap(method="pca")
        embed_array(blob_data, parameters=parameters)
        assert dict(parameters) == {ParameterKey.METHOD: "pca"}

    def test_plain_mapping_and_keyword_override(self, blob_data):
        """Test that keyword arguments override the parameters mapping."""
        result = embed_array(blob_data, parameters={"method": "pca", "target_dimension": 4}, target_dimension=3)
        assert result.embedding.shape == (40, 3)

    def test_explicit_values_survive_defaults(self, blob_data):
        """Test that caller-set defaults-covered keys are honored."""
        result = embed_array(blob_data, method="pca", target_dimension=1, eigen_method="dense")
        assert result.embedding.shape == (40, 1)
        assert result.metadata["target_dimension"] == 1

    def test_log_line_names_method(self, blob_data, caplog):
        """Test the informational log line emitted before execution."""
        with caplog.at_level(logging.INFO, logger="embedax.api.embed"):
            embed_array(blob_data, method="pca")
        assert "Using Principal Component Analysis method." in caplog.text

    def test_progress_reaches_completion(self, blob_data):
        """Test that progress is reported and ends at 1."""
        reported = []
        embed_array(blob_data, method="pca", progress_function=reported.append)
        assert reported[-1] == 1.0
        assert all(0.0 <= value <= 1.0 for value in reported)


class TestCancellation:
    """Test cooperative cancellation."""

    @pytest.mark.parametrize("method", list(Method))
    def test_cancel_on_first_poll(self, blob_data, method):
        """Test that every method fails with cancelled before producing a matrix."""
        polls = []

        def cancel():
            polls.append(True)
            return True

        with pytest.raises(CancelledError):
            embed_array(blob_data, method=method, cancel_function=cancel)
        assert len(polls) == 1

    def test_cancel_during_iterations(self, blob_data):
        """Test cancellation at a later checkpoint of an iterative method."""
        polls = []

        def cancel():
            polls.append(True)
            return len(polls) > 5

        with pytest.raises(CancelledError):
            embed_array(blob_data, method="spe", max_iteration=50, cancel_function=cancel)


class TestMemoryErrors:
    """Test normalization of out-of-memory conditions."""

    @pytest.mark.parametrize(
        "error",
        [MemoryError(), RuntimeError("RESOURCE_EXHAUSTED: Out of memory allocating 8 GiB")],
    )
    def test_out_of_memory_is_normalized(self, blob_data, monkeypatch, error):
        """Test that allocation failures become not enough memory."""

        def exhausted(data, callbacks, parameters, context):
            raise error

        monkeypatch.setitem(embedax.methods.IMPLEMENTATIONS, Method.PCA, exhausted)
        with pytest.raises(NotEnoughMemoryError):
            embed_array(blob_data, method="pca")

    def test_domain_errors_propagate_unchanged(self, blob_data, monkeypatch):
        """Test that other domain conditions are not wrapped."""

        def failing(data, callbacks, parameters, context):
            raise EigendecompositionError("no convergence", requested=2, order=5)

        monkeypatch.setitem(embedax.methods.IMPLEMENTATIONS, Method.PCA, failing)
        with pytest.raises(EigendecompositionError) as exc_info:
            embed_array(blob_data, method="pca")
        assert exc_info.value.requested == 2

    def test_other_runtime_errors_propagate(self, blob_data, monkeypatch):
        """Test that unrelated runtime errors are not reported as memory errors."""

        def failing(data, callbacks, parameters, context):
            raise RuntimeError("unrelated")

        monkeypatch.setitem(embedax.methods.IMPLEMENTATIONS, Method.PCA, failing)
        with pytest.raises(RuntimeError, match="unrelated"):
            embed_array(blob_data, method="pca")


class TestOrientation:
    """Test the output orientation flag."""

    @pytest.mark.parametrize("method", ["pca", "mds", "landmark_mds", "random_projection"])
    def test_columns_flag_transposes(self, blob_data, method):
        """Test that the flag yields the exact transpose of the row-major result."""
        rows = embed_array(blob_data, method=method, random_seed=3).embedding
        columns = embed_array(
            blob_data, method=method, random_seed=3, output_feature_vectors_are_columns=True
        ).embedding
        assert columns.shape == (rows.shape[1], rows.shape[0])
        np.testing.assert_array_equal(np.asarray(columns), np.asarray(rows).T)
