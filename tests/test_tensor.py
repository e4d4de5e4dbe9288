import math

import numpy as np
import pytest

from drlcore.tensor import MAX_DIMS, Tensor, TensorBatch


def test_new_tensor_is_zeroed_with_shape():
    t = Tensor((2, 3))
    assert t.shape == (2, 3)
    assert t.dims == 2
    assert t.size == 6
    assert t.data.tolist() == [0.0] * 6


def test_default_tensor_is_empty():
    t = Tensor()
    assert t.size == 0
    assert t.dims == 0
    assert math.isnan(t.mean())


def test_too_many_dimensions_rejected():
    with pytest.raises(ValueError, match="Too many dimensions"):
        Tensor([1] * (MAX_DIMS + 1))


def test_reshape_resets_values():
    t = Tensor((2, 2))
    t.fill(5.0)
    t.reshape((3,))
    assert t.shape == (3,)
    assert t.data.tolist() == [0.0, 0.0, 0.0]


def test_element_access_row_major():
    t = Tensor((2, 3))
    t[1, 2] = 9.0
    assert t[1, 2] == 9.0
    assert t[5] == 9.0
    assert t.data[5] == 9.0


def test_three_dimensional_access_round_trip():
    t = Tensor((2, 3, 4))
    for i in range(2):
        for j in range(3):
            for k in range(4):
                t[i, j, k] = i * 100 + j * 10 + k
    assert t[1, 2, 3] == 123.0
    assert len(set(t.data.tolist())) == t.size


def test_index_errors():
    t = Tensor((2, 2))
    t[1, 1] = 3.0
    with pytest.raises(IndexError):
        t[2, 0]
    with pytest.raises(IndexError):
        t[0, 0, 0]
    with pytest.raises(IndexError):
        t[4]
    assert t[1, 1] == 3.0
    assert t[3] == 3.0
    assert t.data.tolist() == [0.0, 0.0, 0.0, 3.0]


def test_copy_is_independent():
    t = Tensor((2,))
    t.fill(1.0)
    c = t.copy()
    c[0] = 7.0
    assert t[0] == 1.0
    assert c.shape == t.shape


def test_inplace_add_and_multiply():
    a = Tensor((2, 2))
    a.fill(1.5)
    b = Tensor((4,))
    b.fill(0.5)
    a += b
    assert a.data.tolist() == [2.0] * 4
    a *= 3
    assert a.data.tolist() == [6.0] * 4


def test_add_size_mismatch():
    a = Tensor((2, 2))
    with pytest.raises(ValueError, match="Size mismatch"):
        a += Tensor((3,))


def test_apply_maps_every_value():
    t = Tensor((3,))
    t.fill(-2.0)
    result = t.apply(abs)
    assert result is t
    assert t.data.tolist() == [2.0, 2.0, 2.0]


def test_matmul_with_identity():
    a = Tensor((2, 3))
    a.random_normal()
    eye = Tensor((3, 3))
    for i in range(3):
        eye[i, i] = 1.0
    product = a.matmul(eye)
    assert product.shape == (2, 3)
    assert np.allclose(product.data, a.data)


def test_matmul_matches_numpy():
    a = Tensor((3, 4))
    b = Tensor((4, 2))
    a.random_normal()
    b.random_normal()
    result = a @ b
    expected = a.data.reshape(3, 4) @ b.data.reshape(4, 2)
    assert result.shape == (3, 2)
    assert np.allclose(result.data.reshape(3, 2), expected)


def test_matmul_errors():
    with pytest.raises(ValueError, match="2D"):
        Tensor((3,)).matmul(Tensor((3, 1)))
    with pytest.raises(ValueError, match="Incompatible"):
        Tensor((2, 3)).matmul(Tensor((2, 3)))


def test_statistics_of_constant_tensor():
    t = Tensor((2, 2))
    t.fill(2.0)
    assert t.mean() == 2.0
    assert t.variance() == 0.0
    assert t.norm() == 4.0


def test_statistics_agree_with_numpy():
    t = Tensor((50,))
    t.random_normal(1.0, 2.0)
    assert t.mean() == pytest.approx(float(np.mean(t.data)))
    assert t.variance() == pytest.approx(float(np.var(t.data)))
    assert t.norm() == pytest.approx(float(np.linalg.norm(t.data)))


def test_random_normal_parameters():
    t = Tensor((100, 100))
    t.random_normal(3.0, 0.5)
    assert abs(t.mean() - 3.0) < 0.05
    assert abs(math.sqrt(t.variance()) - 0.5) < 0.05


def test_xavier_init_within_limit():
    t = Tensor((20, 30))
    t.xavier_init(4, 6)
    limit = math.sqrt(6.0 / 10)
    assert np.all(np.abs(t.data) <= limit)
    assert t.variance() > 0.0


def test_tensor_batch_capacity():
    batch = TensorBatch(2)
    first = Tensor((1,))
    batch.add(first)
    batch.add(Tensor((2,)))
    assert len(batch) == 2
    assert batch[0] is first
    assert [t.size for t in batch] == [1, 2]
    with pytest.raises(RuntimeError, match="Batch is full"):
        batch.add(Tensor((1,)))