import numpy as np

from subsetcv.data import check_matrix_rank, print_matrix_diagnostics, find_constant_columns


def test_full_rank_design(linear_data):
    X, _ = linear_data
    info = check_matrix_rank(X)

    assert info["is_full_rank"]
    assert info["rank"] == X.shape[1]
    assert np.isfinite(info["condition_number"])


def test_dependent_columns_reported(linear_data, capsys):
    X, _ = linear_data
    X = np.column_stack([X, X[:, 0] - X[:, 1]])
    info = print_matrix_diagnostics(X, "dependent")

    assert not info["is_full_rank"]
    assert info["rank"] == X.shape[1] - 1
    assert "not full rank" in capsys.readouterr().out


def test_constant_column_costs_a_rank_after_centering():
    rng = np.random.default_rng(2)
    X = np.column_stack([rng.standard_normal(30), np.full(30, 3.0)])
    assert check_matrix_rank(X)["rank"] == 1


def test_find_constant_columns():
    X = np.array([[1.0, 0.0, 2.0],
                  [1.0, 1.0, 2.0],
                  [1.0, 0.0, 2.0]])
    assert list(find_constant_columns(X)) == [0, 2]
