import warnings

import numpy as np
import pandas as pd
import pytest
import matplotlib.pyplot as plt

from fridge import FocusedRidge, FridgeResult, config, fridge
from fridge.errors import InvalidDimension, UnstableRisk
from fridge.plotting import curve_endpoint


def test_orthogonal_design_recovers_focus_contribution(orthogonal_data):
    X, y, x0 = orthogonal_data
    result = fridge(X, y, x0, plug_in="OLS", plot_curve=False)

    assert isinstance(result, FridgeResult)
    for tuning in (result.focused_tuning, result.loocv_tuning):
        assert np.isfinite(tuning)
        assert tuning >= 0
    assert result.focused_prediction == pytest.approx(1.0, abs=0.1)
    assert result.loocv_prediction == pytest.approx(1.0, abs=0.1)


@pytest.mark.parametrize("plug_in", ["OLS", "RLOOCV"])
def test_repeated_calls_are_identical(random_data, plug_in):
    X, y, x0 = random_data
    first = fridge(X, y, x0, plug_in=plug_in)
    second = fridge(X, y, x0, plug_in=plug_in)
    assert first == second


def test_high_dimensional_data_with_ridge_plug_in(high_dim_data):
    X, y, x0 = high_dim_data
    model = FocusedRidge(plug_in="RLOOCV").fit(X, y, x0)

    assert model.loocv_tuning_ > 0
    assert model.focused_tuning_ >= 0
    assert np.isfinite(model.focused_prediction_)
    assert np.isfinite(model.loocv_prediction_)
    assert model.sigma2_hat_ > 0


def test_ols_plug_in_fails_before_decomposition(high_dim_data, monkeypatch):
    X, y, x0 = high_dim_data

    def no_svd(X):
        raise AssertionError("SVD must not be computed")

    monkeypatch.setattr("fridge.model.compute_svd", no_svd)
    with pytest.raises(InvalidDimension):
        fridge(X, y, x0, plug_in="OLS")


def test_square_design_rejected_for_ols():
    X = np.eye(4)
    with pytest.raises(InvalidDimension):
        fridge(X, np.ones(4), np.ones(4), plug_in="OLS")


@pytest.mark.parametrize("bad", ["y", "x0"])
def test_dimension_mismatch(random_data, bad):
    X, y, x0 = random_data
    if bad == "y":
        y = y[:-1]
    else:
        x0 = np.append(x0, 1.0)
    with pytest.raises(InvalidDimension):
        FocusedRidge().fit(X, y, x0)


def test_nan_input_is_rejected(random_data):
    X, y, x0 = random_data
    y = y.copy()
    y[3] = np.nan
    with pytest.raises(ValueError):
        FocusedRidge().fit(X, y, x0)


def test_unknown_plug_in(random_data):
    X, y, x0 = random_data
    with pytest.raises(ValueError):
        FocusedRidge(plug_in="bootstrap").fit(X, y, x0)


def test_pandas_inputs_match_arrays(random_data):
    X, y, x0 = random_data
    columns = [f"feature_{i}" for i in range(X.shape[1])]
    from_arrays = fridge(X, y, x0)
    from_frames = fridge(pd.DataFrame(X, columns=columns), pd.Series(y), pd.Series(x0, index=columns))
    assert from_arrays == from_frames


def test_fitted_attributes_agree(random_data):
    X, y, x0 = random_data
    model = FocusedRidge().fit(X, y, x0)

    assert model.predict(x0)[0] == pytest.approx(model.focused_prediction_)
    assert model.predict(x0, tuning="loocv")[0] == pytest.approx(model.loocv_prediction_)
    assert model.risk_function_(model.focused_tuning_) == pytest.approx(model.focused_risk_)
    assert model.curve_endpoint_ == curve_endpoint(model.focused_tuning_)
    assert list(model.start_results_.columns) == ["start", "tuning", "value", "converged"]
    assert len(model.start_results_) == 7
    assert model.focused_risk_ == model.start_results_["value"].min()

    with pytest.raises(ValueError):
        model.predict(x0, tuning="gcv")
    with pytest.raises(InvalidDimension):
        model.predict(np.ones((2, 3)))


def test_focused_tuning_has_no_larger_focused_risk_than_loocv(random_data):
    X, y, x0 = random_data
    summary = FocusedRidge().fit(X, y, x0).get_tuning_summary()

    focused = summary.set_index("criterion").loc["focused"]
    loocv = summary.set_index("criterion").loc["loocv"]
    assert focused["focused_mse"] <= loocv["focused_mse"] + 1e-12
    assert focused["focused_mse"] == pytest.approx(focused["bias_sq"] + focused["variance"])


def test_unfitted_model_raises():
    with pytest.raises(ValueError):
        FocusedRidge().result_


def test_risk_curve_and_plot(random_data):
    X, y, x0 = random_data
    model = FocusedRidge().fit(X, y, x0)

    curve = model.get_risk_curve(n_points=50)
    assert list(curve.columns) == ["tuning", "mse"]
    assert len(curve) == 50
    assert curve["tuning"].iloc[0] == 0.0
    assert curve["tuning"].iloc[-1] == pytest.approx(model.curve_endpoint_)
    assert (curve["mse"] >= 0).all()

    fig, ax = plt.subplots()
    returned = model.plot_curve(ax=ax, n_points=50)
    assert returned is ax
    assert ax.get_xlabel() == "Tuning parameter"
    assert ax.get_ylabel() == "MSE"
    assert ax.get_title() == f"The minimum MSE is given at {round(model.focused_tuning_, 1)}"
    assert len(ax.lines) == 2
    plt.close(fig)


def test_plotting_does_not_change_result(random_data):
    X, y, x0 = random_data
    fig, ax = plt.subplots()
    plotted = fridge(X, y, x0, plot_curve=True, ax=ax)
    plt.close(fig)
    assert plotted == fridge(X, y, x0, plot_curve=False)


def test_curve_endpoint_rule():
    assert curve_endpoint(10.0) == 20.0
    assert curve_endpoint(4e4) == 8e4
    assert curve_endpoint(1e5) == 1e5
    assert curve_endpoint(3e6) == 1e5


def test_report_prints_summary(random_data, capsys):
    X, y, x0 = random_data
    FocusedRidge().fit(X, y, x0).report()
    out = capsys.readouterr().out
    assert "Focused ridge summary" in out
    assert "Plug-in: OLS" in out


def test_save_and_load(random_data, tmp_path):
    X, y, x0 = random_data
    model = FocusedRidge(plug_in="RLOOCV").fit(X, y, x0)
    path = tmp_path / "fridge.joblib"
    model.save_model(path)

    loaded = FocusedRidge.load_model(path)
    assert loaded.result_ == model.result_
    assert loaded.risk_function_(3.0) == model.risk_function_(3.0)


def test_zero_column_with_ols_plug_in(rank_deficient_data):
    X, y, x0 = rank_deficient_data
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        model = FocusedRidge(plug_in="OLS").fit(X, y, x0)

    assert model.focused_risk_ < config.UNSTABLE_RISK
    assert (model.start_results_["value"] < config.UNSTABLE_RISK).all()
    assert np.isfinite(model.focused_tuning_) and model.focused_tuning_ >= 0
    assert np.isfinite(model.focused_prediction_)
    assert model.coef_[2] == pytest.approx(0.0, abs=1e-12)


def test_fit_raises_when_focused_risk_is_unstable_everywhere(random_data, monkeypatch):
    X, y, x0 = random_data
    monkeypatch.setattr(
        "fridge.model.make_focused_risk", lambda *args, **kwargs: (lambda lam: np.nan)
    )
    model = FocusedRidge(plug_in="OLS", starts=[10.0, 100.0])
    with pytest.raises(UnstableRisk):
        model.fit(X, y, x0)
    assert not hasattr(model, "focused_tuning_")
