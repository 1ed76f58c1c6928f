from __future__ import annotations

import pytest

from bonding_vault.core import linear_curve, logarithmic_curve, quadratic_curve
from bonding_vault.core.curve_dispatch import CurveKind, CurveParams, PricingCurve, curve_for


class TestCurveKind:
    def test_parse_is_case_insensitive(self) -> None:
        assert CurveKind.parse("Quadratic") is CurveKind.QUADRATIC
        assert CurveKind.parse(" logarithmic ") is CurveKind.LOGARITHMIC
        assert CurveKind.parse(CurveKind.LINEAR) is CurveKind.LINEAR

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="unsupported curve kind"):
            CurveKind.parse("cubic")
        with pytest.raises(TypeError):
            CurveKind.parse(1)  # type: ignore[arg-type]


class TestPricingCurve:
    def test_kind_is_coerced_from_string(self) -> None:
        curve = PricingCurve(kind="quadratic")  # type: ignore[arg-type]
        assert curve.kind is CurveKind.QUADRATIC

    def test_rejects_bad_params(self) -> None:
        with pytest.raises(TypeError):
            PricingCurve(params="fast")  # type: ignore[arg-type]
        with pytest.raises(ValueError):
            CurveParams(log_scale=0)

    def test_max_amount_per_kind(self) -> None:
        assert curve_for("linear").max_amount == linear_curve.LINEAR_MAX_AMOUNT
        assert curve_for("quadratic").max_amount == quadratic_curve.QUADRATIC_MAX_AMOUNT
        assert curve_for("logarithmic").max_amount == logarithmic_curve.LOGARITHMIC_MAX_AMOUNT

    def test_dispatch_reaches_each_variant(self) -> None:
        assert curve_for("linear").shares_for_deposit(3, 10, 5) == 1
        assert curve_for("quadratic").shares_for_deposit(10, 1000, 1000) == 2
        assert curve_for("quadratic").assets_for_redeem(12, 2000, 2) == 842

    def test_log_scale_is_threaded_through(self) -> None:
        curve = curve_for("logarithmic", log_scale=1)
        assert curve.params.log_scale == 1
        assert curve.shares_for_deposit(1, 1, 9) == 3
        assert curve.assets_for_redeem(4, 10, 1) == 3

    def test_headroom_dispatch(self) -> None:
        assert curve_for("quadratic").deposit_headroom(2**170, 1) == 3
        assert curve_for("logarithmic").deposit_headroom(2**255, 1) == 0

    def test_curves_are_values(self) -> None:
        assert curve_for("linear") == PricingCurve()
        assert curve_for("logarithmic", log_scale=5) != curve_for("logarithmic", log_scale=6)
