import math
from dataclasses import replace

import pytest

from models import IndicatorSnapshot, Level, LevelKind, Recommendation
from scorer import score_detailed, score_lightweight, score_snapshot


def six_of_eight():
    """Six full credits, zero on the 52-week and S/R factors."""
    return IndicatorSnapshot(
        price=100.0,
        volume=1_500_000,
        rsi=25.0,
        macd=1.0, macd_signal=0.5,
        prev_macd=0.2, prev_macd_signal=0.4,
        sma20=95.0, sma50=90.0, sma200=80.0,
        bb_position=10.0,
        volume_ratio=1.5,
        distance_from_high=5.0,
        distance_from_low=40.0,
        resistance=(Level(101.0, LevelKind.RESISTANCE, 2),),
    )


class TestRecommendationMapping:
    @pytest.mark.parametrize("score,expected", [
        (100, Recommendation.STRONG_BUY),
        (75.0, Recommendation.STRONG_BUY),
        (74.99, Recommendation.MODERATE_BUY),
        (50, Recommendation.MODERATE_BUY),
        (49.9, Recommendation.HOLD),
        (25, Recommendation.HOLD),
        (24.9, Recommendation.AVOID),
        (-40, Recommendation.AVOID),
    ])
    def test_thresholds(self, score, expected):
        assert Recommendation.from_score(score) is expected


class TestDetailedProfile:
    def test_six_credits_is_exactly_75_strong_buy(self):
        card = score_detailed(six_of_eight())
        assert card.score == 75.0
        assert card.recommendation is Recommendation.STRONG_BUY
        assert card.signals == (
            "RSI Oversold",
            "MACD Bullish Crossover",
            "Strong Uptrend",
            "Long-term Uptrend",
            "Near Lower BB",
            "High Volume",
        )

    def test_just_under_six_credits_is_moderate_buy(self):
        card = score_detailed(replace(six_of_eight(), rsi=35.0))
        assert card.score == pytest.approx(5.5 / 8 * 100)
        assert card.score < 75
        assert card.recommendation is Recommendation.MODERATE_BUY
        assert card.signals[0] == "RSI Low"

    def test_macd_above_signal_without_fresh_cross(self):
        card = score_detailed(replace(six_of_eight(), prev_macd=0.6, prev_macd_signal=0.4))
        assert "MACD Bullish" in card.signals
        assert card.score == pytest.approx(5.5 / 8 * 100)

    def test_undefined_moving_averages_land_in_mixed_branch(self):
        snap = replace(six_of_eight(), sma20=None, sma50=None, sma200=None)
        card = score_detailed(snap)
        assert "Strong Uptrend" not in card.signals
        assert "Long-term Uptrend" not in card.signals
        assert card.score == pytest.approx(4.5 / 8 * 100)

    def test_downtrend_gets_no_ma_credit(self):
        snap = replace(six_of_eight(), sma20=105.0, sma50=110.0)
        assert score_detailed(snap).score == pytest.approx(5 / 8 * 100)

    def test_bollinger_half_credit_up_to_60_inclusive(self):
        base = six_of_eight()
        at_60 = score_detailed(replace(base, bb_position=60.0)).score
        above_60 = score_detailed(replace(base, bb_position=60.1)).score
        assert at_60 - above_60 == pytest.approx(0.5 / 8 * 100)

    def test_undefined_bollinger_position_gets_nothing(self):
        base = six_of_eight()
        assert score_detailed(replace(base, bb_position=None)).score == pytest.approx(5 / 8 * 100)

    def test_near_support_full_credit(self):
        snap = replace(
            six_of_eight(),
            support=(Level(99.0, LevelKind.SUPPORT, 3),),
            resistance=(),
        )
        card = score_detailed(snap)
        assert card.signals[-1] == "Near Support"
        assert card.score == pytest.approx(7 / 8 * 100)

    def test_no_levels_nearby_is_half_credit(self):
        snap = replace(six_of_eight(), resistance=(Level(120.0, LevelKind.RESISTANCE),))
        assert score_detailed(snap).score == pytest.approx(6.5 / 8 * 100)

    def test_fifty_two_week_credits(self):
        base = six_of_eight()
        far = score_detailed(replace(base, distance_from_high=25.0))
        mid = score_detailed(replace(base, distance_from_high=15.0))
        assert "Far from High" in far.signals
        assert far.score - mid.score == pytest.approx(0.5 / 8 * 100)

    def test_nan_rsi_gets_no_credit(self):
        card = score_detailed(replace(six_of_eight(), rsi=math.nan))
        assert card.score == pytest.approx(5 / 8 * 100)

    def test_empty_snapshot_earns_only_neutral_half_credits(self):
        empty = IndicatorSnapshot(price=10.0, volume=0)
        card = score_detailed(empty)
        # only the "mixed MA" and "no resistance nearby" half credits apply
        assert card.score == pytest.approx(1 / 8 * 100)
        assert card.signals == ()


class TestLightweightProfile:
    def test_all_bonuses(self):
        snap = IndicatorSnapshot(
            price=100.0, volume=1,
            rsi=25.0, macd=0.5,
            sma20=98.0, sma50=95.0, sma200=90.0,
            volume_ratio=1.3, bb_position=10.0,
            distance_from_low=8.0, distance_from_high=35.0,
            support=(Level(99.0, LevelKind.SUPPORT),),
        )
        card = score_lightweight(snap)
        assert card.score == 25 + 20 + 20 + 15 + 10 + 15 + 10 + 10
        assert card.recommendation is Recommendation.STRONG_BUY
        assert card.signals == (
            "RSI Oversold", "Positive MACD", "Above Short-term MAs",
            "Long-term Uptrend", "High Volume", "Near Lower BB",
            "Near Support", "Recovery Potential",
        )

    def test_penalties(self):
        snap = IndicatorSnapshot(price=100.0, volume=1, rsi=75.0, bb_position=90.0)
        card = score_lightweight(snap)
        assert card.score == -25
        assert card.signals == ("RSI Overbought",)
        assert card.recommendation is Recommendation.AVOID

    def test_support_must_be_within_two_percent_above(self):
        base = IndicatorSnapshot(price=100.0, volume=1)
        near = replace(base, support=(Level(98.5, LevelKind.SUPPORT),))
        far = replace(base, support=(Level(97.0, LevelKind.SUPPORT),))
        assert score_lightweight(near).score == 10
        assert score_lightweight(far).score == 0

    def test_undefined_inputs_contribute_nothing(self):
        card = score_lightweight(IndicatorSnapshot(price=50.0, volume=1000, rsi=math.nan))
        assert card.score == 0
        assert card.signals == ()


def test_profile_dispatch():
    snap = six_of_eight()
    assert score_snapshot(snap, "detailed") == score_detailed(snap)
    assert score_snapshot(snap, "lightweight") == score_lightweight(snap)
    with pytest.raises(ValueError):
        score_snapshot(snap, "aggressive")
