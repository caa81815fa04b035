import pytest

from facedome.tracking.smoother import AxisNoise, KalmanState


NOISE_SETTINGS = [(2.0, 15.0), (1.0, 15.0), (2.0, 10.0), (0.01, 500.0), (50.0, 0.1)]


def test_seed_starts_at_measurement_and_runs_warm_up_update():
    state = KalmanState.seed(100.0, AxisNoise(process_noise=2.0, measurement_noise=15.0))

    assert state.estimate == pytest.approx(100.0)
    # P: 1.0 + 2.0 = 3.0, gain = 3 / 18, then P = (1 - gain) * 3
    assert state.gain == pytest.approx(3.0 / 18.0)
    assert state.error_covariance == pytest.approx(2.5)


def test_update_is_pure_and_moves_toward_measurement():
    seeded = KalmanState.seed(100.0, AxisNoise(process_noise=2.0, measurement_noise=15.0))

    updated, value = seeded.update(110.0)

    assert seeded.estimate == pytest.approx(100.0)
    assert seeded.error_covariance == pytest.approx(2.5)
    assert value == updated.estimate
    assert value == pytest.approx(100.0 + (4.5 / 19.5) * 10.0)


@pytest.mark.parametrize("process_noise,measurement_noise", NOISE_SETTINGS)
def test_constant_input_converges_without_overshoot(process_noise, measurement_noise):
    state = KalmanState.seed(0.0, AxisNoise(process_noise, measurement_noise))
    target = 40.0
    previous = state.estimate
    for _ in range(5000):
        state, value = state.update(target)
        assert previous <= value <= target + 1e-9
        previous = value
    assert state.estimate == pytest.approx(target, abs=1e-3)


@pytest.mark.parametrize("process_noise,measurement_noise", NOISE_SETTINGS)
def test_repeated_measurement_reaches_covariance_fixed_point(process_noise, measurement_noise):
    state = KalmanState.seed(25.0, AxisNoise(process_noise, measurement_noise))
    for _ in range(5000):
        state, value = state.update(25.0)
        assert value == pytest.approx(25.0)

    following, _ = state.update(25.0)
    assert following.error_covariance == pytest.approx(state.error_covariance, rel=1e-6)
    assert following.gain == pytest.approx(state.gain, rel=1e-6)
    assert 0.0 < following.gain < 1.0


@pytest.mark.parametrize("process_noise,measurement_noise", [(0.0, 15.0), (2.0, 0.0), (-1.0, 5.0)])
def test_axis_noise_rejects_non_positive_values(process_noise, measurement_noise):
    with pytest.raises(ValueError):
        AxisNoise(process_noise=process_noise, measurement_noise=measurement_noise)


@pytest.mark.parametrize(
    "process_noise,measurement_noise,error_covariance",
    [(1.0, -2.0, 1.0), (0.0, 15.0, 1.0), (2.0, float("nan"), 1.0), (float("inf"), 15.0, 1.0), (2.0, 15.0, -1.0)],
)
def test_kalman_state_rejects_invalid_noise_and_covariance(process_noise, measurement_noise, error_covariance):
    with pytest.raises(ValueError):
        KalmanState(
            estimate=0.0,
            error_covariance=error_covariance,
            process_noise=process_noise,
            measurement_noise=measurement_noise,
        )


def test_directly_built_state_updates_like_seeded_state():
    state = KalmanState(estimate=0.0, error_covariance=1.0, process_noise=1.0, measurement_noise=2.0)

    updated, value = state.update(5.0)

    # P = 2, gain = 2 / 4
    assert updated.gain == pytest.approx(0.5)
    assert value == pytest.approx(2.5)
    assert updated.error_covariance == pytest.approx(1.0)
