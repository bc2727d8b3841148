import numpy as np
import pytest

from starry_string.audio_engine import AudioEngine, AudioState

SR = 8000


def make_engine(stream_factory, **kwargs):
    options = dict(
        sample_rate=SR,
        reverb_duration=0.1,
        voice_duration=0.1,
        block_size=256,
        stream_factory=stream_factory,
        rng=np.random.default_rng(0),
    )
    options.update(kwargs)
    return AudioEngine(**options)


def test_nothing_plays_before_initialize(stream_factory):
    engine = make_engine(stream_factory)
    assert engine.state is AudioState.UNINITIALIZED
    assert not engine.ready
    assert engine.play_pluck(0.5) is None
    assert engine.active_voices == 0
    assert stream_factory.created == []


def test_initialize_builds_one_suspended_stream(stream_factory):
    engine = make_engine(stream_factory)
    assert engine.initialize() is True
    assert engine.initialize() is True

    assert len(stream_factory.created) == 1
    stream = stream_factory.created[0]
    assert stream.kwargs["samplerate"] == SR
    assert stream.kwargs["channels"] == 2
    assert stream.kwargs["dtype"] == "float32"
    assert engine.state is AudioState.SUSPENDED
    assert not stream.active


def test_resume_and_suspend(stream_factory):
    engine = make_engine(stream_factory)
    engine.resume()  # not initialized yet: ignored
    assert engine.state is AudioState.UNINITIALIZED

    engine.initialize()
    engine.resume()
    stream = stream_factory.created[0]
    assert engine.state is AudioState.RUNNING
    assert stream.active

    engine.suspend()
    assert engine.state is AudioState.SUSPENDED
    assert not stream.active


@pytest.mark.parametrize(
    "position, expected", [(0.0, 200.0), (1.0, 800.0), (0.5, 500.0)],
)
def test_play_pluck_returns_quantised_frequency(stream_factory, position, expected):
    engine = make_engine(stream_factory)
    engine.initialize()
    assert engine.play_pluck(position) == pytest.approx(expected)


def test_custom_pitch_mapping(stream_factory):
    engine = make_engine(
        stream_factory, base_freq=110, freq_range=440, freq_step=55,
    )
    engine.initialize()
    assert engine.play_pluck(0.0) == pytest.approx(110)
    assert engine.play_pluck(1.0) == pytest.approx(550)
    assert engine.frequency_for(0.5) == pytest.approx(330)


def test_voices_are_independent_and_self_terminating(stream_factory):
    engine = make_engine(stream_factory)
    engine.initialize()
    engine.resume()

    engine.play_pluck(0.0)
    engine.play_pluck(1.0)
    assert engine.active_voices == 2

    block = engine.render_block(256)
    assert block.shape == (256, 2)
    assert block.dtype == np.float32
    assert np.abs(block).max() > 0

    # 0.1 s voice plus 0.1 s reverb tail at 8 kHz is under 1600 samples
    for _ in range(7):
        engine.render_block(256)
    assert engine.active_voices == 0
    assert np.all(engine.render_block(256) == 0)


def test_voices_queued_while_suspended_play_on_resume(stream_factory):
    engine = make_engine(stream_factory)
    engine.initialize()
    assert engine.play_pluck(0.25) is not None
    assert engine.active_voices == 1

    engine.resume()
    assert np.abs(engine.render_block(256)).max() > 0


def test_callback_fills_output_buffer(stream_factory):
    engine = make_engine(stream_factory)
    engine.initialize()
    engine.resume()
    engine.play_pluck(0.5)

    callback = stream_factory.created[0].kwargs["callback"]
    outdata = np.zeros((256, 2), dtype=np.float32)
    callback(outdata, 256, None, None)

    assert np.abs(outdata).max() > 0
    assert np.abs(outdata).max() <= 1.0


def test_master_gain_scales_output(stream_factory):
    engine = make_engine(stream_factory, master_gain=0.0)
    engine.initialize()
    engine.play_pluck(0.5)
    assert np.all(engine.render_block(256) == 0)


def test_stop_all(stream_factory):
    engine = make_engine(stream_factory)
    engine.initialize()
    engine.play_pluck(0.1)
    engine.play_pluck(0.9)
    engine.stop_all()
    assert engine.active_voices == 0


def test_shutdown_is_idempotent_and_final(stream_factory):
    engine = make_engine(stream_factory)
    engine.initialize()
    engine.resume()
    engine.play_pluck(0.5)

    engine.shutdown()
    engine.shutdown()

    stream = stream_factory.created[0]
    assert engine.state is AudioState.CLOSED
    assert stream.closed and not stream.active
    assert engine.active_voices == 0

    assert engine.play_pluck(0.5) is None
    assert engine.initialize() is False
    assert len(stream_factory.created) == 1


def test_shutdown_before_initialize(stream_factory):
    engine = make_engine(stream_factory)
    engine.shutdown()
    assert engine.state is AudioState.CLOSED


def test_stream_failure_leaves_engine_uninitialized(capsys):
    def broken_factory(**kwargs):
        raise RuntimeError("no output device")

    engine = make_engine(broken_factory)
    assert engine.initialize() is False
    assert engine.state is AudioState.UNINITIALIZED
    assert engine.play_pluck(0.5) is None
    assert "no output device" in capsys.readouterr().out


@pytest.mark.parametrize(
    "kwargs",
    [{"sample_rate": 0}, {"freq_step": 0}, {"voice_duration": -1}],
)
def test_rejects_invalid_config(stream_factory, kwargs):
    with pytest.raises(ValueError):
        make_engine(stream_factory, **kwargs)
