import json
import sys
import types

import numpy as np
import pytest
import soundfile as sf

from conftest import make_pluck
from guitar_tuner.audio.mock_audio_input import MockAudioInput
from guitar_tuner.cli.main import build_parser, main


@pytest.fixture
def config_dir(tmp_path):
    return str(tmp_path / "config")


def test_note(capsys):
    assert main(["note", "440", "82.41"]) == 0
    out = capsys.readouterr().out
    assert "440.00 Hz -> A4 / LA4" in out
    assert "MIDI 69" in out
    assert "in tune" in out
    assert "82.41 Hz -> E2 / MI2" in out


def test_note_flats_and_reference(capsys):
    assert main(["note", "--flats", "--reference", "432", "458.62"]) == 0
    out = capsys.readouterr().out
    assert "Bb4" in out


def test_note_invalid_frequency(capsys):
    assert main(["note", "0"]) == 0
    assert "0.00 Hz -> ---" in capsys.readouterr().out


def test_note_invalid_reference():
    assert main(["note", "--reference", "0", "440"]) == 2


def test_strings(capsys):
    assert main(["strings"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "S6 E2 (82.41 Hz)",
        "S5 A2 (110.00 Hz)",
        "S4 D3 (146.83 Hz)",
        "S3 G3 (196.00 Hz)",
        "S2 B3 (246.94 Hz)",
        "S1 E4 (329.63 Hz)",
    ]


def test_analyze(tmp_path, config_dir, capsys):
    path = str(tmp_path / "a2.wav")
    tone = make_pluck(110.0, length=3 * 4096)
    sf.write(path, np.concatenate([tone, np.zeros(4096)]), 44100, subtype="FLOAT")

    assert main(["--config-dir", config_dir, "analyze", path]) == 0
    out = capsys.readouterr().out
    assert "A2: 3 blocks" in out
    assert "--   rms: 0.000" in out


def test_analyze_silence(tmp_path, config_dir, capsys):
    path = str(tmp_path / "silence.wav")
    sf.write(path, np.zeros(8192), 44100)
    assert main(["--config-dir", config_dir, "analyze", path]) == 0
    assert "No pitch detected." in capsys.readouterr().out


def test_analyze_missing_file(tmp_path, config_dir):
    assert main(["--config-dir", config_dir, "analyze", str(tmp_path / "nope.wav")]) == 1


def test_analyze_invalid_threshold(tmp_path, config_dir):
    path = str(tmp_path / "silence.wav")
    sf.write(path, np.zeros(4096), 44100)
    assert main(["--config-dir", config_dir, "analyze", path, "--threshold", "2"]) == 2


def test_no_command(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_listen_options():
    args = build_parser().parse_args(
        ["listen", "--device", "2", "--duration", "1.5", "--gain", "3", "--big"]
    )
    assert args.command == "listen"
    assert args.device == 2
    assert args.duration == 1.5
    assert args.gain == 3.0
    assert args.big
    assert args.threshold is None


class FakeMicrophone(MockAudioInput):
    """Stands in for the sounddevice input so listen runs without hardware."""

    def __init__(self, device_id=None, sample_rate=None, frames_per_buffer=None,
                 channels=None, gain=1.0):
        super().__init__(
            sample_rate=sample_rate or 44100, frames_per_buffer=frames_per_buffer or 4096
        )
        self.gain = gain


@pytest.fixture
def fake_microphone(monkeypatch):
    module = types.ModuleType("guitar_tuner.audio.audio_input")
    module.SoundDeviceInput = FakeMicrophone
    monkeypatch.setitem(sys.modules, "guitar_tuner.audio.audio_input", module)
    return FakeMicrophone


def test_listen_for_fixed_duration(config_dir, fake_microphone, capsys):
    assert main(["--config-dir", config_dir, "listen", "--duration", "0"]) == 0
    assert "Play a string" in capsys.readouterr().out


def test_listen_with_bad_poll_interval(tmp_path, fake_microphone):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "tuner.json").write_text(json.dumps({"poll_interval": 0}))

    assert main(["--config-dir", str(config_dir), "listen", "--duration", "0"]) == 2
