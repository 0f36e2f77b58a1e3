"""Audio sources that feed sample blocks to the tuner.

SoundDeviceInput lives in guitar_tuner.audio.audio_input and is imported on
demand, since sounddevice needs the PortAudio library at import time.
"""
