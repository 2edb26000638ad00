# tests/hardware/test_speaker.py
"""
chip8_tracer.hardware.speakerモジュールの単体テスト。
"""
from chip8_tracer.hardware.speaker import ToneSpeaker

# @intent:test_suite トーン要求の状態遷移と音量の扱いを検証します。

class TestToneSpeaker:
    # @intent:test_case_transition 状態が変化した時だけリスナーが呼ばれることを検証します。
    def test_listener_called_on_change_only(self):
        speaker = ToneSpeaker()
        events = []
        speaker.add_tone_listener(events.append)

        speaker.start_beep_if_not_started()
        speaker.start_beep_if_not_started()
        assert speaker.beeping
        speaker.end_beep()
        speaker.end_beep()
        assert not speaker.beeping
        assert events == [True, False]

    def test_volume_is_clamped(self):
        speaker = ToneSpeaker(volume=2.0)
        assert speaker.volume == 1.0
        speaker.set_volume(-0.5)
        assert speaker.volume == 0.0
        speaker.set_volume(0.25)
        assert speaker.volume == 0.25
