"""VoiceHearth recording processor."""
