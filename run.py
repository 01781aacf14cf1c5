#!/usr/bin/env python3
"""
Run script for the VoiceHearth processor
"""
import uvicorn

from voicehearth.config.settings import settings
from voicehearth.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
