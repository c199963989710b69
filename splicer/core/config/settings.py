# File: splicer/core/config/settings.py

import os
import shutil
from pathlib import Path


class Settings:
    # --- Paths ---
    # splicer/core/config/settings.py -> splicer/core/config -> splicer/core -> splicer -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("SPLICER_DATA_DIR", str(BASE_DIR / "data")))

    # --- Database ---
    @property
    def DATABASE_URL(self) -> str:
        # Read lazily so tests can point the job store at a throwaway file.
        url = os.getenv("SPLICER_DATABASE_URL")
        if url:
            return url
        return f"sqlite:///{self.DATA_DIR / 'splicer_jobs.db'}"

    # --- External Tools ---
    # Auto-detect ffmpeg/ffprobe or use env vars
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY: str = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")

    # --- Re-encode Profile ---
    # Used whenever stream copy cannot produce the requested cut.
    REENCODE_VIDEO_CODEC: str = os.getenv("REENCODE_VIDEO_CODEC", "libx264")
    REENCODE_PRESET: str = os.getenv("REENCODE_PRESET", "veryfast")
    REENCODE_CRF: int = int(os.getenv("REENCODE_CRF", "20"))
    REENCODE_PIX_FMT: str = os.getenv("REENCODE_PIX_FMT", "yuv420p")
    REENCODE_AUDIO_CODEC: str = os.getenv("REENCODE_AUDIO_CODEC", "aac")
    REENCODE_AUDIO_BITRATE: str = os.getenv("REENCODE_AUDIO_BITRATE", "192k")

    # --- Scratch Files ---
    SCRATCH_PREFIX: str = os.getenv("SPLICER_SCRATCH_PREFIX", "splicer")

    # --- Process Control ---
    CANCEL_POLL_INTERVAL: float = float(os.getenv("SPLICER_CANCEL_POLL_INTERVAL", "0.1"))
    TERMINATE_GRACE_SECONDS: float = float(os.getenv("SPLICER_TERMINATE_GRACE_SECONDS", "5"))

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
