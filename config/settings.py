#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings

from .constants import (
    ENHANCEMENT_WORKERS,
    LOG_FILE,
    LOG_LEVEL,
    WATERMARK_TEXT,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== Logging ==========
    log_level: str = LOG_LEVEL
    log_file: str = LOG_FILE  # "" disables the rotating file handler

    # ========== Visual defaults ==========
    default_design_style: str = "modern"  # academic | modern | minimal | colorful
    default_color_scheme: str = "blue"  # blue | green | purple | orange
    watermark_text: str = WATERMARK_TEXT

    # ========== Performance ==========
    enhancement_workers: int = ENHANCEMENT_WORKERS
    image_cache_size: int = 256

    # ========== Fonts ==========
    # Directory scanned for <Family>.ttf files; families not found there fall
    # back to the PDF base-14 fonts.
    font_dir: Optional[Path] = None

    # ========== API ==========
    api_title: str = "Note Layout Engine"
    max_document_blocks: int = 5000

    class Config:
        env_prefix = "NOTELAYOUT_"
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def print_config(self):
        """Print configuration summary"""
        print("\n" + "=" * 70)
        print("CONFIGURATION")
        print("=" * 70)
        print(f"Design Style:    {self.default_design_style}")
        print(f"Color Scheme:    {self.default_color_scheme}")
        print(f"Workers:         {self.enhancement_workers}")
        print(f"Font Dir:        {self.font_dir or 'base-14 only'}")
        print(f"Log Level:       {self.log_level}")
        print("=" * 70 + "\n")


# Global settings instance
settings = Settings()
