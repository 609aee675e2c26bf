"""
Application configuration settings
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration"""
    # Flask
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 5000))

    # Remote vision service
    VISION_ENDPOINT = os.getenv("VISION_ENDPOINT", "https://westcentralus.api.cognitive.microsoft.com")
    VISION_API_KEY = os.getenv("VISION_API_KEY", "")
    REQUIRE_ENDPOINT = os.getenv("REQUIRE_ENDPOINT", "true").lower() == "true"
    REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", 30))

    # Long-running text recognition
    POLL_MAX_ATTEMPTS = int(os.getenv("POLL_MAX_ATTEMPTS", 10))
    POLL_INTERVAL = float(os.getenv("POLL_INTERVAL", 1.0))  # seconds
    OPERATION_ID_LENGTH = int(os.getenv("OPERATION_ID_LENGTH", 36))  # tail of Operation-Location

    # Display settings
    TARGET_DPI = float(os.getenv("TARGET_DPI", 96))
    DEFAULT_SOURCE_DPI = float(os.getenv("DEFAULT_SOURCE_DPI", 96))  # when the file carries no DPI
    MIN_SOURCE_DPI = float(os.getenv("MIN_SOURCE_DPI", 72))  # file DPI is clamped to this range
    MAX_SOURCE_DPI = float(os.getenv("MAX_SOURCE_DPI", 1200))
    OVERLAY_COLOR = os.getenv("OVERLAY_COLOR", "#ff0000")
    OVERLAY_STROKE_WIDTH = int(os.getenv("OVERLAY_STROKE_WIDTH", 2))

    # Image settings
    MAX_IMAGE_SIZE = int(os.getenv("MAX_IMAGE_SIZE", 4 * 1024 * 1024))  # 4MB service limit
    ALLOWED_FORMATS = ["JPEG", "PNG", "BMP", "GIF"]


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


def get_config():
    """Get configuration based on environment"""
    env = os.getenv("FLASK_ENV", "development")
    if env == "production":
        return ProductionConfig()
    return DevelopmentConfig()
