"""
Vision API - cloud image analysis with detection overlays
Main application entry point
"""
import logging
import sys

from flask import Flask
from flask_cors import CORS

from visionapi.config import get_config
from visionapi.infrastructure.computer_vision_client import ComputerVisionClient
from visionapi.infrastructure.image_loader import ImageLoader
from visionapi.application.vision_session import VisionSession
from visionapi.api.routes import api, init_routes

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


def create_app(session: VisionSession = None) -> Flask:
    """Application factory"""
    config = get_config()

    # Create Flask app
    app = Flask(__name__)
    app.config['DEBUG'] = config.DEBUG
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_IMAGE_SIZE

    # Enable CORS
    CORS(app)

    if session is None:
        def client_factory(api_key: str, endpoint: str) -> ComputerVisionClient:
            return ComputerVisionClient(api_key, endpoint, timeout=config.REQUEST_TIMEOUT)

        session = VisionSession(
            image_loader=ImageLoader(config),
            client_factory=client_factory,
            config=config,
        )

        # Connect up front when a key is configured
        if config.VISION_API_KEY:
            session.connect(config.VISION_API_KEY, config.VISION_ENDPOINT)

    # Initialize routes with session
    init_routes(session)

    # Register blueprint
    app.register_blueprint(api)

    logger.info("Application initialized successfully")
    return app


def main():
    """Main entry point"""
    config = get_config()

    logger.info(f"Starting Vision API on {config.HOST}:{config.PORT}")
    logger.info(f"Endpoint: {config.VISION_ENDPOINT}")
    logger.info(f"Poll budget: {config.POLL_MAX_ATTEMPTS} x {config.POLL_INTERVAL}s")

    app = create_app()
    app.run(
        host=config.HOST,
        port=config.PORT,
        debug=config.DEBUG,
        threaded=True,
    )


if __name__ == '__main__':
    main()
