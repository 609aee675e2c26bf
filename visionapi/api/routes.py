"""
API routes/handlers
"""
import logging
from flask import Blueprint, Response, request, jsonify

from visionapi.application.overlay_renderer import encode_png
from visionapi.application.vision_session import VisionSession
from visionapi.domain.errors import (
    OperationCancelled,
    OperationInProgress,
    RemoteOperationFailed,
    ServiceRequestError,
    SubmissionError,
    VisionError,
)
from visionapi.domain.models import TextRecognitionMode, VisualFeature

logger = logging.getLogger(__name__)

# Create blueprint
api = Blueprint('api', __name__)

# Session instance (injected)
vision_session: VisionSession = None


def init_routes(session: VisionSession):
    """Initialize routes with session dependency"""
    global vision_session
    vision_session = session


@api.errorhandler(VisionError)
def handle_vision_error(error: VisionError):
    """Map domain errors to JSON responses"""
    if isinstance(error, (OperationInProgress, OperationCancelled)):
        status = 409
    elif isinstance(error, (SubmissionError, RemoteOperationFailed, ServiceRequestError)):
        status = 502
    else:
        status = 400

    logger.warning(f"{error.kind}: {error}")
    return jsonify({
        "success": False,
        "error": str(error),
        "kind": error.kind,
    }), status


@api.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    status = vision_session.get_health()
    return jsonify(status.to_dict())


@api.route('/ready', methods=['GET'])
def ready():
    """Readiness check endpoint"""
    if vision_session.client is not None:
        return jsonify({"ready": True})
    return jsonify({"ready": False}), 503


@api.route('/connect', methods=['POST'])
def connect():
    """Set the API key (and optionally endpoint) for the session"""
    data = request.get_json(silent=True) or {}
    vision_session.connect(data.get('api_key'), data.get('endpoint'))
    return jsonify({"success": True, "endpoint": vision_session.endpoint})


@api.route('/image', methods=['POST'])
def upload_image():
    """Make the request body the current image"""
    image = vision_session.load_image_bytes(request.get_data())
    return jsonify({
        "success": True,
        "width": image.width,
        "height": image.height,
        "dpi": image.dpi,
        "format": image.format,
    })


@api.route('/analyze', methods=['POST'])
def analyze():
    """Analyze the current image"""
    data = request.get_json(silent=True) or {}
    names = data.get('features')
    try:
        features = [VisualFeature(name) for name in names] if names else None
    except ValueError:
        return jsonify({
            "success": False,
            "error": f"Unknown feature in {names}",
            "kind": "InvalidRequest",
        }), 400

    outcome = vision_session.analyze(features)
    return jsonify(outcome.to_dict())


@api.route('/text', methods=['POST'])
def extract_text():
    """Recognize text in the current image"""
    data = request.get_json(silent=True) or {}
    try:
        mode = TextRecognitionMode(data.get('mode', TextRecognitionMode.PRINTED.value))
    except ValueError:
        return jsonify({
            "success": False,
            "error": f"Unknown mode: {data.get('mode')}",
            "kind": "InvalidRequest",
        }), 400

    outcome = vision_session.extract_text(mode)
    return jsonify(outcome.to_dict())


@api.route('/cancel', methods=['POST'])
def cancel():
    """Cancel the in-flight text recognition"""
    return jsonify({"cancelled": vision_session.cancel()})


@api.route('/overlay', methods=['GET'])
def overlay():
    """Current display image as PNG"""
    image = vision_session.current_display()
    if image is None:
        return jsonify({
            "success": False,
            "error": "Please upload an image.",
            "kind": "NoImageSelected",
        }), 404

    if image.format == "PNG":
        return Response(image.data, mimetype='image/png')

    return Response(encode_png(image.image), mimetype='image/png')
