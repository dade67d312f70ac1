from flask import Blueprint, current_app, send_from_directory

blobs_bp = Blueprint('blobs', __name__)


@blobs_bp.get('/<path:blob_path>')
def serve_blob(blob_path: str):
    # send_from_directory rejects paths escaping BLOB_ROOT (404)
    return send_from_directory(current_app.config['BLOB_ROOT'], blob_path, mimetype='image/jpeg')
