# Routes for handling requests
from flask import Blueprint, jsonify, request

import content
import credentials
import tokens
import uploads
from errors import ApiError
from forms import get_payload, require_fields
from guard import current_identity, login_required

# Create blueprints for different route categories
main_bp = Blueprint('main', __name__)
auth_bp = Blueprint('auth', __name__)
posts_bp = Blueprint('posts', __name__)

# largest id a SQLite INTEGER column can hold; bigger ids never match a route
MAX_ID = 2 ** 63 - 1
POST_ID = f'<int(max={MAX_ID}):post_id>'


@main_bp.route('/', methods=['GET'])
def welcome():
    """Service banner"""
    return jsonify({"name": "bulletin-board", "status": "ok"}), 200


@main_bp.route('/uploads/<path:filename>', methods=['GET'])
def uploaded_image(filename):
    return uploads.serve_image(filename)


# Authentication Endpoints
@auth_bp.route('/register', methods=['POST'])
def register():
    """User Registration Endpoint"""
    data = get_payload(request)
    user = credentials.register(data.get('username'), data.get('email'), data.get('password'))
    return jsonify(user), 200


@auth_bp.route('/login', methods=['POST'])
def login():
    """User Login Endpoint"""
    data = get_payload(request)
    user = credentials.authenticate(data.get('email'), data.get('password'))
    token = tokens.issue(user.id, user.username)
    return jsonify({
        "token": token,
        "user": {"id": user.id, "username": user.username}
    }), 200


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    """Identity as verified by the server from the caller's token"""
    return jsonify(current_identity()), 200


# Post Endpoints
@posts_bp.route('', methods=['POST'])
@login_required
def create_post():
    data = get_payload(request)
    require_fields(data, 'category', message="Category is required")

    # file first, then the row; drop the file if the row never lands
    image = uploads.save_image(request.files.get('image'))
    try:
        post = content.create_post(
            current_identity()['id'],
            data.get('title'),
            data.get('content'),
            data.get('category'),
            image=image
        )
    except ApiError:
        uploads.delete_image(image)
        raise
    return jsonify(post), 201


@posts_bp.route('', methods=['GET'])
def list_posts():
    return jsonify(content.list_posts()), 200


@posts_bp.route(f'/{POST_ID}', methods=['DELETE'])
@login_required
def delete_post(post_id):
    content.delete_post(post_id, current_identity()['id'])
    return jsonify({"success": True}), 200


@posts_bp.route(f'/{POST_ID}/comments', methods=['POST'])
@login_required
def add_comment(post_id):
    data = get_payload(request)
    comment = content.add_comment(post_id, current_identity()['id'], data.get('content'))
    return jsonify(comment), 201


@posts_bp.route(f'/{POST_ID}/comments', methods=['GET'])
def list_comments(post_id):
    return jsonify(content.list_comments(post_id)), 200
