import re
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt

from storefront.routes import services, current_user_id, json_body
from storefront.services import accounts
from storefront.services.identity import InvalidIdentityToken

auth_bp = Blueprint('auth', __name__)

EMAIL_REGEX = r'^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$'


def _frontend(path):
    return f"{current_app.config['FRONTEND_BASE'].rstrip('/')}/{path}"


def _login_response(user):
    return jsonify({'ok': True, 'token': accounts.issue_token(user), 'user': user.to_dict()}), 200


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Register with email/password
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
            name:
              type: string
    responses:
      200:
        description: Registered; verify_url confirms the email
      400:
        description: Missing email or password
      409:
        description: Email already exists
    """
    data = json_body()
    if not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Missing email/password'}), 400

    if not re.match(EMAIL_REGEX, str(data['email']).strip()):
        return jsonify({'error': 'Invalid email format'}), 400

    try:
        _, token = accounts.register_user(
            str(data['email']),
            data['password'],
            name=data.get('name'),
            phone=data.get('phone'),
            city=data.get('city'),
            address=data.get('address'),
        )
    except accounts.EmailTaken:
        return jsonify({'error': 'Email already exists'}), 409

    # No mail transport: the link is handed back to the caller
    return jsonify({'ok': True, 'verify_url': _frontend(f"verify.html?token={token}")}), 200


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Authenticate with email/password
    ---
    tags:
      - Auth
    responses:
      200:
        description: Login successful
      401:
        description: Invalid credentials
      403:
        description: Email not verified
    """
    data = json_body()
    if not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Missing email/password'}), 400

    user = accounts.find_user_by_email(data['email'])
    if not user or not user.password_hash:
        return jsonify({'error': 'Invalid credentials'}), 401

    if not user.email_verified:
        return jsonify({'error': 'Please verify your email before logging in'}), 403

    if not user.check_password(data['password']):
        return jsonify({'error': 'Invalid credentials'}), 401

    return _login_response(user)


@auth_bp.route('/google', methods=['POST'])
def google_login():
    """
    Sign in with a Google ID token
    ---
    tags:
      - Auth
    responses:
      200:
        description: Login successful
      400:
        description: Missing id_token
      401:
        description: Invalid Google token
      503:
        description: Google sign-in not configured
    """
    data = json_body()
    if not data.get('id_token'):
        return jsonify({'error': 'Missing id_token'}), 400

    verifier = services().identity
    if verifier is None:
        return jsonify({'error': 'Google sign-in not configured'}), 503

    try:
        claims = verifier.verify(data['id_token'])
    except InvalidIdentityToken:
        return jsonify({'error': 'Invalid Google token'}), 401
    if not claims.get('email'):
        return jsonify({'error': 'Invalid Google token'}), 401

    return _login_response(accounts.upsert_google_user(claims))


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    """
    Who am I
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Claims of the current token
      401:
        description: Not signed in
    """
    claims = get_jwt()
    user = {'uid': current_user_id(), 'email': claims.get('email'), 'name': claims.get('name')}
    return jsonify({'ok': True, 'user': user}), 200


@auth_bp.route('/forgot', methods=['POST'])
def forgot_password():
    """
    Issue a password reset link
    ---
    tags:
      - Auth
    responses:
      200:
        description: Always ok; reset_url only for existing password accounts
      400:
        description: Missing email
    """
    data = json_body()
    if not data.get('email'):
        return jsonify({'error': 'Missing email'}), 400

    user = accounts.find_user_by_email(data['email'])
    if not user or not user.password_hash:
        # don't reveal whether the account exists
        return jsonify({'ok': True}), 200

    token = accounts.issue_password_reset(user)
    return jsonify({'ok': True, 'reset_url': _frontend(f"reset.html?token={token}")}), 200


@auth_bp.route('/reset', methods=['POST'])
def reset_password():
    """
    Set a new password with a reset token
    ---
    tags:
      - Auth
    responses:
      200:
        description: Password changed
      400:
        description: Missing fields or invalid/expired token
    """
    data = json_body()
    if not data.get('token') or not data.get('password'):
        return jsonify({'error': 'Missing token/password'}), 400

    if not accounts.reset_password(data['token'], data['password']):
        return jsonify({'error': 'Invalid/expired token'}), 400
    return jsonify({'ok': True}), 200


@auth_bp.route('/verify', methods=['POST'])
def verify_email():
    """
    Confirm an email address and sign in
    ---
    tags:
      - Auth
    responses:
      200:
        description: Verified; returns a token
      400:
        description: Missing or invalid/expired token
    """
    data = json_body()
    if not data.get('token'):
        return jsonify({'error': 'Missing token'}), 400

    user = accounts.verify_email(data['token'])
    if user is None:
        return jsonify({'error': 'Invalid/expired token'}), 400
    return _login_response(user)


@auth_bp.route('/verify', methods=['GET'])
def verify_email_link():
    """
    Confirm an email address from the mailed link
    ---
    tags:
      - Auth
    parameters:
      - in: query
        name: token
        required: true
        type: string
    responses:
      200:
        description: Verified
      400:
        description: Missing or invalid/expired token
    """
    token = request.args.get('token')
    if not token:
        return jsonify({'ok': False, 'error': 'Missing token'}), 400

    if accounts.verify_email(token) is None:
        return jsonify({'ok': False, 'error': 'Invalid/expired token'}), 400
    return jsonify({'ok': True}), 200
