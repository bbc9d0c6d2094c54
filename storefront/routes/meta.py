from flask import Blueprint, jsonify, current_app

from storefront.routes import services

meta_bp = Blueprint('meta', __name__)

ROUTES = [
    # auth
    'POST /api/auth/register',
    'POST /api/auth/login',
    'POST /api/auth/google',
    'POST /api/auth/forgot',
    'POST /api/auth/reset',
    'POST /api/auth/verify',
    'GET  /api/auth/verify',
    'GET  /api/auth/me',
    'GET  /api/auth/config',
    # orders
    'GET  /api/my-orders',
    'POST /api/orders/:id/cancel',
    # payments
    'POST /api/order',
    'POST /api/create-order',
    'POST /api/verify-payment',
    'ALL  /api/verify-return',
    'GET  /api/orders/:id',
    'GET  /api/orders/by-rp/:ref',
]


@meta_bp.route('/auth/config', methods=['GET'])
def public_config():
    """
    Public settings for the storefront pages
    ---
    tags:
      - Meta
    responses:
      200:
        description: Google client id and whether online payment is on
    """
    return jsonify({
        'googleClientId': current_app.config.get('GOOGLE_CLIENT_ID') or None,
        'hasRazorpay': services().gateway.enabled,
    }), 200


@meta_bp.route('/ping', methods=['GET'])
def ping():
    """
    Liveness and route list
    ---
    tags:
      - Meta
    responses:
      200:
        description: Pong
    """
    return jsonify({'ok': True, 'frontend': current_app.config['FRONTEND_BASE'], 'routes': ROUTES}), 200
