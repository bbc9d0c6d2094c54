import logging
from datetime import datetime, timezone

from flask import Blueprint, request, jsonify, redirect, current_app
from flask_jwt_extended import jwt_required

from storefront.models.order import GATEWAY_MODE
from storefront.routes import services, current_user_id, json_body
from storefront.services.reconciliation import callback_fields

payments_bp = Blueprint('payments', __name__)

logger = logging.getLogger(__name__)


def _frontend(path):
    return f"{current_app.config['FRONTEND_BASE'].rstrip('/')}/{path}"


def review_url(order):
    return _frontend(f"review.html?id={order.id}")


FAILED_PAGE = "order.html?failed=1"
UNKNOWN_PAGE = "order.html?unknown=1"

# the redirect callback answers on any method
CALLBACK_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@payments_bp.route('/create-order', methods=['POST'])
@jwt_required()
def create_gateway_order():
    """
    Open a Razorpay order and save the matching local order
    ---
    tags:
      - Payments
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - amount
          properties:
            amount:
              type: integer
              description: Amount in paise (>= 100)
            currency:
              type: string
              default: INR
            productId:
              type: string
            notes:
              type: object
    responses:
      200:
        description: Gateway order opened
      400:
        description: Invalid amount, currency or order fields
      502:
        description: Razorpay rejected the order
      503:
        description: Razorpay not configured
    """
    data = json_body()
    amount = data.get('amount')
    currency = data.get('currency', 'INR')
    product_id = data.get('productId') or 'tp'
    svc = services()

    # Everything is checked before the gateway opens an order
    svc.gateway.validate(amount, currency)
    rupees = round(amount / 100)
    fields = {
        'user_id': current_user_id(),
        'model': data.get('model') or product_id,
        'variant': data.get('variant') or 'N/A',
        'price': data.get('price') or rupees,
        'qty': data.get('qty') or 1,
        'total': data.get('total') or rupees,
        # contact fields are collected on the checkout page for gateway orders
        'name': data.get('name') or '-',
        'phone': data.get('phone') or '-',
        'address': data.get('address') or '-',
        'city': data.get('city') or '-',
        'pincode': data.get('pincode') or '-',
        'payment_mode': GATEWAY_MODE,
    }
    svc.store.validate(fields)

    remote = svc.gateway.create_remote_order(
        amount,
        currency,
        notes=data.get('notes') or {},
        receipt=f"tp_{product_id}_{int(datetime.now(timezone.utc).timestamp() * 1000)}",
    )

    fields['razorpay_order_id'] = remote['gateway_order_id']
    order = svc.store.create(fields)

    return jsonify({
        'gatewayOrderId': remote['gateway_order_id'],
        'keyId': svc.gateway.key_id,
        'currency': remote['currency'],
        'amount': remote['amount'],
        'id': order.id,
    }), 200


@payments_bp.route('/verify-payment', methods=['POST'])
def verify_payment():
    """
    Verify a Razorpay checkout callback (AJAX)
    ---
    tags:
      - Payments
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [razorpay_order_id, razorpay_payment_id, razorpay_signature]
    responses:
      200:
        description: "{ok, redirect}; ok is false for a bad signature"
      400:
        description: Missing identifiers
    """
    data = json_body()
    fields = callback_fields(data)
    if fields is None:
        return jsonify({'ok': False, 'error': 'Missing fields'}), 400

    result = services().reconciler.reconcile(*fields)
    if result.order is None:
        return jsonify({'ok': result.ok, 'redirect': None}), 200
    return jsonify({'ok': result.ok, 'redirect': review_url(result.order)}), 200


@payments_bp.route('/verify-return', methods=CALLBACK_METHODS)
def verify_return():
    """
    Verify a Razorpay redirect callback and bounce the browser
    ---
    tags:
      - Payments
    responses:
      302:
        description: Redirect to review, failed or unknown page
    """
    # Form body wins over the query string when both carry a field
    params = {**request.args.to_dict(), **request.form.to_dict()}
    fields = callback_fields(params)
    if fields is None:
        return redirect(_frontend(FAILED_PAGE))

    try:
        result = services().reconciler.reconcile(*fields)
    except Exception:
        logger.exception("Verify-return error")
        return redirect(_frontend(FAILED_PAGE))

    if not result.ok:
        return redirect(_frontend(FAILED_PAGE))
    if result.order is None:
        return redirect(_frontend(UNKNOWN_PAGE))
    return redirect(review_url(result.order))
