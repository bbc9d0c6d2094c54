from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from storefront.errors import NotFound
from storefront.routes import services, current_user_id, json_body
from storefront.services.order_store import missing_fields

orders_bp = Blueprint('orders', __name__)

ORDER_FIELDS = ["model", "variant", "price", "qty", "total", "name", "phone", "address", "city", "pincode"]


@orders_bp.route('/order', methods=['POST'])
@jwt_required()
def create_order():
    """
    Save a COD / offline order
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [model, variant, price, qty, total, name, phone, address, city, pincode]
          properties:
            payment_mode:
              type: string
              enum: [cod, upi]
              default: cod
    responses:
      200:
        description: Order saved
      400:
        description: Missing or malformed fields, or an unknown payment_mode
      401:
        description: Not signed in
    """
    data = json_body()

    missing = missing_fields(data, ORDER_FIELDS)
    if missing:
        return jsonify({'error': 'Missing fields', 'fields': missing}), 400

    fields = {f: data[f] for f in ORDER_FIELDS}
    fields['user_id'] = current_user_id()
    fields['payment_mode'] = data.get('payment_mode') or 'cod'

    order = services().store.create(fields)
    return jsonify({'ok': True, 'id': order.id, 'order_no': order.order_no}), 200


@orders_bp.route('/my-orders', methods=['GET'])
@jwt_required()
def my_orders():
    """
    Orders of the signed-in user, newest first
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    responses:
      200:
        description: Order list
      401:
        description: Not signed in
    """
    orders = services().store.list_by_user(current_user_id())
    return jsonify({'ok': True, 'orders': [o.to_dict() for o in orders]}), 200


@orders_bp.route('/orders/<int:order_id>/cancel', methods=['POST'])
@jwt_required()
def cancel_order(order_id):
    """
    Cancel your own order while it is still created/cod
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: path
        name: order_id
        required: true
        type: integer
    responses:
      200:
        description: Cancelled
      400:
        description: Cannot cancel this order
    """
    if not services().store.cancel(order_id, current_user_id()):
        return jsonify({'ok': False, 'error': 'Cannot cancel this order'}), 400
    return jsonify({'ok': True}), 200


@orders_bp.route('/orders/<int:order_id>', methods=['GET'])
def get_order(order_id):
    """
    Single order for the review page
    ---
    tags:
      - Orders
    parameters:
      - in: path
        name: order_id
        required: true
        type: integer
    responses:
      200:
        description: Order row
      404:
        description: Not found
    """
    order = services().store.get_by_id(order_id)
    if not order:
        raise NotFound()
    return jsonify(order.to_dict()), 200


@orders_bp.route('/orders/by-rp/<ref>', methods=['GET'])
def get_order_by_gateway_ref(ref):
    """
    Poll an order by Razorpay order id (UPI fallback)
    ---
    tags:
      - Orders
    parameters:
      - in: path
        name: ref
        required: true
        type: string
    responses:
      200:
        description: Order row
      404:
        description: Not found
    """
    order = services().store.get_by_gateway_ref(ref)
    if not order:
        raise NotFound()
    return jsonify(order.to_dict()), 200
