from flask import jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

db = SQLAlchemy()
jwt = JWTManager()


# Missing, malformed and expired bearer tokens are all plain 401s
@jwt.unauthorized_loader
def missing_token(reason):
    return jsonify({'error': 'Unauthorized'}), 401


@jwt.invalid_token_loader
def invalid_token(reason):
    return jsonify({'error': 'Invalid token'}), 401


@jwt.expired_token_loader
def expired_token(jwt_header, jwt_payload):
    return jsonify({'error': 'Invalid token'}), 401
