from flask import Blueprint, request
from flask_jwt_extended import create_access_token, jwt_required
from repairdesk.services.access import validate_access_code
from repairdesk.services.identity import register_user, authenticate, get_user
from repairdesk.services.policy import current_user_id

auth_bp = Blueprint('auth', __name__)


def _token_for(user):
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    return create_access_token(identity=user.id, additional_claims={'role': user.role})


@auth_bp.post('/access-codes/validate')
def validate_code():
    data = request.json or {}
    role = validate_access_code(data.get('code') or '')
    return {'role': role}


@auth_bp.post('/register')
def register():
    data = request.json or {}
    user = register_user(
        dni=data.get('dni'),
        first_name=data.get('firstName'),
        last_name=data.get('lastName'),
        email=data.get('email'),
        password=data.get('password'),
        access_code=data.get('accessCode') or '',
    )
    body = user.to_json()
    body['access_token'] = _token_for(user)
    return body, 201


@auth_bp.post('/login')
def login():
    data = request.json or {}
    user = authenticate(data.get('email'), data.get('password'))
    return {'access_token': _token_for(user), 'user': user.to_json()}


@auth_bp.get('/me')
@jwt_required()
def me():
    return get_user(current_user_id()).to_json()
