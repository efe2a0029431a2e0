from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, jsonify, request
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from portfolio import db
from portfolio.errors import APIError
from portfolio.models import User
from portfolio.routes import api_bp
from portfolio.schemas import LoginInput, UserCreate, validate
from portfolio.utils.helpers import new_id, now_iso
from portfolio.utils.logger import get_logger

logger = get_logger(__name__)


# --- Auth Helpers ---
def generate_token(user):
    payload = {
        'user_id': user.user_id,
        'email': user.email,
        'exp': datetime.now(timezone.utc) + timedelta(hours=current_app.config['JWT_EXPIRES_HOURS']),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'], algorithm=current_app.config['JWT_ALGORITHM'])


def verify_token(token):
    """Decoded payload, or None when the token is expired, forged or malformed."""
    try:
        payload = jwt.decode(
            token, current_app.config['JWT_SECRET'], algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected token: %s", exc)
        return None
    if not payload.get('user_id'):
        return None
    return payload


def user_projection(user):
    return {
        'user_id': user.user_id,
        'email': user.email,
        'name': user.name,
        'created_at': user.created_at,
    }


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization', '')
        token = auth_header[len('Bearer '):].strip() if auth_header.startswith('Bearer ') else ''
        if not token:
            raise APIError(401, 'Access token required', 'AUTH_TOKEN_MISSING')
        payload = verify_token(token)
        if payload is None:
            raise APIError(403, 'Invalid or expired token', 'AUTH_TOKEN_INVALID')
        user = db.session.get(User, payload['user_id'])
        if user is None:
            raise APIError(401, 'User not found', 'AUTH_USER_NOT_FOUND')
        g.current_user = user_projection(user)
        return f(*args, **kwargs)
    return decorated


def current_user_id():
    user = g.get('current_user')
    return user['user_id'] if user else None


def require_owner(owner_id):
    if owner_id is not None and owner_id != current_user_id():
        raise APIError(403, 'You do not have permission to modify this resource', 'FORBIDDEN')


# --- Auth Routes ---
@api_bp.route('/auth/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    payload, errors = validate(UserCreate, data)
    if errors:
        raise APIError(400, 'Validation failed', 'VALIDATION_ERROR', errors)

    password = payload.password or payload.password_hash
    if not password:
        raise APIError(400, 'Password is required', 'MISSING_REQUIRED_FIELDS')
    if len(password) < current_app.config['PASSWORD_MIN_LENGTH']:
        raise APIError(
            400,
            f"Password must be at least {current_app.config['PASSWORD_MIN_LENGTH']} characters",
            'PASSWORD_TOO_SHORT',
        )

    if User.query.filter_by(email=payload.email).first():
        raise APIError(409, 'User with this email already exists', 'USER_ALREADY_EXISTS')

    now = now_iso()
    fields = payload.model_dump(exclude={'password', 'password_hash', 'user_id'})
    user = User(
        user_id=payload.user_id or new_id('user'),
        password_hash=generate_password_hash(password),
        created_at=now,
        updated_at=now,
        **fields,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise APIError(409, 'User with this email already exists', 'USER_ALREADY_EXISTS')

    logger.info("Registered user %s", user.user_id)
    return jsonify({'user': user.to_dict(), 'token': generate_token(user)}), 201


@api_bp.route('/auth/login', methods=['POST'])
def login():
    credentials, _ = validate(LoginInput, request.get_json(silent=True) or {})
    if credentials is None or not credentials.email or not credentials.password:
        raise APIError(400, 'Email and password are required', 'MISSING_REQUIRED_FIELDS')

    user = User.query.filter_by(email=credentials.email.lower()).first()
    if not user or not check_password_hash(user.password_hash, credentials.password):
        raise APIError(401, 'Invalid email or password', 'INVALID_CREDENTIALS')

    return jsonify({'user': user.to_dict(), 'token': generate_token(user)})


@api_bp.route('/auth/me', methods=['GET'])
@token_required
def me():
    return jsonify(g.current_user)
