from flask import Blueprint

api_bp = Blueprint('api', __name__)

# Route modules attach themselves to api_bp on import
from portfolio.routes import auth, api  # noqa: E402,F401
