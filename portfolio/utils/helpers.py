import secrets
from datetime import datetime, timezone

from flask import request


def now_iso():
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix):
    return f'{prefix}_{secrets.token_hex(12)}'


def client_ip():
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr
