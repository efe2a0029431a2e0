"""
Generic handlers for the portfolio resources.

A ``Resource`` describes one table: its schemas, id prefix, parent, search
behaviour and who may read or write it. ``register_resource`` turns that
description into flat routes (``/<slug>``) and, for rows owned by a user,
nested routes (``/users/<user_id>/<slug>``).
"""
from dataclasses import dataclass, field
from typing import Callable, Optional

from flask import g, jsonify, request
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError

from portfolio import db
from portfolio.errors import APIError, not_found
from portfolio.models import User
from portfolio.queries import (
    Patch,
    build_count_statement,
    build_filters,
    build_search_statement,
    build_update_statement,
    scope,
)
from portfolio.routes import api_bp
from portfolio.routes.auth import current_user_id, require_owner, token_required
from portfolio.schemas import validate
from portfolio.utils.helpers import new_id, now_iso
from portfolio.utils.logger import get_logger

logger = get_logger(__name__)

CREATE_STAMPS = ('created_at', 'updated_at', 'visited_at', 'last_visited_at', 'uploaded_at')


@dataclass
class Parent:
    """A row the resource hangs off, other than its owning user."""

    model: type
    name: str
    key: str
    slug: str
    sub_slugs: tuple = ()


@dataclass
class Resource:
    name: str
    model: type
    slug: str
    id_prefix: str
    create_schema: type
    update_schema: type
    search_schema: type
    collection: Optional[str] = None
    parent: Optional[Parent] = None
    public_read: bool = True
    public_create: bool = False
    text_columns: tuple = ()
    like_fields: tuple = ()
    custom_filters: dict = field(default_factory=dict)
    # column that gets a fresh timestamp whenever the given field changes
    refresh_on: dict = field(default_factory=dict)
    before_create: Optional[Callable] = None
    children: tuple = ()
    aliases: tuple = ()

    def __post_init__(self):
        self.table = self.model.__table__
        self.pk = self.table.primary_key.columns.values()[0].name
        if self.collection is None:
            self.collection = self.slug.replace('-', '_')

    @property
    def owned(self):
        return 'user_id' in self.table.c

    @property
    def error_name(self):
        return self.name.upper().replace(' ', '_')


def json_body():
    if not request.data:
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise APIError(400, 'Request body must be a JSON object', 'INVALID_JSON')
    return data


def validation_error(errors):
    return APIError(400, 'Validation failed', 'VALIDATION_ERROR', errors)


def authenticated():
    return g.get('current_user') is not None


def row_owner(resource, row):
    if resource.parent is not None:
        parent = db.session.get(resource.parent.model, getattr(row, resource.parent.key))
        return parent.user_id if parent is not None else None
    return getattr(row, 'user_id', None)


def check_parents(resource, values):
    if resource.parent is not None:
        parent = db.session.get(resource.parent.model, values[resource.parent.key])
        if parent is None:
            raise not_found(resource.parent.name)
        return parent.user_id
    if resource.owned and values.get('user_id') is not None:
        if db.session.get(User, values['user_id']) is None:
            raise not_found('user')
        return values['user_id']
    return None


def fetch_row(resource, item_id, keys=None):
    row = db.session.get(resource.model, item_id)
    if row is None:
        raise not_found(resource.name)
    for column, value in (keys or {}).items():
        if getattr(row, column) != value:
            raise not_found(resource.name)
    return row


# --- Handlers ---
def create_item(resource, path_keys):
    data = json_body()
    data.update(path_keys)
    if resource.owned and not data.get('user_id') and authenticated():
        data['user_id'] = current_user_id()

    payload, errors = validate(resource.create_schema, data)
    if errors:
        raise validation_error(errors)
    values = payload.model_dump()

    owner_id = check_parents(resource, values)
    if authenticated():
        require_owner(owner_id)

    values[resource.pk] = values.get(resource.pk) or new_id(resource.id_prefix)
    now = now_iso()
    for column in CREATE_STAMPS:
        if column in resource.table.c:
            values[column] = now
    if resource.before_create is not None:
        resource.before_create(values)

    row = resource.model(**values)
    db.session.add(row)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.info("Conflict creating %s: %s", resource.name, exc.orig)
        raise APIError(409, f'{resource.name.capitalize()} already exists', f'{resource.error_name}_ALREADY_EXISTS')

    logger.debug("Created %s %s", resource.name, values[resource.pk])
    return jsonify(row.to_dict()), 201


def get_item(resource, item_id, path_keys):
    row = fetch_row(resource, item_id, path_keys)
    if not resource.public_read:
        require_owner(row_owner(resource, row))
    return jsonify(row.to_dict())


def search_items(resource, path_keys):
    params = request.args.to_dict()
    params.update(path_keys)
    search, errors = validate(resource.search_schema, params)
    if errors:
        raise validation_error(errors)
    params = search.model_dump()

    clauses = build_filters(
        resource.table, params, resource.text_columns, resource.like_fields, resource.custom_filters
    )
    if not resource.public_read and resource.owned:
        user_column = resource.table.c.user_id
        clauses.append(or_(user_column == current_user_id(), user_column.is_(None)))

    rows = db.session.execute(build_search_statement(resource.table, params, clauses))
    total = db.session.execute(build_count_statement(resource.table, clauses)).scalar_one()
    return jsonify({
        resource.collection: [resource.model.row_to_dict(row) for row in rows],
        'total': total,
        'limit': params['limit'],
        'offset': params['offset'],
    })


def update_item(resource, item_id, path_keys):
    payload, errors = validate(resource.update_schema, json_body())
    if errors:
        raise validation_error(errors)

    protected = {resource.pk, 'user_id'}
    if resource.parent is not None:
        protected.add(resource.parent.key)
    patch = Patch.from_input(resource.table, payload.model_dump(exclude_unset=True), exclude=protected)
    if not patch:
        raise APIError(400, 'No fields to update', 'NO_UPDATE_FIELDS')

    row = fetch_row(resource, item_id, path_keys)
    require_owner(row_owner(resource, row))

    now = now_iso()
    if 'updated_at' in resource.table.c:
        patch.set('updated_at', now)
    for trigger, column in resource.refresh_on.items():
        if trigger in patch:
            patch.set(column, now)

    keys = {resource.pk: item_id, **path_keys}
    try:
        result = db.session.execute(build_update_statement(patch, keys))
        if result.rowcount == 0:
            db.session.rollback()
            raise not_found(resource.name)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.info("Conflict updating %s %s: %s", resource.name, item_id, exc.orig)
        raise APIError(409, f'{resource.name.capitalize()} already exists', f'{resource.error_name}_ALREADY_EXISTS')

    updated = db.session.execute(select(resource.table).where(*scope(resource.table, keys))).one()
    return jsonify(resource.model.row_to_dict(updated))


def delete_item(resource, item_id, path_keys):
    row = fetch_row(resource, item_id, path_keys)
    require_owner(row_owner(resource, row))

    keys = {resource.pk: item_id, **path_keys}
    try:
        for child, foreign_key in resource.children:
            db.session.execute(delete(child.__table__).where(child.__table__.c[foreign_key] == item_id))
        db.session.execute(delete(resource.table).where(*scope(resource.table, keys)))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.debug("Deleted %s %s", resource.name, item_id)
    return '', 204


# --- Route registration ---
def _guard(view, public):
    return view if public else token_required(view)


def _add_routes(resource, prefix, endpoint, path_key=None, item_rule=True):
    """Register list/create and, optionally, item routes under ``prefix``."""

    def keys(kwargs):
        return {path_key: kwargs[path_key]} if path_key else {}

    def read_collection(**kwargs):
        return search_items(resource, keys(kwargs))

    def write_collection(**kwargs):
        return create_item(resource, keys(kwargs))

    api_bp.add_url_rule(
        prefix, f'{endpoint}_search', _guard(read_collection, resource.public_read), methods=['GET']
    )
    api_bp.add_url_rule(
        prefix, f'{endpoint}_create', _guard(write_collection, resource.public_create), methods=['POST']
    )
    if not item_rule:
        return

    item = f'{prefix}/<item_id>'

    def read_item(item_id, **kwargs):
        return get_item(resource, item_id, keys(kwargs))

    def write_item(item_id, **kwargs):
        if request.method == 'DELETE':
            return delete_item(resource, item_id, keys(kwargs))
        return update_item(resource, item_id, keys(kwargs))

    api_bp.add_url_rule(item, f'{endpoint}_get', _guard(read_item, resource.public_read), methods=['GET'])
    api_bp.add_url_rule(item, f'{endpoint}_write', token_required(write_item), methods=['PATCH', 'DELETE'])


def register_resource(resource):
    for slug in (resource.slug,) + resource.aliases:
        endpoint = slug.replace('-', '_')
        _add_routes(resource, f'/{slug}', endpoint)
        if resource.owned:
            _add_routes(resource, f'/users/<user_id>/{slug}', f'user_{endpoint}', path_key='user_id')
    if resource.parent is not None:
        parent = resource.parent
        for sub in parent.sub_slugs:
            _add_routes(
                resource,
                f'/{parent.slug}/<{parent.key}>/{sub}',
                f'{parent.slug.replace("-", "_")}_{sub}',
                path_key=parent.key,
                item_rule=False,
            )
    return resource
