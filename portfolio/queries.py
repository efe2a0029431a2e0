"""
Statement builders shared by every resource.

All values reach the database as bound parameters; column names only ever come
from the table definition, never from the request.
"""
from datetime import date

from sqlalchemy import and_, asc, desc, func, or_, select, update

PAGING_FIELDS = ('limit', 'offset', 'sort_by', 'sort_order')


class Patch:
    """Column -> value changes for a single row."""

    def __init__(self, table, values=None):
        self.table = table
        self.values = {}
        for column, value in (values or {}).items():
            self.set(column, value)

    @classmethod
    def from_input(cls, table, data, exclude=()):
        """``data`` should hold only the keys the client actually sent."""
        return cls(table, {key: value for key, value in data.items() if key not in exclude})

    def set(self, column, value):
        if column not in self.table.c:
            raise KeyError(f'{self.table.name} has no column {column!r}')
        self.values[column] = value

    def __contains__(self, column):
        return column in self.values

    def __bool__(self):
        return bool(self.values)

    def __len__(self):
        return len(self.values)

    def __repr__(self):
        return f'Patch({self.table.name}, {self.values!r})'


def scope(table, keys):
    return [table.c[column] == value for column, value in keys.items()]


def build_update_statement(patch, keys):
    """``UPDATE <table> SET <patch> WHERE <keys>``; raises ValueError on an empty patch."""
    if not patch:
        raise ValueError('nothing to update')
    if not keys:
        raise ValueError('refusing to build an unscoped UPDATE')
    return update(patch.table).where(*scope(patch.table, keys)).values(**patch.values)


def contains(term):
    """``%term%`` with LIKE wildcards in ``term`` matched literally (escape char ``\\``)."""
    escaped = str(term).replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


def build_filters(table, params, text_columns=(), like_fields=(), custom=None):
    """
    Translate present search fields into WHERE clauses.

    ``query`` is matched case-insensitively against any of ``text_columns``;
    fields in ``like_fields`` use a substring match; ``custom`` maps a field to
    ``fn(table, value) -> clause``; everything else is an exact match.
    """
    custom = custom or {}
    clauses = []
    for name, value in params.items():
        if value is None or name in PAGING_FIELDS:
            continue
        if name == 'query':
            term = contains(value)
            clauses.append(or_(*(table.c[column].ilike(term, escape='\\') for column in text_columns)))
        elif name in custom:
            clauses.append(custom[name](table, value))
        elif name in like_fields:
            clauses.append(table.c[name].ilike(contains(value), escape='\\'))
        else:
            clauses.append(table.c[name] == value)
    return clauses


def build_search_statement(table, params, clauses):
    sort_column = table.c[params['sort_by']]
    direction = desc if params.get('sort_order') == 'desc' else asc
    tie_breaker = [column for column in table.primary_key.columns]
    return (
        select(table)
        .where(*clauses)
        .order_by(direction(sort_column), *tie_breaker)
        .limit(params['limit'])
        .offset(params['offset'])
    )


def build_count_statement(table, clauses):
    return select(func.count()).select_from(table).where(*clauses)


# --- Filters that are not a plain comparison ---
def has_expired(column_name='expiration_date'):
    def clause(table, value):
        column = table.c[column_name]
        today = date.today().isoformat()
        if value:
            return and_(column.isnot(None), column < today)
        return or_(column.is_(None), column >= today)
    return clause


def at_least(column_name):
    return lambda table, value: table.c[column_name] >= value


def on_or_before(column_name):
    # compare on the prefix so a plain date includes the whole day
    return lambda table, value: func.substr(table.c[column_name], 1, len(value)) <= value
