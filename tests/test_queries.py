import pytest

from portfolio.models import Certification, Skill
from portfolio.queries import (
    Patch,
    build_count_statement,
    build_filters,
    build_search_statement,
    build_update_statement,
    contains,
    has_expired,
)

SKILLS = Skill.__table__


def test_patch_only_accepts_table_columns():
    with pytest.raises(KeyError):
        Patch(SKILLS, {'password_hash': 'x'})


def test_patch_from_input_drops_excluded_keys():
    patch = Patch.from_input(SKILLS, {'skill_id': 's', 'name': 'Go'}, exclude={'skill_id'})

    assert patch.values == {'name': 'Go'}
    assert 'name' in patch
    assert len(patch) == 1


def test_empty_patch_builds_nothing():
    with pytest.raises(ValueError):
        build_update_statement(Patch(SKILLS), {'skill_id': 'skill_1'})


def test_update_needs_a_scope():
    with pytest.raises(ValueError):
        build_update_statement(Patch(SKILLS, {'name': 'Go'}), {})


def test_update_statement_binds_every_value():
    patch = Patch(SKILLS, {'name': "Robert'); DROP TABLE skills;--", 'display_order': 3})

    compiled = build_update_statement(patch, {'skill_id': 'skill_1', 'user_id': 'user_1'}).compile()
    sql = str(compiled)

    assert sql.startswith('UPDATE skills SET')
    assert 'DROP TABLE' not in sql
    assert 'skills.skill_id = :skill_id_1' in sql
    assert 'skills.user_id = :user_id_1' in sql
    assert compiled.params['name'] == "Robert'); DROP TABLE skills;--"
    assert compiled.params['display_order'] == 3


def test_filters_skip_paging_and_missing_values():
    params = {'limit': 10, 'offset': 0, 'sort_by': 'name', 'sort_order': 'asc', 'category': None, 'user_id': 'u1'}

    clauses = build_filters(SKILLS, params)

    assert len(clauses) == 1
    assert str(clauses[0]) == 'skills.user_id = :user_id_1'


def test_free_text_query_searches_every_text_column():
    clauses = build_filters(SKILLS, {'query': 'py'}, text_columns=('name', 'description'))

    sql = str(clauses[0]).lower()
    assert 'skills.name' in sql and 'skills.description' in sql
    assert ' or ' in sql


def test_like_fields_use_substring_match():
    (clause,) = build_filters(SKILLS, {'category': 'lang'}, like_fields=('category',))

    assert clause.compile().params['category_1'] == '%lang%'


def test_like_patterns_escape_wildcards():
    assert contains('50%_off\\') == '%50\\%\\_off\\\\%'

    (clause,) = build_filters(SKILLS, {'category': '%'}, like_fields=('category',))
    compiled = clause.compile()
    assert compiled.params['category_1'] == '%\\%%'
    assert 'ESCAPE' in str(compiled)


def test_search_statement_orders_with_a_tie_breaker_and_pages():
    params = {'limit': 5, 'offset': 10, 'sort_by': 'display_order', 'sort_order': 'desc'}

    sql = str(build_search_statement(SKILLS, params, []))

    assert 'ORDER BY skills.display_order DESC, skills.skill_id' in sql
    assert 'LIMIT' in sql and 'OFFSET' in sql


def test_count_statement_shares_the_filters():
    clauses = build_filters(SKILLS, {'user_id': 'u1'})

    sql = str(build_count_statement(SKILLS, clauses))

    assert 'count(*)' in sql
    assert 'WHERE skills.user_id' in sql


def test_has_expired_compares_against_today():
    clause = has_expired()(Certification.__table__, True)

    sql = str(clause)
    assert 'certifications.expiration_date IS NOT NULL' in sql
    assert 'certifications.expiration_date <' in sql
