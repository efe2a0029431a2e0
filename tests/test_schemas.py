import warnings

from portfolio import schemas
from portfolio.schemas import validate


def test_valid_input_returns_the_model():
    skill, errors = validate(schemas.SkillCreate, {'user_id': 'u1', 'category': 'Lang', 'name': 'Python'})

    assert errors is None
    assert skill.name == 'Python'
    assert skill.display_order == 0


def test_every_offending_field_is_reported():
    skill, errors = validate(schemas.SkillCreate, {'user_id': 'u1', 'name': 'x' * 101, 'icon_url': 'not a url'})

    assert skill is None
    fields = {error['field'] for error in errors}
    assert fields == {'category', 'name', 'icon_url'}
    assert all(error['message'] and error['type'] for error in errors)


def test_unknown_fields_are_ignored():
    link, errors = validate(
        schemas.SocialMediaLinkCreate,
        {'user_id': 'u1', 'platform': 'GitHub', 'url': 'https://github.com/ada', 'admin': True},
    )

    assert errors is None
    assert not hasattr(link, 'admin')


def test_blank_strings_become_none():
    project, errors = validate(
        schemas.ProjectCreate, {'user_id': 'u1', 'title': 'T', 'description': 'D', 'live_demo_url': '  '}
    )

    assert errors is None
    assert project.live_demo_url is None


def test_urls_must_be_http():
    _, errors = validate(schemas.ProjectImageCreate, {'project_id': 'p1', 'image_url': 'javascript:alert(1)'})

    assert errors[0]['field'] == 'image_url'


def test_proficiency_accepts_a_number_or_a_label():
    numeric, _ = validate(schemas.SkillCreate, {'user_id': 'u', 'category': 'c', 'name': 'n', 'proficiency_level': 70})
    label, _ = validate(schemas.SkillCreate, {'user_id': 'u', 'category': 'c', 'name': 'n',
                                              'proficiency_level': 'Master'})
    _, errors = validate(schemas.SkillCreate, {'user_id': 'u', 'category': 'c', 'name': 'n',
                                               'proficiency_level': 'Guru'})

    assert numeric.proficiency_level == '70'
    assert label.proficiency_level == 'Master'
    assert errors


def test_proficiency_is_text_after_validation():
    skill, errors = validate(schemas.SkillCreate, {'user_id': 'u', 'category': 'c', 'name': 'n',
                                                   'proficiency_level': ' 85 '})

    assert errors is None
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        assert skill.model_dump()['proficiency_level'] == '85'
    assert validate(schemas.SkillUpdate, {'proficiency_level': 101})[1][0]['field'] == 'proficiency_level'
    assert validate(schemas.SkillUpdate, {'proficiency_level': True})[1]


def test_rating_range():
    base = {'user_id': 'u', 'client_name': 'c', 'content': 'x'}

    assert validate(schemas.TestimonialCreate, {**base, 'rating': 5})[1] is None
    assert validate(schemas.TestimonialCreate, {**base, 'rating': 0})[1]
    assert validate(schemas.TestimonialCreate, {**base, 'rating': 6})[1]


def test_email_is_lower_cased():
    message, _ = validate(schemas.ContactMessageCreate, {'name': 'V', 'email': 'V@Example.COM', 'message': 'hi'})

    assert message.email == 'v@example.com'


def test_update_keeps_only_sent_fields():
    patch, errors = validate(schemas.SkillUpdate, {'name': 'Go'})

    assert errors is None
    assert patch.model_dump(exclude_unset=True) == {'name': 'Go'}


def test_update_keeps_create_constraints():
    _, errors = validate(schemas.SkillUpdate, {'name': 'x' * 101})

    assert errors[0]['field'] == 'name'


def test_update_allows_clearing_optional_fields_only():
    cleared, errors = validate(schemas.SkillUpdate, {'description': None})
    _, required_errors = validate(schemas.SkillUpdate, {'category': None})

    assert errors is None
    assert cleared.model_dump(exclude_unset=True) == {'description': None}
    assert required_errors[0]['field'] == 'category'


def test_search_defaults():
    search, _ = validate(schemas.ExperienceSearch, {})

    assert (search.limit, search.offset, search.sort_by, search.sort_order) == (10, 0, 'start_date', 'desc')


def test_search_coerces_query_strings():
    search, errors = validate(schemas.ProjectSearch, {'limit': '5', 'offset': '2', 'is_featured': 'true'})

    assert errors is None
    assert search.limit == 5
    assert search.offset == 2
    assert search.is_featured is True


def test_search_rejects_bad_paging_and_sorting():
    _, errors = validate(schemas.SkillSearch, {'limit': '-1', 'offset': '-5', 'sort_order': 'sideways'})

    assert {error['field'] for error in errors} == {'limit', 'offset', 'sort_order'}


def test_json_text_fields_accept_lists():
    prefs, _ = validate(schemas.NavigationPreferenceCreate, {'user_id': 'u', 'hidden_tabs': ['blog', 'contact']})

    assert prefs.hidden_tabs == '["blog", "contact"]'


def test_register_accepts_either_password_key():
    user, errors = validate(schemas.UserCreate, {'email': 'a@example.com', 'name': 'A', 'password_hash': 'secret1'})

    assert errors is None
    assert user.password_hash == 'secret1'
    assert user.password is None
