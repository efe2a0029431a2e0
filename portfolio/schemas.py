"""
Request schemas.

Every entity has a create model, an update model (the create model with every
field optional; fields that are required on create still reject an explicit
null) and a search model carrying pagination, sorting and the entity's filters.
Unknown keys are ignored so a form can post more than the API cares about.
"""
import json
from datetime import date
from typing import Annotated, Literal, Optional
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    ValidationError,
    create_model,
    model_validator,
)

MAX_LIMIT = 100
PROFICIENCY_LABELS = ('Beginner', 'Intermediate', 'Advanced', 'Expert', 'Master')


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_url(value):
    parsed = urlparse(value)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ValueError('must be a valid http(s) URL')
    return value


def _check_iso_date(value):
    # accepts plain dates and full timestamps
    date.fromisoformat(value[:10])
    return value


def _dump_json(value):
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return value


def _lower(value):
    return value.lower() if isinstance(value, str) else value


def _check_proficiency(value):
    # a percentage or a label, both stored as text
    if isinstance(value, str):
        value = value.strip()
        if value.isdigit():
            value = int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value <= 100:
            raise ValueError('must be between 0 and 100')
        return str(value)
    if value in PROFICIENCY_LABELS:
        return value
    raise ValueError(f"must be 0-100 or one of {', '.join(PROFICIENCY_LABELS)}")


Url = Annotated[str, StringConstraints(max_length=500), AfterValidator(_check_url)]
IsoDate = Annotated[str, StringConstraints(max_length=40), AfterValidator(_check_iso_date)]
JsonText = Annotated[str, BeforeValidator(_dump_json)]
Email = Annotated[EmailStr, AfterValidator(_lower)]
Proficiency = Annotated[str, BeforeValidator(_check_proficiency)]
Order = Literal['asc', 'desc']


class Schema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')

    @model_validator(mode='before')
    @classmethod
    def blank_strings_to_none(cls, data):
        # empty form inputs mean "not given"
        if isinstance(data, dict):
            return {key: _blank_to_none(value) for key, value in data.items()}
        return data


def partial(model, name):
    """Build an update model from ``model``: same fields and validators, nothing required."""
    fields = {}
    for field_name, info in model.model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        fields[field_name] = (annotation, None)
    return create_model(name, __base__=model, **fields)


def validate(schema, data):
    """
    Validate ``data`` against ``schema``.

    Returns ``(instance, None)`` on success or ``(None, errors)`` where each
    error is ``{"field", "message", "type"}``.
    """
    try:
        return schema.model_validate(data or {}), None
    except ValidationError as exc:
        errors = [
            {
                'field': '.'.join(str(part) for part in err['loc']) or '__root__',
                'message': err['msg'],
                'type': err['type'],
            }
            for err in exc.errors()
        ]
        return None, errors


class SearchParams(Schema):
    limit: int = Field(10, ge=1, le=MAX_LIMIT)
    offset: int = Field(0, ge=0)
    sort_order: Order = 'desc'


# --- Users ---
class UserProfile(Schema):
    name: str = Field(..., min_length=1, max_length=255)
    professional_title: Optional[str] = Field(None, max_length=255)
    tagline: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = None
    profile_image_url: Optional[Url] = None
    header_image_url: Optional[Url] = None
    avatar_url: Optional[Url] = None
    video_embed_url: Optional[Url] = None
    phone_number: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    github_url: Optional[Url] = None
    linkedin_url: Optional[Url] = None
    twitter_url: Optional[Url] = None
    website_url: Optional[Url] = None


class UserCreate(UserProfile):
    user_id: Optional[str] = Field(None, max_length=64)
    email: Email
    # either key is accepted; the value is always plain text and gets hashed
    password: Optional[str] = Field(None, max_length=255)
    password_hash: Optional[str] = Field(None, max_length=255)


class UserUpdate(partial(UserProfile, 'UserProfilePatch')):
    email: Email = None


class UserSearch(SearchParams):
    query: Optional[str] = None
    sort_by: Literal['created_at', 'updated_at', 'name', 'email'] = 'created_at'


class LoginInput(Schema):
    email: Optional[str] = None
    password: Optional[str] = None


# --- Skills ---
class SkillCreate(Schema):
    skill_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    category: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    proficiency_level: Optional[Proficiency] = None
    description: Optional[str] = None
    icon_name: Optional[str] = Field(None, max_length=100)
    icon_url: Optional[Url] = None
    display_order: Optional[int] = 0


SkillUpdate = partial(SkillCreate, 'SkillUpdate')


class SkillSearch(SearchParams):
    query: Optional[str] = None
    user_id: Optional[str] = None
    category: Optional[str] = None
    sort_by: Literal['display_order', 'name', 'category', 'created_at'] = 'display_order'
    sort_order: Order = 'asc'


# --- Projects ---
class ProjectCreate(Schema):
    project_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    short_description: Optional[str] = Field(None, max_length=500)
    description: str = Field(..., min_length=1)
    project_type: Optional[str] = Field(None, max_length=100)
    role_in_project: Optional[str] = Field(None, max_length=100)
    problem_statement: Optional[str] = None
    solution_approach: Optional[str] = None
    technical_challenges: Optional[str] = None
    technologies_used: Optional[str] = None
    thumbnail_url: Optional[Url] = None
    live_demo_url: Optional[Url] = None
    github_repo_url: Optional[Url] = None
    app_store_url: Optional[Url] = None
    play_store_url: Optional[Url] = None
    case_study_url: Optional[Url] = None
    is_featured: bool = False
    status: Optional[str] = Field(None, max_length=50)
    display_order: Optional[int] = 0


ProjectUpdate = partial(ProjectCreate, 'ProjectUpdate')


class ProjectSearch(SearchParams):
    query: Optional[str] = None
    user_id: Optional[str] = None
    is_featured: Optional[bool] = None
    status: Optional[str] = None
    sort_by: Literal['display_order', 'title', 'created_at', 'updated_at'] = 'display_order'
    sort_order: Order = 'asc'


class ProjectImageCreate(Schema):
    image_id: Optional[str] = Field(None, max_length=64)
    project_id: str = Field(..., max_length=64)
    image_url: Url
    alt_text: Optional[str] = Field(None, max_length=255)
    caption: Optional[str] = Field(None, max_length=500)
    display_order: Optional[int] = 0


ProjectImageUpdate = partial(ProjectImageCreate, 'ProjectImageUpdate')


class ProjectImageSearch(SearchParams):
    project_id: Optional[str] = None
    sort_by: Literal['display_order', 'created_at'] = 'display_order'
    sort_order: Order = 'asc'


# --- Experience ---
class ExperienceCreate(Schema):
    experience_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    company_name: str = Field(..., min_length=1, max_length=255)
    company_logo_url: Optional[Url] = None
    job_title: str = Field(..., min_length=1, max_length=255)
    start_date: IsoDate
    end_date: Optional[IsoDate] = None
    is_current: bool = False
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    technologies_used: Optional[str] = None
    achievements: Optional[str] = None
    company_website_url: Optional[Url] = None
    display_order: Optional[int] = 0


ExperienceUpdate = partial(ExperienceCreate, 'ExperienceUpdate')


class ExperienceSearch(SearchParams):
    user_id: Optional[str] = None
    company_name: Optional[str] = None
    is_current: Optional[bool] = None
    sort_by: Literal['start_date', 'end_date', 'company_name', 'display_order', 'created_at'] = 'start_date'


# --- Education ---
class EducationCreate(Schema):
    education_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    institution_name: str = Field(..., min_length=1, max_length=255)
    institution_logo_url: Optional[Url] = None
    degree: str = Field(..., min_length=1, max_length=255)
    field_of_study: Optional[str] = Field(None, max_length=255)
    start_date: IsoDate
    end_date: Optional[IsoDate] = None
    is_current: bool = False
    grade: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    institution_website_url: Optional[Url] = None
    display_order: Optional[int] = 0


EducationUpdate = partial(EducationCreate, 'EducationUpdate')


class EducationSearch(SearchParams):
    user_id: Optional[str] = None
    institution_name: Optional[str] = None
    degree: Optional[str] = None
    sort_by: Literal['start_date', 'end_date', 'institution_name', 'display_order', 'created_at'] = 'start_date'


# --- Certifications ---
class CertificationCreate(Schema):
    certification_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    issuing_organization: str = Field(..., min_length=1, max_length=255)
    issue_date: IsoDate
    expiration_date: Optional[IsoDate] = None
    credential_id: Optional[str] = Field(None, max_length=255)
    credential_url: Optional[Url] = None


CertificationUpdate = partial(CertificationCreate, 'CertificationUpdate')


class CertificationSearch(SearchParams):
    user_id: Optional[str] = None
    issuing_organization: Optional[str] = None
    has_expired: Optional[bool] = None
    sort_by: Literal['issue_date', 'expiration_date', 'name', 'created_at'] = 'issue_date'


# --- Blog ---
class BlogPostCreate(Schema):
    post_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
    excerpt: Optional[str] = None
    content: str = Field(..., min_length=1)
    published_at: Optional[IsoDate] = None
    is_published: bool = False
    read_time_minutes: Optional[int] = Field(None, gt=0)
    tags: Optional[str] = None
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = Field(None, max_length=500)


BlogPostUpdate = partial(BlogPostCreate, 'BlogPostUpdate')


class BlogPostSearch(SearchParams):
    query: Optional[str] = None
    user_id: Optional[str] = None
    is_published: Optional[bool] = None
    tags: Optional[str] = None
    sort_by: Literal['created_at', 'published_at', 'title', 'updated_at'] = 'created_at'


# --- Contact ---
ContactStatus = Literal['new', 'read', 'replied', 'archived']


class ContactMessageCreate(Schema):
    message_id: Optional[str] = Field(None, max_length=64)
    user_id: Optional[str] = Field(None, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    email: Email
    subject: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    message: str = Field(..., min_length=1)
    status: ContactStatus = 'new'
    ip_address: Optional[str] = Field(None, max_length=50)
    user_agent: Optional[str] = None


ContactMessageUpdate = partial(ContactMessageCreate, 'ContactMessageUpdate')


class ContactMessageSearch(SearchParams):
    query: Optional[str] = None
    email: Optional[str] = None
    user_id: Optional[str] = None
    status: Optional[ContactStatus] = None
    sort_by: Literal['created_at', 'name', 'status'] = 'created_at'


# --- Resume downloads ---
class ResumeDownloadCreate(Schema):
    download_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    download_url: Url
    file_format: Optional[str] = Field(None, max_length=20)
    file_size_bytes: Optional[int] = Field(None, gt=0)


ResumeDownloadUpdate = partial(ResumeDownloadCreate, 'ResumeDownloadUpdate')


class ResumeDownloadSearch(SearchParams):
    user_id: Optional[str] = None
    file_format: Optional[str] = None
    sort_by: Literal['created_at'] = 'created_at'


# --- Site settings ---
class SiteSettingCreate(Schema):
    setting_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    privacy_policy_content: Optional[str] = None
    terms_of_service_content: Optional[str] = None
    cookie_policy_content: Optional[str] = None
    seo_meta_title: Optional[str] = Field(None, max_length=255)
    seo_meta_description: Optional[str] = Field(None, max_length=500)
    google_analytics_id: Optional[str] = Field(None, max_length=100)


SiteSettingUpdate = partial(SiteSettingCreate, 'SiteSettingUpdate')


class SiteSettingSearch(SearchParams):
    user_id: Optional[str] = None
    sort_by: Literal['created_at', 'updated_at'] = 'created_at'


# --- Testimonials ---
class TestimonialCreate(Schema):
    testimonial_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    client_name: str = Field(..., min_length=1, max_length=255)
    client_position: Optional[str] = Field(None, max_length=255)
    company_name: Optional[str] = Field(None, max_length=255)
    content: str = Field(..., min_length=1)
    rating: Optional[int] = Field(None, ge=1, le=5)
    client_photo_url: Optional[Url] = None
    project_reference: Optional[str] = Field(None, max_length=255)
    display_order: Optional[int] = 0


TestimonialUpdate = partial(TestimonialCreate, 'TestimonialUpdate')


class TestimonialSearch(SearchParams):
    user_id: Optional[str] = None
    project_reference: Optional[str] = None
    company_name: Optional[str] = None
    min_rating: Optional[int] = Field(None, ge=1, le=5)
    sort_by: Literal['created_at', 'rating', 'display_order', 'client_name'] = 'created_at'


# --- Social links ---
class SocialMediaLinkCreate(Schema):
    link_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    platform: str = Field(..., min_length=1, max_length=100)
    url: Url
    display_order: Optional[int] = 0


SocialMediaLinkUpdate = partial(SocialMediaLinkCreate, 'SocialMediaLinkUpdate')


class SocialMediaLinkSearch(SearchParams):
    user_id: Optional[str] = None
    platform: Optional[str] = None
    sort_by: Literal['display_order', 'platform', 'created_at'] = 'display_order'
    sort_order: Order = 'asc'


# --- Analytics ---
class PageVisitCreate(Schema):
    visit_id: Optional[str] = Field(None, max_length=64)
    user_id: Optional[str] = Field(None, max_length=64)
    page_path: str = Field(..., min_length=1, max_length=500)
    ip_address: Optional[str] = Field(None, max_length=50)
    user_agent: Optional[str] = None
    referrer: Optional[str] = Field(None, max_length=500)


PageVisitUpdate = partial(PageVisitCreate, 'PageVisitUpdate')


class PageVisitSearch(SearchParams):
    user_id: Optional[str] = None
    page_path: Optional[str] = None
    date_from: Optional[IsoDate] = None
    date_to: Optional[IsoDate] = None
    sort_by: Literal['visited_at', 'page_path'] = 'visited_at'


class SectionVisitCreate(Schema):
    section_visit_id: Optional[str] = Field(None, max_length=64)
    user_id: Optional[str] = Field(None, max_length=64)
    page_path: str = Field(..., min_length=1, max_length=500)
    section_name: str = Field(..., min_length=1, max_length=100)
    visit_count: int = Field(1, ge=1)


SectionVisitUpdate = partial(SectionVisitCreate, 'SectionVisitUpdate')


class SectionVisitSearch(SearchParams):
    user_id: Optional[str] = None
    page_path: Optional[str] = None
    section_name: Optional[str] = None
    sort_by: Literal['last_visited_at', 'visit_count', 'section_name'] = 'last_visited_at'


# --- Media ---
class MediaAssetCreate(Schema):
    asset_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    filename: str = Field(..., min_length=1, max_length=255)
    url: Url
    content_type: str = Field(..., min_length=1, max_length=100)
    file_size_bytes: int = Field(..., gt=0)
    alt_text: Optional[str] = Field(None, max_length=255)


MediaAssetUpdate = partial(MediaAssetCreate, 'MediaAssetUpdate')


class MediaAssetSearch(SearchParams):
    user_id: Optional[str] = None
    content_type: Optional[str] = None
    filename: Optional[str] = None
    sort_by: Literal['uploaded_at', 'filename', 'file_size_bytes'] = 'uploaded_at'


# --- Key facts ---
class KeyFactCreate(Schema):
    fact_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    content: str = Field(..., min_length=1)
    display_order: int = 0


KeyFactUpdate = partial(KeyFactCreate, 'KeyFactUpdate')


class KeyFactSearch(SearchParams):
    user_id: Optional[str] = None
    sort_by: Literal['display_order', 'created_at'] = 'display_order'
    sort_order: Order = 'asc'


# --- App settings / navigation ---
class AppSettingCreate(Schema):
    setting_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    theme_mode: Literal['light', 'dark'] = 'light'
    font_scale: float = Field(1.0, ge=0.5, le=2.0)
    hidden_sections: Optional[JsonText] = None


AppSettingUpdate = partial(AppSettingCreate, 'AppSettingUpdate')


class AppSettingSearch(SearchParams):
    user_id: Optional[str] = None
    theme_mode: Optional[Literal['light', 'dark']] = None
    sort_by: Literal['updated_at'] = 'updated_at'


class NavigationPreferenceCreate(Schema):
    preference_id: Optional[str] = Field(None, max_length=64)
    user_id: str = Field(..., max_length=64)
    active_tab: Optional[str] = Field(None, max_length=50)
    hidden_tabs: Optional[JsonText] = None


NavigationPreferenceUpdate = partial(NavigationPreferenceCreate, 'NavigationPreferenceUpdate')


class NavigationPreferenceSearch(SearchParams):
    user_id: Optional[str] = None
    sort_by: Literal['updated_at'] = 'updated_at'
