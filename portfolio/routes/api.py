from flask import jsonify, request
from sqlalchemy import asc, delete, desc, select

from portfolio import db
from portfolio.errors import not_found
from portfolio.models import (
    AppSetting,
    BlogPost,
    Certification,
    ContactMessage,
    Education,
    Experience,
    KeyFact,
    MediaAsset,
    NavigationPreference,
    PageVisit,
    Project,
    ProjectImage,
    ResumeDownload,
    SectionVisit,
    SiteSetting,
    Skill,
    SocialMediaLink,
    Testimonial,
    User,
)
from portfolio import schemas
from portfolio.queries import at_least, has_expired, on_or_before
from portfolio.routes import api_bp
from portfolio.routes.auth import require_owner, token_required
from portfolio.routes.crud import Parent, Resource, register_resource, search_items, update_item
from portfolio.utils.helpers import client_ip, now_iso
from portfolio.utils.logger import get_logger

logger = get_logger(__name__)


def capture_client(values):
    """Visitor details come from the request, not the body."""
    values['ip_address'] = client_ip()
    values['user_agent'] = request.headers.get('User-Agent')


# --- Users ---
# Described like the other resources but routed by hand below; users are
# created through /auth/register only.
USERS = Resource(
    name='user',
    model=User,
    slug='users',
    id_prefix='user',
    create_schema=schemas.UserCreate,
    update_schema=schemas.UserUpdate,
    search_schema=schemas.UserSearch,
    text_columns=('name', 'email'),
)

# --- Skills ---
SKILLS = register_resource(Resource(
    name='skill',
    model=Skill,
    slug='skills',
    id_prefix='skill',
    create_schema=schemas.SkillCreate,
    update_schema=schemas.SkillUpdate,
    search_schema=schemas.SkillSearch,
    text_columns=('name', 'description'),
))

# --- Projects ---
PROJECTS = register_resource(Resource(
    name='project',
    model=Project,
    slug='projects',
    id_prefix='proj',
    create_schema=schemas.ProjectCreate,
    update_schema=schemas.ProjectUpdate,
    search_schema=schemas.ProjectSearch,
    text_columns=('title', 'description'),
    children=((ProjectImage, 'project_id'),),
))

PROJECT_IMAGES = register_resource(Resource(
    name='project image',
    model=ProjectImage,
    slug='project-images',
    id_prefix='img',
    collection='images',
    create_schema=schemas.ProjectImageCreate,
    update_schema=schemas.ProjectImageUpdate,
    search_schema=schemas.ProjectImageSearch,
    parent=Parent(model=Project, name='project', key='project_id', slug='projects',
                  sub_slugs=('images', 'screenshots')),
))

# --- Experience & Education ---
EXPERIENCES = register_resource(Resource(
    name='experience',
    model=Experience,
    slug='experiences',
    id_prefix='exp',
    create_schema=schemas.ExperienceCreate,
    update_schema=schemas.ExperienceUpdate,
    search_schema=schemas.ExperienceSearch,
    like_fields=('company_name',),
))

EDUCATIONS = register_resource(Resource(
    name='education',
    model=Education,
    slug='educations',
    id_prefix='edu',
    create_schema=schemas.EducationCreate,
    update_schema=schemas.EducationUpdate,
    search_schema=schemas.EducationSearch,
    like_fields=('institution_name', 'degree'),
    aliases=('education',),
))

CERTIFICATIONS = register_resource(Resource(
    name='certification',
    model=Certification,
    slug='certifications',
    id_prefix='cert',
    create_schema=schemas.CertificationCreate,
    update_schema=schemas.CertificationUpdate,
    search_schema=schemas.CertificationSearch,
    like_fields=('issuing_organization',),
    custom_filters={'has_expired': has_expired()},
))

# --- Blog ---
BLOG_POSTS = register_resource(Resource(
    name='blog post',
    model=BlogPost,
    slug='blog-posts',
    id_prefix='post',
    create_schema=schemas.BlogPostCreate,
    update_schema=schemas.BlogPostUpdate,
    search_schema=schemas.BlogPostSearch,
    text_columns=('title', 'content'),
    like_fields=('tags',),
))

# --- Contact & resume ---
CONTACT_MESSAGES = register_resource(Resource(
    name='contact message',
    model=ContactMessage,
    slug='contact-messages',
    id_prefix='msg',
    create_schema=schemas.ContactMessageCreate,
    update_schema=schemas.ContactMessageUpdate,
    search_schema=schemas.ContactMessageSearch,
    public_read=False,
    public_create=True,
    text_columns=('name', 'message'),
    like_fields=('email',),
    before_create=capture_client,
))

RESUME_DOWNLOADS = register_resource(Resource(
    name='resume download',
    model=ResumeDownload,
    slug='resume-downloads',
    id_prefix='dl',
    create_schema=schemas.ResumeDownloadCreate,
    update_schema=schemas.ResumeDownloadUpdate,
    search_schema=schemas.ResumeDownloadSearch,
))

# --- Site content ---
SITE_SETTINGS = register_resource(Resource(
    name='site setting',
    model=SiteSetting,
    slug='site-settings',
    id_prefix='site',
    create_schema=schemas.SiteSettingCreate,
    update_schema=schemas.SiteSettingUpdate,
    search_schema=schemas.SiteSettingSearch,
))

TESTIMONIALS = register_resource(Resource(
    name='testimonial',
    model=Testimonial,
    slug='testimonials',
    id_prefix='test',
    create_schema=schemas.TestimonialCreate,
    update_schema=schemas.TestimonialUpdate,
    search_schema=schemas.TestimonialSearch,
    like_fields=('company_name',),
    custom_filters={'min_rating': at_least('rating')},
))

SOCIAL_MEDIA_LINKS = register_resource(Resource(
    name='social media link',
    model=SocialMediaLink,
    slug='social-media-links',
    id_prefix='link',
    create_schema=schemas.SocialMediaLinkCreate,
    update_schema=schemas.SocialMediaLinkUpdate,
    search_schema=schemas.SocialMediaLinkSearch,
))

MEDIA_ASSETS = register_resource(Resource(
    name='media asset',
    model=MediaAsset,
    slug='media-assets',
    id_prefix='asset',
    create_schema=schemas.MediaAssetCreate,
    update_schema=schemas.MediaAssetUpdate,
    search_schema=schemas.MediaAssetSearch,
    like_fields=('filename',),
))

KEY_FACTS = register_resource(Resource(
    name='key fact',
    model=KeyFact,
    slug='key-facts',
    id_prefix='fact',
    create_schema=schemas.KeyFactCreate,
    update_schema=schemas.KeyFactUpdate,
    search_schema=schemas.KeyFactSearch,
))

# --- Analytics ---
PAGE_VISITS = register_resource(Resource(
    name='page visit',
    model=PageVisit,
    slug='page-visits',
    id_prefix='visit',
    create_schema=schemas.PageVisitCreate,
    update_schema=schemas.PageVisitUpdate,
    search_schema=schemas.PageVisitSearch,
    public_read=False,
    public_create=True,
    custom_filters={'date_from': at_least('visited_at'), 'date_to': on_or_before('visited_at')},
    before_create=capture_client,
))

SECTION_VISITS = register_resource(Resource(
    name='section visit',
    model=SectionVisit,
    slug='section-visits',
    id_prefix='sv',
    create_schema=schemas.SectionVisitCreate,
    update_schema=schemas.SectionVisitUpdate,
    search_schema=schemas.SectionVisitSearch,
    public_read=False,
    public_create=True,
    refresh_on={'visit_count': 'last_visited_at'},
))

# --- Preferences ---
APP_SETTINGS = register_resource(Resource(
    name='app setting',
    model=AppSetting,
    slug='app-settings',
    id_prefix='appset',
    create_schema=schemas.AppSettingCreate,
    update_schema=schemas.AppSettingUpdate,
    search_schema=schemas.AppSettingSearch,
    public_read=False,
))

NAVIGATION_PREFERENCES = register_resource(Resource(
    name='navigation preference',
    model=NavigationPreference,
    slug='navigation-preferences',
    id_prefix='nav',
    create_schema=schemas.NavigationPreferenceCreate,
    update_schema=schemas.NavigationPreferenceUpdate,
    search_schema=schemas.NavigationPreferenceSearch,
    public_read=False,
))

# Everything a user owns, children before parents
OWNED = (
    SKILLS, PROJECTS, EXPERIENCES, EDUCATIONS, CERTIFICATIONS, BLOG_POSTS, CONTACT_MESSAGES,
    RESUME_DOWNLOADS, SITE_SETTINGS, TESTIMONIALS, SOCIAL_MEDIA_LINKS, MEDIA_ASSETS, KEY_FACTS,
    PAGE_VISITS, SECTION_VISITS, APP_SETTINGS, NAVIGATION_PREFERENCES,
)


def owned_rows(resource, user_id, *clauses):
    """All of a user's rows for ``resource`` in its default listing order."""
    fields = resource.search_schema.model_fields
    column = resource.table.c[fields['sort_by'].default]
    direction = desc if fields['sort_order'].default == 'desc' else asc
    statement = (
        select(resource.table)
        .where(resource.table.c.user_id == user_id, *clauses)
        .order_by(direction(column), *resource.table.primary_key.columns)
    )
    return [resource.model.row_to_dict(row) for row in db.session.execute(statement)]


def user_aggregate(user):
    return {
        'user': user.to_dict(),
        'social_media_links': owned_rows(SOCIAL_MEDIA_LINKS, user.user_id),
        'skills': owned_rows(SKILLS, user.user_id),
        'projects': owned_rows(PROJECTS, user.user_id),
        'experiences': owned_rows(EXPERIENCES, user.user_id),
        'educations': owned_rows(EDUCATIONS, user.user_id),
        'certifications': owned_rows(CERTIFICATIONS, user.user_id),
        'key_facts': owned_rows(KEY_FACTS, user.user_id),
        'testimonials': owned_rows(TESTIMONIALS, user.user_id),
    }


# --- User Routes ---
@api_bp.route('/users', methods=['GET'])
def search_users():
    return search_items(USERS, {})


@api_bp.route('/users/<user_id>', methods=['GET'])
@token_required
def get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise not_found('user')
    return jsonify(user_aggregate(user))


@api_bp.route('/users/<user_id>', methods=['PATCH'])
@token_required
def update_user(user_id):
    require_owner(user_id)
    return update_item(USERS, user_id, {})


@api_bp.route('/users/<user_id>', methods=['DELETE'])
@token_required
def delete_user(user_id):
    require_owner(user_id)
    if db.session.get(User, user_id) is None:
        raise not_found('user')

    projects = select(Project.project_id).where(Project.user_id == user_id)
    try:
        db.session.execute(delete(ProjectImage.__table__).where(ProjectImage.project_id.in_(projects)))
        for resource in OWNED:
            db.session.execute(delete(resource.table).where(resource.table.c.user_id == user_id))
        db.session.execute(delete(User.__table__).where(User.user_id == user_id))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Deleted user %s and everything they own", user_id)
    return '', 204


@api_bp.route('/portfolio/<user_id>', methods=['GET'])
def get_portfolio(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise not_found('user')
    portfolio = user_aggregate(user)
    portfolio['blog_posts'] = owned_rows(BLOG_POSTS, user_id, BlogPost.is_published.is_(True))
    return jsonify(portfolio)


# --- Health ---
@api_bp.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'timestamp': now_iso()})
