from portfolio import db


class SerializerMixin:
    """Column-by-column dict of a row, in table order."""

    hidden_fields = ()

    def to_dict(self):
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in self.hidden_fields
        }

    @classmethod
    def row_to_dict(cls, row):
        return {key: value for key, value in row._mapping.items() if key not in cls.hidden_fields}


def owner_fk(nullable=False):
    return db.Column(
        db.String(64),
        db.ForeignKey('users.user_id', ondelete='CASCADE'),
        nullable=nullable,
        index=True,
    )


class User(SerializerMixin, db.Model):
    __tablename__ = 'users'
    hidden_fields = ('password_hash',)

    user_id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    professional_title = db.Column(db.String(255))
    tagline = db.Column(db.String(500))
    bio = db.Column(db.Text)
    profile_image_url = db.Column(db.String(500))
    header_image_url = db.Column(db.String(500))
    avatar_url = db.Column(db.String(500))
    video_embed_url = db.Column(db.String(500))
    phone_number = db.Column(db.String(50))
    location = db.Column(db.String(255))
    github_url = db.Column(db.String(500))
    linkedin_url = db.Column(db.String(500))
    twitter_url = db.Column(db.String(500))
    website_url = db.Column(db.String(500))
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class Skill(SerializerMixin, db.Model):
    __tablename__ = 'skills'

    skill_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    category = db.Column(db.String(100), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    # integer 0-100 or a label such as "Expert"; stored as text either way
    proficiency_level = db.Column(db.String(20))
    description = db.Column(db.Text)
    icon_name = db.Column(db.String(100))
    icon_url = db.Column(db.String(500))
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class Project(SerializerMixin, db.Model):
    __tablename__ = 'projects'

    project_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    title = db.Column(db.String(255), nullable=False)
    short_description = db.Column(db.String(500))
    description = db.Column(db.Text, nullable=False)
    project_type = db.Column(db.String(100))
    role_in_project = db.Column(db.String(100))
    problem_statement = db.Column(db.Text)
    solution_approach = db.Column(db.Text)
    technical_challenges = db.Column(db.Text)
    technologies_used = db.Column(db.Text)
    thumbnail_url = db.Column(db.String(500))
    live_demo_url = db.Column(db.String(500))
    github_repo_url = db.Column(db.String(500))
    app_store_url = db.Column(db.String(500))
    play_store_url = db.Column(db.String(500))
    case_study_url = db.Column(db.String(500))
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(50))
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)
    images = db.relationship('ProjectImage', backref='project', cascade='all, delete-orphan',
                             passive_deletes=True)


class ProjectImage(SerializerMixin, db.Model):
    __tablename__ = 'project_images'

    image_id = db.Column(db.String(64), primary_key=True)
    project_id = db.Column(db.String(64), db.ForeignKey('projects.project_id', ondelete='CASCADE'),
                           nullable=False, index=True)
    image_url = db.Column(db.String(500), nullable=False)
    alt_text = db.Column(db.String(255))
    caption = db.Column(db.String(500))
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.String(40), nullable=False)


class Experience(SerializerMixin, db.Model):
    __tablename__ = 'experiences'

    experience_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    company_name = db.Column(db.String(255), nullable=False)
    company_logo_url = db.Column(db.String(500))
    job_title = db.Column(db.String(255), nullable=False)
    start_date = db.Column(db.String(40), nullable=False)
    end_date = db.Column(db.String(40))
    is_current = db.Column(db.Boolean, nullable=False, default=False)
    location = db.Column(db.String(255))
    description = db.Column(db.Text)
    technologies_used = db.Column(db.Text)
    achievements = db.Column(db.Text)
    company_website_url = db.Column(db.String(500))
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class Education(SerializerMixin, db.Model):
    __tablename__ = 'educations'

    education_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    institution_name = db.Column(db.String(255), nullable=False)
    institution_logo_url = db.Column(db.String(500))
    degree = db.Column(db.String(255), nullable=False)
    field_of_study = db.Column(db.String(255))
    start_date = db.Column(db.String(40), nullable=False)
    end_date = db.Column(db.String(40))
    is_current = db.Column(db.Boolean, nullable=False, default=False)
    grade = db.Column(db.String(50))
    location = db.Column(db.String(255))
    description = db.Column(db.Text)
    institution_website_url = db.Column(db.String(500))
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class Certification(SerializerMixin, db.Model):
    __tablename__ = 'certifications'

    certification_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    name = db.Column(db.String(255), nullable=False)
    issuing_organization = db.Column(db.String(255), nullable=False)
    issue_date = db.Column(db.String(40), nullable=False)
    expiration_date = db.Column(db.String(40))
    credential_id = db.Column(db.String(255))
    credential_url = db.Column(db.String(500))
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class BlogPost(SerializerMixin, db.Model):
    __tablename__ = 'blog_posts'
    __table_args__ = (db.UniqueConstraint('user_id', 'slug', name='uq_blog_posts_user_slug'),)

    post_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False)
    excerpt = db.Column(db.Text)
    content = db.Column(db.Text, nullable=False)
    published_at = db.Column(db.String(40))
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    read_time_minutes = db.Column(db.Integer)
    tags = db.Column(db.Text)
    meta_title = db.Column(db.String(255))
    meta_description = db.Column(db.String(500))
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class ContactMessage(SerializerMixin, db.Model):
    __tablename__ = 'contact_messages'

    message_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk(nullable=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='new')
    ip_address = db.Column(db.String(50))
    user_agent = db.Column(db.Text)
    created_at = db.Column(db.String(40), nullable=False)


class ResumeDownload(SerializerMixin, db.Model):
    __tablename__ = 'resume_downloads'

    download_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    download_url = db.Column(db.String(500), nullable=False)
    file_format = db.Column(db.String(20))
    file_size_bytes = db.Column(db.Integer)
    created_at = db.Column(db.String(40), nullable=False)


class SiteSetting(SerializerMixin, db.Model):
    __tablename__ = 'site_settings'

    setting_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    privacy_policy_content = db.Column(db.Text)
    terms_of_service_content = db.Column(db.Text)
    cookie_policy_content = db.Column(db.Text)
    seo_meta_title = db.Column(db.String(255))
    seo_meta_description = db.Column(db.String(500))
    google_analytics_id = db.Column(db.String(100))
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class Testimonial(SerializerMixin, db.Model):
    __tablename__ = 'testimonials'

    testimonial_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    client_name = db.Column(db.String(255), nullable=False)
    client_position = db.Column(db.String(255))
    company_name = db.Column(db.String(255))
    content = db.Column(db.Text, nullable=False)
    rating = db.Column(db.Integer)
    client_photo_url = db.Column(db.String(500))
    project_reference = db.Column(db.String(255))
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class SocialMediaLink(SerializerMixin, db.Model):
    __tablename__ = 'social_media_links'

    link_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    platform = db.Column(db.String(100), nullable=False)
    url = db.Column(db.String(500), nullable=False)
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class PageVisit(SerializerMixin, db.Model):
    __tablename__ = 'page_visits'

    visit_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk(nullable=True)
    page_path = db.Column(db.String(500), nullable=False)
    ip_address = db.Column(db.String(50))
    user_agent = db.Column(db.Text)
    referrer = db.Column(db.String(500))
    visited_at = db.Column(db.String(40), nullable=False)


class SectionVisit(SerializerMixin, db.Model):
    __tablename__ = 'section_visits'

    section_visit_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk(nullable=True)
    page_path = db.Column(db.String(500), nullable=False)
    section_name = db.Column(db.String(100), nullable=False)
    visit_count = db.Column(db.Integer, nullable=False, default=1)
    last_visited_at = db.Column(db.String(40), nullable=False)


class MediaAsset(SerializerMixin, db.Model):
    __tablename__ = 'media_assets'

    asset_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    filename = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(500), nullable=False)
    content_type = db.Column(db.String(100), nullable=False)
    file_size_bytes = db.Column(db.Integer, nullable=False)
    alt_text = db.Column(db.String(255))
    uploaded_at = db.Column(db.String(40), nullable=False)


class KeyFact(SerializerMixin, db.Model):
    __tablename__ = 'key_facts'

    fact_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    content = db.Column(db.Text, nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)


class AppSetting(SerializerMixin, db.Model):
    __tablename__ = 'app_settings'

    setting_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    theme_mode = db.Column(db.String(50), nullable=False, default='light')
    font_scale = db.Column(db.Float, nullable=False, default=1.0)
    hidden_sections = db.Column(db.Text)
    updated_at = db.Column(db.String(40), nullable=False)


class NavigationPreference(SerializerMixin, db.Model):
    __tablename__ = 'navigation_preferences'

    preference_id = db.Column(db.String(64), primary_key=True)
    user_id = owner_fk()
    active_tab = db.Column(db.String(50))
    hidden_tabs = db.Column(db.Text)
    updated_at = db.Column(db.String(40), nullable=False)
