"""
View loading and the page view models.

``load_view`` wraps one fetch in the loading / error / success states the
pages render; the remaining functions reshape API payloads for a page.
"""
import json
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Optional

from portfolio.client.api import ApiError

LOADING = 'loading'
ERROR = 'error'
SUCCESS = 'success'

# bottom tab bar, in display order
NAV_TABS = (
    {'id': 'home', 'label': 'Home'},
    {'id': 'skills', 'label': 'Skills'},
    {'id': 'projects', 'label': 'Projects'},
    {'id': 'experience', 'label': 'Experience'},
    {'id': 'more-info', 'label': 'More Info'},
)


@dataclass
class ViewState:
    status: str = LOADING
    data: Any = None
    error_message: Optional[str] = None
    retry: Optional[Callable[[], 'ViewState']] = field(default=None, repr=False, compare=False)

    @property
    def is_loading(self):
        return self.status == LOADING

    @property
    def is_error(self):
        return self.status == ERROR

    @property
    def is_success(self):
        return self.status == SUCCESS


def load_view(fetch, transform=None):
    """Run ``fetch`` and return the resulting state; ``state.retry()`` runs it again."""

    def run():
        try:
            data = fetch()
        except ApiError as exc:
            return ViewState(ERROR, error_message=exc.message or 'Something went wrong', retry=run)
        if transform is not None:
            data = transform(data)
        return ViewState(SUCCESS, data=data, retry=run)

    return run()


def _order(item):
    return item.get('display_order') or 0


def _split_list(value):
    if not value:
        return []
    if isinstance(value, list):
        return value
    return [part.strip() for part in value.split(',') if part.strip()]


def skills_by_category(skills):
    grouped = {}
    for skill in sorted(skills, key=lambda s: (_order(s), s.get('name') or '')):
        grouped.setdefault(skill.get('category') or 'Other', []).append(skill)
    return dict(sorted(grouped.items()))


def experience_timeline(experiences):
    """Current roles first, then most recent start date first."""
    ordered = sorted(experiences, key=lambda e: e.get('start_date') or '', reverse=True)
    return sorted(ordered, key=lambda e: not e.get('is_current'))


def project_detail(project, images):
    return {
        'project': project,
        'technologies': _split_list(project.get('technologies_used')),
        'screenshots': sorted(images, key=_order),
    }


def certification_status(certification, today=None):
    today = (today or date.today()).isoformat()
    expiration = certification.get('expiration_date')
    return {**certification, 'is_expired': bool(expiration) and expiration[:10] < today}


def about_page(profile, today=None):
    """Shape the ``GET /users/<id>`` aggregate for the About page."""
    return {
        'user': profile['user'],
        'key_facts': sorted(profile.get('key_facts', []), key=_order),
        'experiences': experience_timeline(profile.get('experiences', [])),
        'educations': sorted(profile.get('educations', []), key=lambda e: e.get('start_date') or '', reverse=True),
        'certifications': [certification_status(c, today) for c in profile.get('certifications', [])],
        'testimonials': sorted(profile.get('testimonials', []), key=_order),
        'social_media_links': sorted(profile.get('social_media_links', []), key=_order),
    }


def visible_tabs(hidden_tabs=None):
    if isinstance(hidden_tabs, str):
        try:
            hidden_tabs = json.loads(hidden_tabs)
        except ValueError:
            hidden_tabs = _split_list(hidden_tabs)
    hidden = set(hidden_tabs or ())
    return [tab for tab in NAV_TABS if tab['id'] not in hidden]
